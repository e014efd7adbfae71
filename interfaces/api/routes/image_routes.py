from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from lagom import Container
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from application.dtos.image_dtos import ErrorResponse, UploadImageRequest, UploadImageResponse
from application.ports.blob_store import StoredObject
from application.use_cases.image_use_cases import RetrieveImageUseCase, UploadImageUseCase
from interfaces.api.middleware import handle_use_case_errors
from interfaces.dependencies import get_container

logger = structlog.get_logger()

router = APIRouter(tags=["images"])

UPLOAD_FIELD = "file"


def _object_response(stored: StoredObject) -> Response:
    headers = {"Content-Type": stored.content_type}
    if stored.etag:
        headers["ETag"] = stored.etag
    return Response(content=stored.data, headers=headers)


@router.post(
    "/upload",
    status_code=status.HTTP_200_OK,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
@handle_use_case_errors
async def upload_image(
    request: Request,
    container: Annotated[Container, Depends(get_container)],
) -> UploadImageResponse:
    """Upload one image sent as the ``file`` part of a multipart form.

    Returns:
        200 OK: ``{"message": ..., "filename": <storage key>}``
        400 Bad Request: file part missing, or not an image
        500 Internal Server Error: the object store rejected the write

    """
    data: bytes | None = None
    cmd = UploadImageRequest()

    try:
        async with request.form() as form:
            uploads = form.getlist(UPLOAD_FIELD)
            # Exactly one file part is accepted; anything else counts as missing
            if len(uploads) == 1 and isinstance(uploads[0], UploadFile):
                upload = uploads[0]
                data = await upload.read()
                cmd = UploadImageRequest(filename=upload.filename, mime_type=upload.content_type)
    except StarletteHTTPException as exc:
        # Malformed multipart body: reported like any other missing file
        logger.info("upload_form_unreadable", reason=exc.detail)
        data, cmd = None, UploadImageRequest()

    use_case = container[UploadImageUseCase]
    return await use_case.execute(data, cmd)


@router.get(
    "/{key:path}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
@handle_use_case_errors
async def get_image(
    key: str,
    container: Annotated[Container, Depends(get_container)],
) -> Response:
    """Return the raw bytes stored under ``key`` with their content type."""
    use_case = container[RetrieveImageUseCase]
    result = await use_case.execute(key)
    return result.map(_object_response)
