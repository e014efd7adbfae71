from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import AppError
from application.dtos.image_dtos import UploadImageResponse
from domain.exceptions import ObjectNotFoundError
from domain.value_objects.mime_type import OCTET_STREAM, is_image_mime_type

if TYPE_CHECKING:
    from application.dtos.image_dtos import UploadImageRequest
    from application.ports.blob_store import BlobStore, StoredObject
    from domain.services.storage_key_generator import StorageKeyGenerator

logger = structlog.get_logger()

FILE_REQUIRED_MESSAGE = "File is required"
IMAGE_REQUIRED_MESSAGE = "Only image files are allowed"
UPLOAD_FAILED_MESSAGE = "Failed to upload file"
RETRIEVE_FAILED_MESSAGE = "Failed to retrieve file"


class UploadImageUseCase:
    """Validate an uploaded image and store it under a freshly derived key."""

    def __init__(
        self,
        blob_store: BlobStore,
        key_generator: StorageKeyGenerator,
        public_base_url: str | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.key_generator = key_generator
        self.public_base_url = public_base_url

    async def execute(
        self,
        data: bytes | None,
        cmd: UploadImageRequest,
    ) -> Result[UploadImageResponse, AppError]:
        """Store one uploaded image.

        Args:
            data: Payload of the ``file`` form part, or None when the part is missing
            cmd: Filename and content type declared by the client

        Returns:
            Result containing the upload response or an error. Store failures are
            logged here and reported with a generic message only.

        """
        if data is None or not cmd.filename:
            return Failure(AppError("validation", FILE_REQUIRED_MESSAGE))

        if not is_image_mime_type(cmd.mime_type):
            logger.info(
                "image_upload_rejected",
                filename=cmd.filename,
                mime_type=cmd.mime_type,
            )
            return Failure(AppError("validation", IMAGE_REQUIRED_MESSAGE))

        storage_key = self.key_generator.derive(cmd.filename, data)

        try:
            await self.blob_store.put(storage_key, data, content_type=cmd.mime_type)
        except Exception:
            logger.exception(
                "image_upload_failed",
                storage_key=storage_key,
                mime_type=cmd.mime_type,
            )
            return Failure(AppError("storage_error", UPLOAD_FAILED_MESSAGE))

        logger.info(
            "image_uploaded",
            storage_key=storage_key,
            mime_type=cmd.mime_type,
            size_bytes=len(data),
        )
        return Success(
            UploadImageResponse(filename=storage_key, url=self._public_url(storage_key)),
        )

    def _public_url(self, storage_key: str) -> str | None:
        if not self.public_base_url:
            return None
        return f"{self.public_base_url.rstrip('/')}/{quote(storage_key)}"


class RetrieveImageUseCase:
    """Fetch a stored image by its storage key."""

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    async def execute(self, storage_key: str) -> Result[StoredObject, AppError]:
        if not storage_key:
            return Failure(AppError("not_found", RETRIEVE_FAILED_MESSAGE))

        try:
            stored = await self.blob_store.get(storage_key)
        except ObjectNotFoundError:
            logger.info("image_not_found", storage_key=storage_key)
            return Failure(AppError("not_found", RETRIEVE_FAILED_MESSAGE))
        except Exception:
            logger.exception("image_retrieval_failed", storage_key=storage_key)
            return Failure(AppError("storage_error", RETRIEVE_FAILED_MESSAGE))

        if not stored.content_type:
            stored = replace(stored, content_type=OCTET_STREAM)
        return Success(stored)
