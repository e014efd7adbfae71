"""Error handling middleware and decorators for API routes."""

import functools
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import structlog
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from returns.result import Failure, Success
from starlette.exceptions import HTTPException as StarletteHTTPException

from interfaces.api.routes.helpers import _map_app_error_to_http_exception

if TYPE_CHECKING:
    from typing import Any

logger = structlog.get_logger()

T_co = TypeVar("T_co")


def _raise_mapped_http_error(failure: object) -> None:
    error = _map_app_error_to_http_exception(failure)
    raise error from None


def _raise_unexpected_result_type() -> None:
    detail = "Unexpected result type"
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    ) from None


def handle_use_case_errors(
    func: Callable[..., Awaitable[T_co]],
) -> Callable[..., Awaitable[T_co]]:
    """Handle common use case error patterns.

    This decorator centralizes error handling for use case execution:
    - Unwraps Success results
    - Maps Failure results to HTTP exceptions
    - Catches and logs unexpected errors, so no stack trace reaches the client

    Args:
        func: An async endpoint function that executes a use case

    Returns:
        Wrapped function with centralized error handling

    """

    @functools.wraps(func)
    async def wrapper(*args: "Any", **kwargs: "Any") -> T_co:  # noqa: ANN401
        try:
            result = await func(*args, **kwargs)

            # Handle result types
            if isinstance(result, Success):
                return result.unwrap()

            if isinstance(result, Failure):
                _raise_mapped_http_error(result.failure())

            # Unexpected result type
            _raise_unexpected_result_type()

        except StarletteHTTPException:
            # Re-raise HTTP exceptions as-is
            raise
        except Exception as exc:
            logger.exception(
                "unexpected_error",
                error=str(exc),
                error_type=type(exc).__name__,
                function=func.__name__,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            ) from exc

    return wrapper


async def http_exception_handler(
    request: Request,  # noqa: ARG001
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Render every HTTP error as ``{"error": <detail>}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )
