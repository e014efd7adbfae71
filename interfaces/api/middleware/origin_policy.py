"""CORS handling with an allow-list and a fallback origin."""

from collections.abc import Iterable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Accept"


def _vary_with_origin(vary: str | None) -> str:
    if not vary:
        return "Origin"
    if any(field.strip().lower() in {"origin", "*"} for field in vary.split(",")):
        return vary
    return f"{vary}, Origin"


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    """Stamp ``Access-Control-Allow-Origin`` on every response.

    Allow-listed origins are echoed back; any other caller (or a request with
    no ``Origin`` header) is given the default origin. Preflight requests are
    answered here with 204 and never reach the routes.
    """

    def __init__(
        self,
        app: ASGIApp,
        allowed_origins: Iterable[str],
        default_origin: str,
    ) -> None:
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)
        self.default_origin = default_origin

    def resolve_origin(self, origin: str | None) -> str:
        if origin and origin in self.allowed_origins:
            return origin
        return self.default_origin

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        allow_origin = self.resolve_origin(request.headers.get("origin"))

        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_204_NO_CONTENT)
            response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
            response.headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
        else:
            response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = allow_origin
        response.headers["Vary"] = _vary_with_origin(response.headers.get("Vary"))
        return response
