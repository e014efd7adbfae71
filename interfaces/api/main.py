"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache

import structlog
import uvicorn
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from infrastructure.config import Settings, settings
from infrastructure.di.container import create_container
from infrastructure.logging import setup_logging
from interfaces.api.middleware import OriginPolicyMiddleware, http_exception_handler
from interfaces.api.routes.image_routes import router as image_router
from interfaces.dependencies import get_container

# Configure structured logging
setup_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    logger.info("app_starting", env=settings.app_env)

    # Build the container (and the blob store handle) before taking traffic,
    # so a broken storage configuration stops startup.
    container_provider = app.dependency_overrides.get(get_container, get_container)
    container_provider()

    logger.info("app_ready")

    yield

    logger.info("app_shutting_down")
    logger.info("app_stopped")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    The process-wide container backs the default settings. Any other
    ``app_settings`` get a container of their own, built on first use, so the
    app never talks to the globally configured store.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        description="Image hosting API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        OriginPolicyMiddleware,
        allowed_origins=app_settings.cors_allowed_origins,
        default_origin=app_settings.cors_default_origin,
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    if app_settings is not settings:
        # Apps built from their own settings also get their own store and use cases
        app.dependency_overrides[get_container] = lru_cache(maxsize=1)(
            lambda: create_container(app_settings),
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    # Registered last: the retrieval route matches any remaining path
    app.include_router(image_router, prefix=app_settings.route_prefix)

    return app


# Create app instance
app = create_app()


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
