"""FastAPI dependency injection integration with Lagom."""

from functools import lru_cache

from lagom import Container

from infrastructure.di.container import create_container


@lru_cache
def get_container() -> Container:
    """Get the process-wide DI container.

    Cached so the blob store handle is built once and shared by every request.
    Tests replace it through ``app.dependency_overrides``.
    """
    return create_container()
