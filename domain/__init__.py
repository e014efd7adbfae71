"""Domain layer exports."""

from domain.exceptions import (
    DomainError,
    InfrastructureError,
    ObjectNotFoundError,
    ValidationError,
)
from domain.services import StorageKeyGenerator, split_filename
from domain.value_objects import OCTET_STREAM, KeyStrategy, is_image_mime_type

__all__ = [
    "OCTET_STREAM",
    "DomainError",
    "InfrastructureError",
    "KeyStrategy",
    "ObjectNotFoundError",
    "StorageKeyGenerator",
    "ValidationError",
    "is_image_mime_type",
    "split_filename",
]
