from .key_strategy import KeyStrategy
from .mime_type import OCTET_STREAM, is_image_mime_type

__all__ = [
    "OCTET_STREAM",
    "KeyStrategy",
    "is_image_mime_type",
]
