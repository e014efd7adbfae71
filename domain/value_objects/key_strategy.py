from enum import Enum


class KeyStrategy(str, Enum):
    """How the 8-hex-digit disambiguator of a storage key is produced.

    TIMESTAMP keeps keys compatible with previously issued ones but two uploads
    of the same filename within the same truncated instant collide.
    """

    TIMESTAMP = "timestamp"
    RANDOM = "random"
    CONTENT_HASH = "content_hash"
