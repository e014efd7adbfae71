"""Domain service that derives storage keys for uploaded images."""

from __future__ import annotations

import hashlib
import secrets
import time
from collections.abc import Callable

from domain.value_objects.key_strategy import KeyStrategy

SUFFIX_HEX_DIGITS = 8
_SUFFIX_MASK = (1 << (SUFFIX_HEX_DIGITS * 4)) - 1


def split_filename(filename: str) -> tuple[str, str]:
    """Split a client filename into ``(base, ext)``.

    Directory components sent by the client are dropped. ``ext`` is everything
    from the last dot on, dot included, and is empty when there is no dot.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    base, dot, ext = name.rpartition(".")
    if not dot:
        return name, ""
    return base, f".{ext}"


class StorageKeyGenerator:
    """Derive ``<base>-<suffix><ext>`` keys for uploaded files.

    With the default TIMESTAMP strategy the suffix is the low-order 32 bits of
    the nanosecond wall clock. Two uploads of the same filename that read the
    same truncated instant get the same key, and the later write replaces the
    earlier object. RANDOM and CONTENT_HASH trade that compatibility for fewer
    collisions.
    """

    def __init__(
        self,
        strategy: KeyStrategy = KeyStrategy.TIMESTAMP,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.strategy = strategy
        self.clock = clock

    def suffix(self, data: bytes = b"") -> str:
        """Return the 8 lowercase hex digit disambiguator for one upload."""
        if self.strategy is KeyStrategy.RANDOM:
            return secrets.token_hex(SUFFIX_HEX_DIGITS // 2)
        if self.strategy is KeyStrategy.CONTENT_HASH:
            return hashlib.sha256(data).hexdigest()[:SUFFIX_HEX_DIGITS]
        return f"{self.clock() & _SUFFIX_MASK:0{SUFFIX_HEX_DIGITS}x}"

    def derive(self, filename: str, data: bytes = b"") -> str:
        """Derive the storage key for ``filename``.

        Args:
            filename: Original filename as sent by the client
            data: Payload bytes, only read by the CONTENT_HASH strategy

        Returns:
            The storage key, e.g. ``cat-1a2b3c4d.jpg``

        """
        base, ext = split_filename(filename)
        return f"{base}-{self.suffix(data)}{ext}"
