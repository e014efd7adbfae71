from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    key: str
    data: bytes = field(repr=False)
    content_type: str | None
    etag: str | None = None


class BlobStore(Protocol):
    async def put(self, key: str, data: bytes, *, content_type: str) -> None:
        """Store ``data`` under ``key``, replacing any existing object.

        The write is atomic-or-absent from the caller's point of view.
        """
        ...

    async def get(self, key: str) -> StoredObject:
        """Fetch the object stored under ``key``.

        Raises:
            ObjectNotFoundError: If no object exists under ``key``

        """
        ...
