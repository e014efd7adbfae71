from __future__ import annotations

import asyncio
import hashlib
import json
import mimetypes

import fsspec
import structlog

from application.ports.blob_store import BlobStore, StoredObject
from domain.exceptions import InfrastructureError, ObjectNotFoundError, ValidationError

logger = structlog.get_logger()

# Protocols whose objects carry a Content-Type and ETag of their own.
_CONTENT_TYPE_PROTOCOLS = frozenset({"s3", "s3a"})
_LOCAL_PROTOCOLS = frozenset({"file", "local"})

# Everywhere else, object metadata lives in a JSON sidecar under this directory.
METADATA_DIR = ".meta"


def _is_safe_key(key: str) -> bool:
    if not key:
        return False
    parts = key.split("/")
    return parts[0] != METADATA_DIR and all(part not in {"", ".", ".."} for part in parts)


def _etag(data: bytes) -> str:
    return f'"{hashlib.md5(data, usedforsecurity=False).hexdigest()}"'


class FsspecBlobStore(BlobStore):
    """Blob store over any fsspec filesystem.

    ``s3://<bucket>`` with s3fs storage options talks to R2, MinIO or S3, which
    keep the content type and ETag on the object itself. ``memory://`` and
    ``file://`` serve development and tests; there the same metadata is written
    to ``.meta/<key>.json`` beside the objects. Filesystem calls block, so they
    run on a worker thread.
    """

    def __init__(self, base_url: str, *, storage_options: dict | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.storage_options = storage_options or {}
        self._fs, self._root = fsspec.core.url_to_fs(self.base_url, **self.storage_options)

        protocols = self._fs.protocol
        if isinstance(protocols, str):
            protocols = (protocols,)
        self._records_content_type = bool(_CONTENT_TYPE_PROTOCOLS.intersection(protocols))
        if _LOCAL_PROTOCOLS.intersection(protocols):
            self._fs.makedirs(self._path(METADATA_DIR), exist_ok=True)

    def _path(self, key: str) -> str:
        return f"{self._root.rstrip('/')}/{key}"

    def _metadata_path(self, key: str) -> str:
        return self._path(f"{METADATA_DIR}/{key}.json")

    async def put(self, key: str, data: bytes, *, content_type: str) -> None:
        if not _is_safe_key(key):
            msg = f"Invalid storage key: {key!r}"
            raise ValidationError(msg)

        if self._records_content_type:
            await asyncio.to_thread(
                self._fs.pipe_file,
                self._path(key),
                data,
                ContentType=content_type,
            )
        else:
            metadata = {"content_type": content_type, "etag": _etag(data)}
            await asyncio.to_thread(self._fs.pipe_file, self._path(key), data)
            await asyncio.to_thread(
                self._fs.pipe_file,
                self._metadata_path(key),
                json.dumps(metadata).encode(),
            )
        logger.debug("blob_stored", key=key, size_bytes=len(data), content_type=content_type)

    async def get(self, key: str) -> StoredObject:
        """Fetch ``key`` with the metadata of the very object whose bytes are returned.

        Metadata is read before and after the body. If it changed in between,
        the object was overwritten mid-read and the read fails rather than pair
        the bytes with another object's content type or ETag.
        """
        if not _is_safe_key(key):
            raise ObjectNotFoundError(key)

        try:
            metadata = await self._read_metadata(key)
            data = await asyncio.to_thread(self._fs.cat_file, self._path(key))
            confirmed = await self._read_metadata(key)
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ObjectNotFoundError(key) from e
        except OSError as e:
            msg = f"Object store read failed for {key!r}"
            raise InfrastructureError(msg) from e

        if confirmed != metadata:
            logger.warning("blob_changed_during_read", key=key)
            msg = f"Object {key!r} changed while being read"
            raise InfrastructureError(msg)

        return StoredObject(
            key=key,
            data=data,
            content_type=metadata.get("content_type") or mimetypes.guess_type(key)[0],
            etag=metadata.get("etag"),
        )

    async def _read_metadata(self, key: str) -> dict[str, str | None]:
        if self._records_content_type:
            info = await asyncio.to_thread(self._fs.info, self._path(key))
            return {"content_type": info.get("ContentType"), "etag": info.get("ETag")}

        try:
            raw = await asyncio.to_thread(self._fs.cat_file, self._metadata_path(key))
        except FileNotFoundError:
            # Objects placed in the directory by hand have no sidecar
            return {}
        return json.loads(raw)
