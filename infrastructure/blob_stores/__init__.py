from .fsspec_blob_store import FsspecBlobStore

__all__ = ["FsspecBlobStore"]
