"""Shared test fixtures and configuration."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from uuid import uuid4

# Settings are read at import time; point them at throwaway storage first.
os.environ.setdefault("BLOB_BASE_URL", "memory://image-host-tests")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000,https://img.example.com")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "image-host-test-logs"))

import pytest  # noqa: E402

from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore  # noqa: E402
from tests.mocks import FixedClock, MockBlobStore  # noqa: E402


JPEG_MAGIC = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Return a 10KB payload that starts like a JPEG."""
    body = bytes(range(256)) * 40
    return (JPEG_MAGIC + body)[: 10 * 1024]


@pytest.fixture
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Return a clock pinned to a known nanosecond instant."""
    return FixedClock(0x17F3A2B4C5D6E7F8)


@pytest.fixture
def mock_blob_store() -> MockBlobStore:
    return MockBlobStore()


@pytest.fixture
def memory_blob_store() -> FsspecBlobStore:
    """Return an fsspec memory store isolated from other tests."""
    return FsspecBlobStore(f"memory://image-host-{uuid4().hex}")
