"""Tests for image upload and retrieval use cases."""

from __future__ import annotations

import re

import pytest
from returns.result import Failure, Success

from application.dtos.image_dtos import UPLOAD_SUCCESS_MESSAGE, UploadImageRequest
from application.ports.blob_store import StoredObject
from application.use_cases.image_use_cases import (
    FILE_REQUIRED_MESSAGE,
    IMAGE_REQUIRED_MESSAGE,
    RETRIEVE_FAILED_MESSAGE,
    UPLOAD_FAILED_MESSAGE,
    RetrieveImageUseCase,
    UploadImageUseCase,
)
from domain.exceptions import InfrastructureError
from domain.services.storage_key_generator import StorageKeyGenerator
from tests.mocks import FixedClock, MockBlobStore


def _upload_use_case(
    store: MockBlobStore,
    clock: FixedClock | None = None,
    public_base_url: str | None = None,
) -> UploadImageUseCase:
    generator = StorageKeyGenerator(clock=clock) if clock else StorageKeyGenerator()
    return UploadImageUseCase(
        blob_store=store,
        key_generator=generator,
        public_base_url=public_base_url,
    )


class TestUploadImageUseCase:
    @pytest.mark.asyncio
    async def test_upload_stores_payload_under_derived_key(
        self,
        mock_blob_store: MockBlobStore,
        fixed_clock: FixedClock,
        jpeg_bytes: bytes,
    ) -> None:
        use_case = _upload_use_case(mock_blob_store, fixed_clock)

        result = await use_case.execute(
            jpeg_bytes,
            UploadImageRequest(filename="cat.jpg", mime_type="image/jpeg"),
        )

        assert isinstance(result, Success)
        response = result.unwrap()
        assert response.message == UPLOAD_SUCCESS_MESSAGE
        assert response.filename == "cat-c5d6e7f8.jpg"
        assert response.url is None
        assert mock_blob_store.put_calls == [("cat-c5d6e7f8.jpg", jpeg_bytes, "image/jpeg")]

    @pytest.mark.asyncio
    async def test_upload_includes_public_url_when_configured(
        self,
        mock_blob_store: MockBlobStore,
        fixed_clock: FixedClock,
        png_bytes: bytes,
    ) -> None:
        use_case = _upload_use_case(
            mock_blob_store,
            fixed_clock,
            public_base_url="https://img.example.com/",
        )

        result = await use_case.execute(
            png_bytes,
            UploadImageRequest(filename="my photo.png", mime_type="image/png"),
        )

        assert result.unwrap().url == "https://img.example.com/my%20photo-c5d6e7f8.png"

    @pytest.mark.asyncio
    async def test_missing_file_is_rejected(self, mock_blob_store: MockBlobStore) -> None:
        use_case = _upload_use_case(mock_blob_store)

        result = await use_case.execute(None, UploadImageRequest())

        assert isinstance(result, Failure)
        assert result.failure().category == "validation"
        assert result.failure().message == FILE_REQUIRED_MESSAGE
        assert mock_blob_store.put_calls == []

    @pytest.mark.asyncio
    async def test_file_without_name_is_rejected(
        self,
        mock_blob_store: MockBlobStore,
        png_bytes: bytes,
    ) -> None:
        use_case = _upload_use_case(mock_blob_store)

        result = await use_case.execute(
            png_bytes,
            UploadImageRequest(filename="", mime_type="image/png"),
        )

        assert result.failure().message == FILE_REQUIRED_MESSAGE
        assert mock_blob_store.put_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mime_type", ["application/pdf", "text/plain", None])
    async def test_non_image_is_rejected_without_store_write(
        self,
        mock_blob_store: MockBlobStore,
        mime_type: str | None,
    ) -> None:
        use_case = _upload_use_case(mock_blob_store)

        result = await use_case.execute(
            b"%PDF-1.7",
            UploadImageRequest(filename="paper.pdf", mime_type=mime_type),
        )

        assert isinstance(result, Failure)
        assert result.failure().category == "validation"
        assert result.failure().message == IMAGE_REQUIRED_MESSAGE
        assert mock_blob_store.put_calls == []

    @pytest.mark.asyncio
    async def test_store_failure_is_reported_without_detail(self, png_bytes: bytes) -> None:
        store = MockBlobStore(put_error=ConnectionError("endpoint r2.internal refused"))
        use_case = _upload_use_case(store)

        result = await use_case.execute(
            png_bytes,
            UploadImageRequest(filename="photo.png", mime_type="image/png"),
        )

        assert isinstance(result, Failure)
        assert result.failure().category == "storage_error"
        assert result.failure().message == UPLOAD_FAILED_MESSAGE
        assert "r2.internal" not in str(result.failure())
        assert len(store.put_calls) == 1

    @pytest.mark.asyncio
    async def test_same_instant_uploads_overwrite_each_other(
        self,
        mock_blob_store: MockBlobStore,
        fixed_clock: FixedClock,
    ) -> None:
        # Current behavior: the timestamp suffix is not collision-proof.
        use_case = _upload_use_case(mock_blob_store, fixed_clock)
        cmd = UploadImageRequest(filename="photo.png", mime_type="image/png")

        first = (await use_case.execute(b"first", cmd)).unwrap()
        second = (await use_case.execute(b"second", cmd)).unwrap()

        assert first.filename == second.filename
        assert mock_blob_store.objects[first.filename].data == b"second"

    @pytest.mark.asyncio
    async def test_default_generator_key_shape(
        self,
        mock_blob_store: MockBlobStore,
        jpeg_bytes: bytes,
    ) -> None:
        use_case = _upload_use_case(mock_blob_store)

        response = (
            await use_case.execute(
                jpeg_bytes,
                UploadImageRequest(filename="cat.jpg", mime_type="image/jpeg"),
            )
        ).unwrap()

        assert re.fullmatch(r"cat-[0-9a-f]{8}\.jpg", response.filename)


class TestRetrieveImageUseCase:
    @pytest.mark.asyncio
    async def test_returns_stored_object(self, mock_blob_store: MockBlobStore) -> None:
        await mock_blob_store.put("cat-00000001.jpg", b"jpeg", content_type="image/jpeg")
        use_case = RetrieveImageUseCase(mock_blob_store)

        result = await use_case.execute("cat-00000001.jpg")

        assert isinstance(result, Success)
        stored = result.unwrap()
        assert stored.data == b"jpeg"
        assert stored.content_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_unknown_key_is_not_found(self, mock_blob_store: MockBlobStore) -> None:
        use_case = RetrieveImageUseCase(mock_blob_store)

        result = await use_case.execute("missing-00000000.png")

        assert isinstance(result, Failure)
        assert result.failure().category == "not_found"
        assert result.failure().message == RETRIEVE_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_key_is_not_found_without_store_call(
        self,
        mock_blob_store: MockBlobStore,
    ) -> None:
        use_case = RetrieveImageUseCase(mock_blob_store)

        result = await use_case.execute("")

        assert result.failure().category == "not_found"
        assert mock_blob_store.get_calls == []

    @pytest.mark.asyncio
    async def test_store_failure_is_storage_error(self) -> None:
        store = MockBlobStore(get_error=TimeoutError("read timed out"))
        use_case = RetrieveImageUseCase(store)

        result = await use_case.execute("cat-00000001.jpg")

        assert result.failure().category == "storage_error"
        assert result.failure().message == RETRIEVE_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_unstable_object_is_storage_error(self) -> None:
        store = MockBlobStore(get_error=InfrastructureError("Object changed while being read"))
        use_case = RetrieveImageUseCase(store)

        result = await use_case.execute("cat-00000001.jpg")

        assert result.failure().category == "storage_error"
        assert result.failure().message == RETRIEVE_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_content_type_falls_back_to_octet_stream(
        self,
        mock_blob_store: MockBlobStore,
    ) -> None:
        mock_blob_store.objects["blob-00000001"] = StoredObject(
            key="blob-00000001",
            data=b"raw",
            content_type=None,
        )
        use_case = RetrieveImageUseCase(mock_blob_store)

        stored = (await use_case.execute("blob-00000001")).unwrap()

        assert stored.content_type == "application/octet-stream"
        assert stored.data == b"raw"
