from __future__ import annotations

import structlog
from lagom import Container

from application.ports.blob_store import BlobStore
from application.use_cases.image_use_cases import RetrieveImageUseCase, UploadImageUseCase
from domain.services.storage_key_generator import StorageKeyGenerator
from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore
from infrastructure.config import Settings, settings

logger = structlog.get_logger()


def build_blob_store(app_settings: Settings) -> FsspecBlobStore:
    """Build the blob store from configuration.

    ``BLOB_BASE_URL`` wins when set; otherwise the Cloudflare R2 (or other
    S3-compatible) bucket is used through s3fs.
    """
    if app_settings.blob_base_url:
        return FsspecBlobStore(
            base_url=app_settings.blob_base_url,
            storage_options=app_settings.blob_storage_options,
        )

    return FsspecBlobStore(
        base_url=f"s3://{app_settings.storage_bucket_name}",
        storage_options={
            "key": app_settings.storage_access_key_id,
            "secret": app_settings.storage_access_key_secret,
            "endpoint_url": app_settings.storage_endpoint,
            "client_kwargs": {"region_name": app_settings.storage_region},
            **app_settings.blob_storage_options,
        },
    )


def create_container(app_settings: Settings | None = None) -> Container:
    app_settings = app_settings or settings
    container = Container()

    # Blob storage (fsspec), shared by every request
    blob_store_instance = build_blob_store(app_settings)
    container[BlobStore] = blob_store_instance
    logger.info(
        "blob_store_configured",
        base_url=blob_store_instance.base_url,
        key_strategy=app_settings.key_strategy.value,
    )

    container[StorageKeyGenerator] = StorageKeyGenerator(strategy=app_settings.key_strategy)

    # Register Use Cases
    container[UploadImageUseCase] = lambda c: UploadImageUseCase(
        blob_store=c[BlobStore],
        key_generator=c[StorageKeyGenerator],
        public_base_url=app_settings.public_base_url,
    )
    container[RetrieveImageUseCase] = lambda c: RetrieveImageUseCase(
        blob_store=c[BlobStore],
    )

    return container
