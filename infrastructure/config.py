from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from domain.value_objects.key_strategy import KeyStrategy

_STORAGE_CREDENTIALS = {
    "storage_account_id": "CLOUDFLARE_ACCOUNT_ID",
    "storage_access_key_id": "CLOUDFLARE_ACCESS_KEY_ID",
    "storage_access_key_secret": "CLOUDFLARE_ACCESS_KEY_SECRET",
    "storage_bucket_name": "CLOUDFLARE_BUCKET_NAME",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="ImageHost", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
    )

    # API
    api_host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    api_port: int = Field(default=8081, validation_alias="API_PORT")
    route_prefix: str = Field(
        default="",
        validation_alias="ROUTE_PREFIX",
        description='Prefix for the image routes, e.g. "/img" for /img/upload and /img/{key}.',
    )

    # Object storage (Cloudflare R2 or any S3-compatible endpoint)
    storage_account_id: str | None = Field(default=None, validation_alias="CLOUDFLARE_ACCOUNT_ID")
    storage_access_key_id: str | None = Field(
        default=None,
        validation_alias="CLOUDFLARE_ACCESS_KEY_ID",
    )
    storage_access_key_secret: str | None = Field(
        default=None,
        validation_alias="CLOUDFLARE_ACCESS_KEY_SECRET",
    )
    storage_bucket_name: str | None = Field(default=None, validation_alias="CLOUDFLARE_BUCKET_NAME")
    storage_endpoint_url: str | None = Field(
        default=None,
        validation_alias="STORAGE_ENDPOINT_URL",
        description="Explicit S3 endpoint. Defaults to the account's R2 endpoint.",
    )
    storage_region: str = Field(default="auto", validation_alias="STORAGE_REGION")

    # Blob Storage override (memory://, file://, ...) for development and tests
    blob_base_url: str | None = Field(default=None, validation_alias="BLOB_BASE_URL")
    blob_storage_options: dict = {}

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        validation_alias="ALLOWED_ORIGINS",
    )
    frontend_url: str | None = Field(
        default=None,
        validation_alias="FRONTEND_URL",
        description="Origin returned to callers outside the allow-list.",
    )

    # Uploads
    public_base_url: str | None = Field(
        default=None,
        validation_alias="PUBLIC_BASE_URL",
        description="When set, upload responses include <PUBLIC_BASE_URL>/<filename> as url.",
    )
    key_strategy: KeyStrategy = Field(
        default=KeyStrategy.TIMESTAMP,
        validation_alias="KEY_STRATEGY",
        description="timestamp keeps the historical key format; random/content_hash collide less.",
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("route_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().strip("/")
        return f"/{value}" if value else ""

    @model_validator(mode="after")
    def _require_storage_credentials(self) -> "Settings":
        if self.blob_base_url:
            return self
        missing = [env for field, env in _STORAGE_CREDENTIALS.items() if not getattr(self, field)]
        if missing:
            msg = f"Missing required storage configuration: {', '.join(missing)}"
            raise ValueError(msg)
        return self

    @property
    def cors_default_origin(self) -> str:
        if self.frontend_url:
            return self.frontend_url
        return self.allowed_origins[0] if self.allowed_origins else "*"

    @property
    def cors_allowed_origins(self) -> list[str]:
        origins = list(self.allowed_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def storage_endpoint(self) -> str:
        if self.storage_endpoint_url:
            return self.storage_endpoint_url
        return f"https://{self.storage_account_id}.r2.cloudflarestorage.com"


settings = Settings()
