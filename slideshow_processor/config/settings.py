from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = "INFO"

    task_index: int = Field(
        ge=0,
        validation_alias=AliasChoices("task_index", "cloud_run_task_index"),
    )
    task_count: int = Field(
        ge=1,
        validation_alias=AliasChoices("task_count", "cloud_run_task_count"),
    )
    task_attempt: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("task_attempt", "cloud_run_task_attempt"),
    )

    backend_api_url: str
    backend_timeout_seconds: int = 30
    backend_processing_prefix: str = "/api/processing"
    backend_images_prefix: str = "/api/images"

    bucket_name: str = Field(
        validation_alias=AliasChoices("bucket_name", "gcs_bucket_name"),
    )
    storage_backend: Literal["s3", "local"] = "s3"
    storage_uri_scheme: str = "gs"
    storage_endpoint_url: str = "https://storage.googleapis.com"
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_region: str = "auto"
    storage_local_root: str = "./storage"

    max_attempts: int = 3
    staged_batch_limit: int = 50

    max_crop_percent: float = 50.0
    crop_anchor: Literal["entropy", "center"] = "entropy"
    render_contain: bool = True
    jpeg_quality: int = 90
    thumbnail_size: int = 200
    palette_size: int = 8
    write_palette_sidecar: bool = True

    @field_validator("backend_api_url", "bucket_name")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("backend_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _check_shard_bounds(self) -> "Settings":
        if self.task_index >= self.task_count:
            raise ValueError(
                f"task_index {self.task_index} is out of range for task_count {self.task_count}"
            )
        return self

    @property
    def current_attempt(self) -> int:
        """1-based attempt number reported to the backend."""
        return self.task_attempt + 1
