# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for bucket, credentials, side-index backend, local
staging directories and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from filestorage.logging.handlers import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Blob store ===
    blob_store_backend: Literal["s3", "local"] = "s3"
    aws_storage_base_bucket: str = ""
    aws_region: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_endpoint_url: str = ""
    aws_ssl_verify: bool = True
    local_store_root: Path = Path("~/.filestorage/blobs")

    # === Side-index (upload session manifests) ===
    side_index_backend: Literal["json", "redis"] = "json"
    side_index_redis_url: str = ""
    side_index_root: Path = Path("~/.filestorage/index")

    # === Local staging ===
    upload_repository: Path = Path("~/.filestorage/upload")
    zip_repository: Path = Path("~/.filestorage/zip")

    # === Cache package ===
    # Re-upload work files even when the cache entry already holds them.
    force_version: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("log_rotation")
    @classmethod
    def validate_log_rotation(cls, v: str) -> str:  # noqa: N805
        parse_size(v)
        return v

    @field_validator("log_retention")
    @classmethod
    def validate_log_retention(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("log_retention must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field consistency rules."""
        errors: list[str] = []

        if self.side_index_backend == "redis" and not self.side_index_redis_url:
            errors.append(
                "SIDE_INDEX_BACKEND=redis requires SIDE_INDEX_REDIS_URL"
            )

        if bool(self.aws_access_key_id) != bool(self.aws_secret_access_key):
            errors.append(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def upload_repository_path(self) -> Path:
        return Path(self.upload_repository).expanduser()

    @property
    def zip_repository_path(self) -> Path:
        return Path(self.zip_repository).expanduser()

    @property
    def has_explicit_credentials(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or one-off tooling).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
