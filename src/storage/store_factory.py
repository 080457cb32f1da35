# src/storage/store_factory.py - v2
"""Factory: instantiate the blob store from configuration."""

from __future__ import annotations

from filestorage.config.settings import ConfigurationError, Settings
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.local_store import LocalBlobStore


def create_blob_store(settings: Settings) -> BaseBlobStore:
    """Create the configured blob store.

    Fails fast, before any operation is attempted, when the bucket (or the
    region for S3) is missing.

    Args:
        settings: Application settings (BLOB_STORE_BACKEND env var).

    Returns:
        BaseBlobStore instance.

    Raises:
        ConfigurationError: If required settings are missing.
        ValueError: If the backend is not supported.
    """
    if not settings.aws_storage_base_bucket:
        raise ConfigurationError(
            "AWS_STORAGE_BASE_BUCKET must be set"
        )

    if settings.blob_store_backend == "local":
        return LocalBlobStore(
            root=settings.local_store_root,
            bucket=settings.aws_storage_base_bucket,
        )

    if settings.blob_store_backend == "s3":
        from filestorage.storage.s3_store import S3BlobStore
        if not settings.aws_region and not settings.aws_endpoint_url:
            raise ConfigurationError(
                "AWS_REGION (or AWS_ENDPOINT_URL) must be set when BLOB_STORE_BACKEND=s3"
            )
        return S3BlobStore(
            bucket=settings.aws_storage_base_bucket,
            region=settings.aws_region or None,
            endpoint_url=settings.aws_endpoint_url or None,
            access_key_id=settings.aws_access_key_id or None,
            secret_access_key=settings.aws_secret_access_key or None,
            verify_ssl=settings.aws_ssl_verify,
        )

    raise ValueError(f"Unsupported blob store backend: {settings.blob_store_backend!r}")
