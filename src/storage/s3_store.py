# src/storage/s3_store.py - v3
"""S3-compatible blob store (BLOB_STORE_BACKEND=s3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install boto3.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filestorage.core.errors import ObjectNotFoundError, StorageError, UploadFailedError
from filestorage.storage.base_blob_store import BaseBlobStore, BlobSource

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per request.
_DELETE_BATCH = 1000
_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3BlobStore(BaseBlobStore):
    """Blob store backed by S3-compatible object storage."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: S3 bucket name.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            access_key_id: Explicit access key (boto3 credential chain if None).
            secret_access_key: Explicit secret key.
            verify_ssl: Set False to skip TLS certificate verification.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 store: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if access_key_id and secret_access_key:
            kwargs["aws_access_key_id"] = access_key_id
            kwargs["aws_secret_access_key"] = secret_access_key
        if not verify_ssl:
            kwargs["verify"] = False

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        logger.info("Initialized S3 blob store for bucket '%s'", bucket)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _error_code(self, error: Exception) -> str:
        response = getattr(error, "response", None) or {}
        return str(response.get("Error", {}).get("Code", ""))

    def exists(self, key: str) -> bool:
        """Check if an S3 object exists."""
        try:
            self._s3.head_object(Bucket=self._bucket, Key=key)
            return True
        except self._s3.exceptions.ClientError as e:
            if self._error_code(e) in _MISSING_CODES:
                return False
            raise

    def get(self, key: str) -> bytes:
        """Read an S3 object."""
        try:
            response = self._s3.get_object(Bucket=self._bucket, Key=key)
        except self._s3.exceptions.ClientError as e:
            if self._error_code(e) in _MISSING_CODES:
                raise ObjectNotFoundError(
                    f"No such key: s3://{self._bucket}/{key}",
                    details={"bucket": self._bucket, "key": key},
                ) from e
            raise
        return response["Body"].read()

    def put(self, key: str, source: BlobSource) -> None:
        """Upload a local file or an in-memory payload."""
        from boto3.exceptions import S3UploadFailedError

        try:
            if isinstance(source, Path):
                self._s3.upload_file(str(source), self._bucket, key)
                size = source.stat().st_size
            else:
                body = source.encode("utf-8") if isinstance(source, str) else source
                self._s3.put_object(Bucket=self._bucket, Key=key, Body=body)
                size = len(body)
        except (self._s3.exceptions.ClientError, S3UploadFailedError, OSError) as e:
            raise UploadFailedError(
                f"Failed to upload s3://{self._bucket}/{key}: {e}",
                details={"bucket": self._bucket, "key": key, "error": str(e)},
            ) from e
        logger.debug("S3 put: s3://%s/%s (%d bytes)", self._bucket, key, size)

    def delete(self, key: str) -> None:
        """Delete an S3 object. Deleting a missing key is not an error."""
        try:
            self._s3.delete_object(Bucket=self._bucket, Key=key)
        except self._s3.exceptions.ClientError as e:
            raise StorageError(
                f"Failed to delete s3://{self._bucket}/{key}",
                details={"bucket": self._bucket, "key": key, "error": str(e)},
            ) from e
        logger.debug("S3 delete: s3://%s/%s", self._bucket, key)

    def delete_by_prefix(self, prefix: str) -> int:
        """Delete all objects under a prefix in batches.

        Raises:
            StorageError: If a batch request fails or S3 reports keys it did
                not delete. ``details["removed"]`` counts the keys that went.
        """
        keys = self.list_by_prefix(prefix)
        errors: list[dict] = []
        for start in range(0, len(keys), _DELETE_BATCH):
            chunk = keys[start:start + _DELETE_BATCH]
            try:
                response = self._s3.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": k} for k in chunk], "Quiet": True},
                )
            except self._s3.exceptions.ClientError as e:
                raise StorageError(
                    f"Failed to delete prefix s3://{self._bucket}/{prefix}",
                    details={
                        "bucket": self._bucket, "prefix": prefix,
                        "removed": start - len(errors), "error": str(e),
                    },
                ) from e
            errors.extend(response.get("Errors", []))

        removed = len(keys) - len(errors)
        if errors:
            raise StorageError(
                f"S3 kept {len(errors)} of {len(keys)} objects under s3://{self._bucket}/{prefix}",
                details={
                    "bucket": self._bucket, "prefix": prefix, "removed": removed,
                    "failed": [{"key": err.get("Key"), "code": err.get("Code")} for err in errors],
                },
            )
        logger.debug("S3 delete prefix: s3://%s/%s (%d keys)", self._bucket, prefix, removed)
        return removed

    def list_by_prefix(self, prefix: str) -> list[str]:
        """List every object key under a prefix (recursive, paginated)."""
        keys: list[str] = []
        paginator = self._s3.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
        except self._s3.exceptions.ClientError as e:
            raise StorageError(
                f"Failed to list s3://{self._bucket}/{prefix}",
                details={"bucket": self._bucket, "prefix": prefix, "error": str(e)},
            ) from e
        return sorted(keys)

    def copy(
        self,
        source: str,
        target: str,
        source_bucket: str | None = None,
        target_bucket: str | None = None,
    ) -> None:
        """Server-side copy of an S3 object."""
        src_bucket = source_bucket or self._bucket
        dst_bucket = target_bucket or self._bucket
        try:
            self._s3.copy_object(
                Bucket=dst_bucket,
                CopySource={"Bucket": src_bucket, "Key": source},
                Key=target,
            )
        except self._s3.exceptions.ClientError as e:
            raise UploadFailedError(
                f"Failed to copy s3://{src_bucket}/{source} to s3://{dst_bucket}/{target}",
                details={"source": source, "target": target, "error": str(e)},
            ) from e

    def create_folder_marker(self, key: str) -> None:
        """S3 has no directories; store an empty ``key/`` object instead."""
        marker = key.rstrip("/") + "/"
        try:
            self._s3.put_object(Bucket=self._bucket, Key=marker, Body=b"")
        except self._s3.exceptions.ClientError as e:
            raise UploadFailedError(
                f"Failed to create folder s3://{self._bucket}/{marker}",
                details={"bucket": self._bucket, "key": marker, "error": str(e)},
            ) from e
