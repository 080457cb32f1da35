# src/storage/base_blob_store.py - v1
"""Abstract blob store interface.

Every call is keyed by (bucket, key). Reads of a missing key raise
ObjectNotFoundError; failed writes raise UploadFailedError. Client-level
errors (timeouts, connection resets) propagate unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from filestorage.core.models import BatchCopyResult, CopyFailure
from filestorage.core.errors import StorageError

BlobSource = Path | bytes | str


class BaseBlobStore(ABC):
    """Unified interface for blob storage backends."""

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Default bucket name."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an object exists."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read an object's payload."""

    @abstractmethod
    def put(self, key: str, source: BlobSource) -> None:
        """Write an object from a local file path or an in-memory payload.

        A ``str`` payload is encoded as UTF-8; pass a ``Path`` to upload a file.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a single object."""

    @abstractmethod
    def delete_by_prefix(self, prefix: str) -> int:
        """Delete every object under a prefix, returning how many were removed."""

    @abstractmethod
    def list_by_prefix(self, prefix: str) -> list[str]:
        """List object keys under a prefix, sorted."""

    @abstractmethod
    def copy(
        self,
        source: str,
        target: str,
        source_bucket: str | None = None,
        target_bucket: str | None = None,
    ) -> None:
        """Copy an object, within the default bucket unless told otherwise."""

    @abstractmethod
    def create_folder_marker(self, key: str) -> None:
        """Create an empty ``key/`` object standing in for a directory."""

    def batch_copy(self, sources: list[str], targets: list[str]) -> BatchCopyResult:
        """Copy ``sources[i]`` to ``targets[i]`` for every i.

        Every pair is attempted; failed pairs are reported, successful ones are
        kept. Copies are idempotent, so the caller may resubmit the failed
        subset. An empty request succeeds without contacting the store.
        """
        if len(sources) != len(targets):
            raise ValueError(
                f"batch_copy needs as many targets as sources "
                f"({len(sources)} != {len(targets)})"
            )

        result = BatchCopyResult()
        for source, target in zip(sources, targets):
            try:
                self.copy(source, target)
            except StorageError as e:
                result.failed.append(
                    CopyFailure(source=source, target=target, error=e.message)
                )
            else:
                result.copied.append((source, target))
        return result
