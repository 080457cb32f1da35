# src/core/errors.py - v1
"""Storage error hierarchy.

Lookups report absence with ``None``; these exceptions are for failures the
caller has to act on. Remote failures are raised to the immediate caller and
never retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from filestorage.core.models import BatchCopyResult, RelinkResult, StageReport


class StorageError(Exception):
    """Base class for all storage errors.

    Attributes:
        message: Human-readable description.
        details: Structured context (bucket, key, cause...).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidHashError(StorageError, ValueError):
    """Content hash is too short to build the cache hash tree."""


class ObjectNotFoundError(StorageError):
    """An object that must exist is missing from the store."""


class UploadFailedError(StorageError):
    """A write to the blob store failed."""


class SerializationError(StorageError):
    """A stored payload could not be decoded or validated."""


class PartialBatchFailureError(StorageError):
    """A multi-object operation stopped or finished with failed items."""

    def __init__(
        self,
        message: str,
        result: BatchCopyResult | RelinkResult | StageReport,
    ) -> None:
        super().__init__(message, details=result.model_dump())
        self.result = result
