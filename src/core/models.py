# src/core/models.py - v1
"""Shared Pydantic models used across the storage managers.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from filestorage.core.errors import PartialBatchFailureError

SESSION_FILE_MAP_VERSION = 1
FAST_ANALYSIS_VERSION = 1


# === AREAS ===


class CacheArea(str, Enum):
    """Sub-area of a cache package."""

    ORIGINAL = "orig"
    WORK = "work"


class ProjectArea(str, Enum):
    """Sub-area of a project file directory."""

    ORIGINAL = "orig"
    XLIFF = "xliff"


class StoredItem(BaseModel):
    """A listed blob key tagged with the area it was listed from."""

    key: str
    area: CacheArea

    @property
    def name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


# === DETECTION ===


class FileTypeInfo(BaseModel):
    """What the file-type detector knows about a converted file."""

    proprietary: bool = False
    proprietary_name: str | None = None
    extension: str = ""


# === MULTI-OBJECT RESULTS ===


class CopyFailure(BaseModel):
    """A single copy that did not complete."""

    source: str
    target: str
    error: str


class BatchCopyResult(BaseModel):
    """Outcome of a batch copy: every pair is either copied or failed."""

    copied: list[tuple[str, str]] = Field(default_factory=list)
    failed: list[CopyFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise PartialBatchFailureError(
                f"Batch copy failed for {len(self.failed)} of "
                f"{len(self.failed) + len(self.copied)} items",
                result=self,
            )


class RelinkResult(BaseModel):
    """Outcome of a copy-then-delete relocation sequence.

    ``skipped`` is the subset of ``relinked`` whose destination already
    existed, so only the cache-side object was removed. ``pending`` lists
    cache-side keys not reached because the sequence stopped at ``failed``.
    """

    relinked: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: CopyFailure | None = None
    pending: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed is None

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise PartialBatchFailureError(
                f"Relink stopped at {self.failed.source}: {self.failed.error}",  # type: ignore[union-attr]
                result=self,
            )


class StagedFailure(BaseModel):
    """A staging step (folder marker or upload) that failed."""

    path: str
    key: str
    error: str


class StageReport(BaseModel):
    """Outcome of staging an upload session into the queue area."""

    session: str
    folders: list[str] = Field(default_factory=list)
    uploaded: list[str] = Field(default_factory=list)
    failed: list[StagedFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise PartialBatchFailureError(
                f"Staging of session {self.session!r} had "
                f"{len(self.failed)} failed items",
                result=self,
            )


# === SERIALIZED PAYLOADS ===


class SessionFileMap(BaseModel):
    """Per-session map of hash keys to original file names."""

    version: Literal[1] = SESSION_FILE_MAP_VERSION
    files: dict[str, list[str]] = Field(default_factory=dict)


class ConversionHashes(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sha: list[str] = Field(default_factory=list)
    file_name: dict[str, list[str]] = Field(default_factory=dict, alias="fileName")


class DirectoryHashes(BaseModel):
    """Hashes found for an upload directory.

    Dump with ``by_alias=True`` for the camelCase wire format.
    """

    model_config = ConfigDict(populate_by_name=True)

    conversion_hashes: ConversionHashes = Field(
        default_factory=ConversionHashes, alias="conversionHashes"
    )
    zip_hashes: list[str] = Field(default_factory=list, alias="zipHashes")


class FastAnalysisRecord(BaseModel):
    """Serialized segments awaiting fast analysis for one project."""

    version: Literal[1] = FAST_ANALYSIS_VERSION
    project_id: int
    segments: list[dict[str, Any]] = Field(default_factory=list)
