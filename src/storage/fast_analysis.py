# src/storage/fast_analysis.py - v1
"""Per-project fast-analysis payloads, one blob per project id."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from filestorage.core.errors import ObjectNotFoundError, SerializationError, UploadFailedError
from filestorage.core.models import FastAnalysisRecord
from filestorage.logging.context import set_operation_context, set_project_context
from filestorage.storage import layout
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.transfer import upload_file

logger = logging.getLogger(__name__)


class FastAnalysisStore:
    """Read, write and delete ``fast-analysis/waiting_analysis_<id>.ser``."""

    def __init__(self, store: BaseBlobStore) -> None:
        self._store = store

    def store_fast_analysis_file(
        self, project_id: int, segments: list[dict[str, Any]] | None = None
    ) -> None:
        """Serialize and upload the segments waiting for analysis.

        Raises:
            UploadFailedError: Failed to store segments for fast analysis.
        """
        set_operation_context("store_fast_analysis")
        set_project_context(project_id)
        record = FastAnalysisRecord(project_id=project_id, segments=segments or [])
        try:
            upload_file(self._store, layout.fast_analysis_key(project_id), record.model_dump_json())
        except UploadFailedError as e:
            raise UploadFailedError(
                "Internal Error: Failed to store segments for fast analysis.",
                details={"project_id": project_id, **e.details},
            ) from e

    def get_fast_analysis_data(self, project_id: int) -> list[dict[str, Any]]:
        """Download and decode the stored segments.

        Raises:
            ObjectNotFoundError: No payload is stored for the project.
            SerializationError: The payload is not a valid record.
        """
        key = layout.fast_analysis_key(project_id)
        try:
            raw = self._store.get(key)
        except ObjectNotFoundError as e:
            raise ObjectNotFoundError(
                "Internal Error: Failed to retrieve analysis information.",
                details={"project_id": project_id, "key": key},
            ) from e

        try:
            record = FastAnalysisRecord.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(
                "Internal Error: Failed to decode analysis information.",
                details={"project_id": project_id, "key": key, "error": str(e)},
            ) from e
        return record.segments

    def delete_fast_analysis_file(self, project_id: int) -> bool:
        key = layout.fast_analysis_key(project_id)
        self._store.delete(key)
        logger.info("Deleted fast analysis payload %s", key)
        return True
