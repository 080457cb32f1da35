# src/storage/upload_queue.py - v2
"""Stage upload sessions into the queue area and track their file maps.

A staged session lives under ``queue-projects/<safeSession>/``. Files whose
key has no extension are hash manifests: each line is the original name of
a file sharing that hash. The manifests are collected into a SessionFileMap
kept in the side-index for the lifetime of the session.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from filestorage.core.errors import ObjectNotFoundError, SerializationError, StorageError
from filestorage.core.models import (
    ConversionHashes,
    DirectoryHashes,
    SessionFileMap,
    StagedFailure,
    StageReport,
)
from filestorage.index.base_side_index import BaseSideIndex
from filestorage.logging.context import set_operation_context, set_session_context
from filestorage.storage import layout
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.transfer import remove_local, upload_file

logger = logging.getLogger(__name__)

FILE_MAP_FIELD = "file_map"


def walk_self_first(root: Path) -> Iterator[Path]:
    """Depth-first walk yielding each directory before its children.

    ``root`` itself is not yielded; siblings come in name order.
    """
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        path = Path(entry.path)
        yield path
        if entry.is_dir(follow_symlinks=False):
            yield from walk_self_first(path)


def get_upload_session_safe_name(upload_session: str) -> str:
    return layout.upload_session_safe_name(upload_session)


class UploadQueueManager:
    """Move upload sessions from local staging into the blob store."""

    def __init__(
        self,
        store: BaseBlobStore,
        side_index: BaseSideIndex,
        upload_repository: str | Path,
    ) -> None:
        self._store = store
        self._side_index = side_index
        self._upload_repository = Path(upload_repository).expanduser()

    def move_file_from_upload_session_to_queue_path(self, upload_session: str) -> StageReport:
        """Upload a local session tree to ``queue-projects/<safeSession>/``.

        On success the session file map is written to the side-index and the
        local tree is deleted. If any item fails the walk still runs to the
        end so the report lists every failure; then the partially staged
        remote prefix is removed and the local tree is kept for a retry.

        Raises:
            ObjectNotFoundError: If the local session directory does not exist.
        """
        set_operation_context("stage_upload_session")
        set_session_context(upload_session)
        session_dir = self._upload_repository / upload_session
        if not session_dir.is_dir():
            raise ObjectNotFoundError(
                f"Upload session directory not found: {session_dir}",
                details={"session": upload_session, "path": str(session_dir)},
            )
        safe_name = layout.upload_session_safe_name(upload_session)
        report = StageReport(session=safe_name)
        file_map = SessionFileMap()

        for path in walk_self_first(session_dir):
            relative = path.relative_to(session_dir).as_posix()
            key = layout.queue_key(upload_session, relative)
            try:
                if path.is_dir():
                    self._store.create_folder_marker(key)
                    report.folders.append(key)
                    continue
                manifest = None
                if not layout.has_extension(key):
                    # Manifests hold original file names in whatever encoding the client used.
                    manifest = path.read_bytes().decode("utf-8", errors="replace").splitlines()
                upload_file(self._store, key, path)
                report.uploaded.append(key)
                if manifest is not None:
                    file_map.files[key] = manifest
            except (StorageError, OSError) as e:
                error = e.message if isinstance(e, StorageError) else str(e)
                logger.error("Staging %s as %s failed: %s", path, key, error)
                report.failed.append(StagedFailure(path=str(path), key=key, error=error))

        if not report.ok:
            self._discard_partial(upload_session)
            return report

        self._side_index.hash_set(safe_name, FILE_MAP_FIELD, file_map.model_dump_json())
        remove_local(session_dir)
        logger.info(
            "Staged session %s: %d folders, %d files, %d hash manifests",
            safe_name, len(report.folders), len(report.uploaded), len(file_map.files),
        )
        return report

    def _discard_partial(self, upload_session: str) -> None:
        try:
            removed = self.delete_queue(upload_session)
        except StorageError as e:
            logger.warning("Cleanup of partial queue for %s failed: %s", upload_session, e.message)
            return
        logger.warning("Removed %d partially staged objects for %s", removed, upload_session)

    def get_hashes_from_dir(self, dir_to_scan: str) -> DirectoryHashes:
        """Read back the file map of the session named by the last path segment.

        Raises:
            SerializationError: If the stored file map cannot be decoded.
        """
        safe_name = layout.upload_session_safe_name(layout.last_part_of_key(dir_to_scan.rstrip("/")))
        raw = self._side_index.hash_get(safe_name, FILE_MAP_FIELD)
        if raw is None:
            logger.warning("No file map stored for session %s", safe_name)
            return DirectoryHashes()

        try:
            file_map = SessionFileMap.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(
                f"Corrupt file map for session {safe_name}",
                details={"session": safe_name, "error": str(e)},
            ) from e

        return DirectoryHashes(
            conversion_hashes=ConversionHashes(
                sha=list(file_map.files),
                file_name=dict(file_map.files),
            ),
            zip_hashes=[],
        )

    def delete_queue(self, upload_dir: str) -> int:
        """Delete every object staged for the session named by ``upload_dir``.

        The session file map is dropped from the side-index as well.
        """
        session = layout.last_part_of_key(upload_dir.rstrip("/"))
        prefix = layout.queue_prefix(session) + layout.SEPARATOR
        removed = self._store.delete_by_prefix(prefix)
        self._side_index.hash_delete(layout.upload_session_safe_name(session), FILE_MAP_FIELD)
        logger.info("Deleted %d queued objects under %s", removed, prefix)
        return removed
