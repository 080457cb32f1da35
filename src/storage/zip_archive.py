# src/storage/zip_archive.py - v1
"""Cache uploaded zip archives and relink them into project work folders.

An archive lives either under ``originalZip/cache/<hash>__originalZip/`` or,
once linked, under ``originalZip/work/<YYYYMMDD>/<projectId>/``. Relinking
is copy-then-delete per object. A crash mid-sequence leaves the archive split
across both places; calling link_zip_to_project again finishes the job.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path

from filestorage.core.errors import StorageError, UploadFailedError
from filestorage.core.models import CopyFailure, RelinkResult
from filestorage.logging.context import set_operation_context, set_project_context
from filestorage.storage import layout
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.transfer import remove_local, upload_file

logger = logging.getLogger(__name__)


class ZipArchiveManager:
    """Handle original zip archives around project creation."""

    def __init__(self, store: BaseBlobStore, zip_repository: str | Path) -> None:
        self._store = store
        self._zip_repository = Path(zip_repository).expanduser()

    def cache_zip_archive(self, zip_hash: str, zip_path: str | Path) -> bool:
        """Upload a local archive to the zip cache and delete the local copy.

        Raises:
            UploadFailedError: After removing the local
                ``<zip_repository>/<hash>__originalZip`` directory.
        """
        set_operation_context("cache_zip_archive")
        key = (
            layout.zip_cache_prefix(zip_hash)
            + layout.SEPARATOR
            + layout.basename_fix(str(zip_path))
        )
        try:
            upload_file(self._store, key, Path(zip_path))
        except UploadFailedError:
            remove_local(self._zip_repository / f"{zip_hash}{layout.original_zip_placeholder()}")
            raise

        remove_local(zip_path)
        return True

    def link_zip_to_project(
        self,
        create_date: date | datetime | str,
        zip_hash: str,
        project_id: int | str,
    ) -> RelinkResult:
        """Move every cached object for ``zip_hash`` into the project's work dir.

        Objects are processed one at a time and the sequence stops at the first
        failure. Objects whose destination already exists are not copied again,
        only removed from the cache, so a retry resumes where the last run
        stopped. Nothing cached means nothing to do.
        """
        set_operation_context("link_zip_to_project")
        set_project_context(project_id)
        cache_prefix = layout.zip_cache_prefix(zip_hash) + layout.SEPARATOR
        keys = self._store.list_by_prefix(cache_prefix)
        result = RelinkResult()

        for index, key in enumerate(keys):
            destination = layout.zip_work_key(
                create_date, project_id, layout.last_part_of_key(key)
            )
            try:
                if self._store.exists(destination):
                    result.skipped.append(key)
                else:
                    self._store.copy(key, destination)
                self._store.delete(key)
            except StorageError as e:
                logger.error("Relink of %s to %s failed: %s", key, destination, e.message)
                result.failed = CopyFailure(source=key, target=destination, error=e.message)
                result.pending = keys[index + 1:]
                return result
            result.relinked.append(key)

        logger.info(
            "project id %s: relinked %d zip objects for %s",
            project_id, len(result.relinked), zip_hash,
        )
        return result

    def get_original_zip_path(
        self, create_date: date | datetime | str, project_id: int | str, zip_name: str
    ) -> str:
        return layout.zip_work_key(create_date, project_id, zip_name)

    def get_original_zip_dir(self, create_date: date | datetime | str, project_id: int | str) -> str:
        return layout.ZIP_FOLDER + layout.SEPARATOR + layout.original_zip_dir(create_date, project_id)
