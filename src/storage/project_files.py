# src/storage/project_files.py - v2
"""Promote cache packages into a project's file directory."""

from __future__ import annotations

import logging

from filestorage.core.models import BatchCopyResult, CacheArea, ProjectArea, StoredItem
from filestorage.logging.context import set_operation_context, set_project_context
from filestorage.storage import layout
from filestorage.storage.base_blob_store import BaseBlobStore

logger = logging.getLogger(__name__)

# Cache areas map onto project areas one to one.
_AREA_MAP = {
    CacheArea.ORIGINAL: ProjectArea.ORIGINAL,
    CacheArea.WORK: ProjectArea.XLIFF,
}


class ProjectFileManager:
    """Copy cache entries under ``files/<datePath>/<idFile>/`` and resolve them."""

    def __init__(self, store: BaseBlobStore) -> None:
        self._store = store

    def list_cache_items(self, content_hash: str, lang: str) -> list[StoredItem]:
        """List both areas of a cache package, tagging each key with its area."""
        items: list[StoredItem] = []
        for area in (CacheArea.ORIGINAL, CacheArea.WORK):
            prefix = layout.cache_area_prefix(content_hash, lang, area) + layout.SEPARATOR
            items.extend(
                StoredItem(key=key, area=area)
                for key in self._store.list_by_prefix(prefix)
            )
        return items

    def move_from_cache_to_file_dir(
        self,
        date_hash_path: str,
        lang: str,
        id_file: int | str,
        new_file_name: str | None = None,
    ) -> BatchCopyResult:
        """Copy a cache package into the project file directory in one batch.

        Args:
            date_hash_path: ``<datePath>/<hash>``.
            lang: Target language of the cache package.
            id_file: Project file id.
            new_file_name: Accepted for callers that pass the display name;
                copies always keep the cached basename.

        Returns:
            Copied and failed pairs. Copying is idempotent, so the caller can
            call again after a partial failure.
        """
        set_operation_context("move_from_cache_to_file_dir")
        set_project_context(id_file)
        date_path, content_hash = layout.split_date_hash_path(date_hash_path)

        sources: list[str] = []
        targets: list[str] = []
        for item in self.list_cache_items(content_hash, lang):
            sources.append(item.key)
            targets.append(
                layout.project_file_key(
                    date_path, id_file, _AREA_MAP[item.area],
                    item.name,
                )
            )

        logger.info(
            "project id %s: copying %d files from cache package to project folder",
            id_file, len(sources),
        )
        result = self._store.batch_copy(sources, targets)
        if not result.ok:
            logger.error(
                "project id %s: %d of %d copies failed",
                id_file, len(result.failed), len(sources),
            )
        return result

    def get_original_from_file_dir(self, id_file: int | str, date_hash_path: str) -> str | None:
        return self._find_key(id_file, date_hash_path, ProjectArea.ORIGINAL)

    def get_xliff_from_file_dir(self, id_file: int | str, date_hash_path: str) -> str | None:
        return self._find_key(id_file, date_hash_path, ProjectArea.XLIFF)

    def _find_key(
        self, id_file: int | str, date_hash_path: str, area: ProjectArea
    ) -> str | None:
        date_path = date_hash_path.split(layout.SEPARATOR)[0]
        prefix = layout.project_file_prefix(date_path, id_file, area) + layout.SEPARATOR
        items = self._store.list_by_prefix(prefix)
        return items[0] if items else None
