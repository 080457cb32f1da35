# src/storage/cache_package.py - v1
"""Global dedup cache: one (orig, work) pair per (content hash, language).

Entries are written once and read many times. There is no lock around the
existence check and the upload: at most one writer per (hash, lang) is
expected at a time.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filestorage.core.models import CacheArea
from filestorage.detection.file_type import FileTypeDetector
from filestorage.logging.context import set_operation_context
from filestorage.storage import layout
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.transfer import remove_local, upload_file

logger = logging.getLogger(__name__)


class CachePackageManager:
    """Store and look up hash-addressed cache packages."""

    def __init__(
        self,
        store: BaseBlobStore,
        detector: FileTypeDetector | None = None,
        force_version: bool = False,
    ) -> None:
        self._store = store
        self._detector = detector or FileTypeDetector()
        self._force_version = force_version

    def make_cache_package(
        self,
        content_hash: str,
        lang: str,
        original_path: str | Path | None,
        xliff_path: str | Path,
    ) -> bool:
        """Upload an original file and its converted work file to the cache.

        Returns True straight away when the work file is already cached,
        unless force_version is set. The local work file is deleted once it
        has been uploaded.

        Args:
            content_hash: Hash of the original document bytes.
            lang: Target language tag.
            original_path: Untouched upload, stored verbatim under ``orig/``.
            xliff_path: Converted work file, stored under ``work/``.

        Raises:
            InvalidHashError: If the hash is too short.
            UploadFailedError: If either upload fails. Nothing is deleted locally.
        """
        set_operation_context("make_cache_package")
        prefix = layout.cache_package_prefix(content_hash, lang)
        xliff_name = layout.basename_fix(str(xliff_path))

        if not self._force_version and self._is_cached(content_hash, lang, xliff_name):
            logger.info("Cache package %s already holds %s, skipping upload", prefix, xliff_name)
            return True

        if original_path:
            orig_key = layout.cache_area_key(
                content_hash, lang, CacheArea.ORIGINAL, layout.basename_fix(str(original_path))
            )
            upload_file(self._store, orig_key, Path(original_path))

        work_key = layout.cache_area_key(
            content_hash, lang, CacheArea.WORK, self._work_file_name(Path(xliff_path))
        )
        upload_file(self._store, work_key, Path(xliff_path))
        remove_local(xliff_path)

        return True

    def _is_cached(self, content_hash: str, lang: str, xliff_name: str) -> bool:
        # The stored name may carry the canonical extension appended at write time.
        candidates = [xliff_name]
        if not xliff_name.lower().endswith(layout.CANONICAL_WORK_EXTENSION):
            candidates.append(xliff_name + layout.CANONICAL_WORK_EXTENSION)
        return any(
            self._store.exists(layout.cache_area_key(content_hash, lang, CacheArea.WORK, name))
            for name in candidates
        )

    def _work_file_name(self, xliff_path: Path) -> str:
        name = layout.basename_fix(str(xliff_path))
        info = self._detector.detect(xliff_path)
        canonical = layout.CANONICAL_WORK_EXTENSION.lstrip(".")
        if not info.proprietary and info.extension != canonical:
            return name + layout.CANONICAL_WORK_EXTENSION
        return name

    def get_original_from_cache(self, content_hash: str, lang: str) -> str | None:
        return self._find_key(content_hash, lang, CacheArea.ORIGINAL)

    def get_xliff_from_cache(self, content_hash: str, lang: str) -> str | None:
        """Return the cached work file key, e.g.
        ``cache-package/69/81/e08b...__it-it/work/os.odt.sdlxliff``, or None.
        """
        return self._find_key(content_hash, lang, CacheArea.WORK)

    def _find_key(self, content_hash: str, lang: str, area: CacheArea) -> str | None:
        prefix = layout.cache_area_prefix(content_hash, lang, area) + layout.SEPARATOR
        items = self._store.list_by_prefix(prefix)
        if not items:
            return None
        if len(items) > 1:
            # Listing order is store-defined; the first key wins.
            logger.warning(
                "Cache area %s holds %d items, expected one; using %s",
                prefix, len(items), items[0],
            )
        return items[0]
