# src/files_storage.py - v2
"""Process bootstrap: build the store, side-index and managers once.

Clients are constructed explicitly and injected into every manager; nothing
is held in module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from filestorage.config.settings import Settings
from filestorage.detection.file_type import FileTypeDetector
from filestorage.index.base_side_index import BaseSideIndex
from filestorage.index.index_factory import create_side_index
from filestorage.storage.base_blob_store import BaseBlobStore
from filestorage.storage.cache_package import CachePackageManager
from filestorage.storage.fast_analysis import FastAnalysisStore
from filestorage.storage.project_files import ProjectFileManager
from filestorage.storage.store_factory import create_blob_store
from filestorage.storage.upload_queue import UploadQueueManager
from filestorage.storage.zip_archive import ZipArchiveManager

logger = logging.getLogger(__name__)


@dataclass
class FilesStorage:
    """All storage managers sharing one blob store and side-index."""

    store: BaseBlobStore
    side_index: BaseSideIndex
    cache: CachePackageManager
    projects: ProjectFileManager
    queue: UploadQueueManager
    fast_analysis: FastAnalysisStore
    zips: ZipArchiveManager

    @property
    def bucket(self) -> str:
        return self.store.bucket

    def close(self) -> None:
        self.side_index.close()

    @classmethod
    def build(
        cls,
        settings: Settings,
        store: BaseBlobStore,
        side_index: BaseSideIndex,
        detector: FileTypeDetector | None = None,
    ) -> FilesStorage:
        """Wire managers around already constructed clients."""
        return cls(
            store=store,
            side_index=side_index,
            cache=CachePackageManager(
                store, detector=detector, force_version=settings.force_version
            ),
            projects=ProjectFileManager(store),
            queue=UploadQueueManager(
                store, side_index, upload_repository=settings.upload_repository_path
            ),
            fast_analysis=FastAnalysisStore(store),
            zips=ZipArchiveManager(store, zip_repository=settings.zip_repository_path),
        )


def create_files_storage(settings: Settings) -> FilesStorage:
    """Create clients from settings and wire the managers.

    Raises:
        ConfigurationError: If bucket, region or side-index settings are missing.
    """
    store = create_blob_store(settings)
    side_index = create_side_index(settings)
    logger.info(
        "Files storage ready: backend=%s bucket=%s side_index=%s",
        settings.blob_store_backend, store.bucket, settings.side_index_backend,
    )
    return FilesStorage.build(settings, store, side_index)
