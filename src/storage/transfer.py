# src/storage/transfer.py - v1
"""Upload helper and best-effort local cleanup shared by the managers."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from filestorage.core.errors import UploadFailedError
from filestorage.storage.base_blob_store import BaseBlobStore, BlobSource

logger = logging.getLogger(__name__)


def upload_file(store: BaseBlobStore, key: str, source: BlobSource) -> None:
    """Upload to the store and log the outcome.

    Raises:
        UploadFailedError: With the store's failure as ``__cause__``.
    """
    try:
        store.put(key, source)
    except UploadFailedError as e:
        logger.error(
            "Error in uploading a file %s into %s bucket. ERROR: %s",
            key, store.bucket, e.message,
        )
        raise
    logger.info("Successfully uploaded file %s into %s bucket.", key, store.bucket)


def remove_local(path: str | Path) -> bool:
    """Delete a local file or directory tree. Failures are logged, not raised."""
    p = Path(path)
    try:
        if p.is_dir() and not p.is_symlink():
            shutil.rmtree(p)
        elif p.exists() or p.is_symlink():
            p.unlink()
        else:
            return False
    except OSError as e:
        logger.warning("Could not remove local path %s: %s", p, e)
        return False
    return True
