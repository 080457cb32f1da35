# src/storage/local_store.py - v2
"""Local filesystem blob store (BLOB_STORE_BACKEND=local).

Objects live at ``<root>/<bucket>/<key>``. Used for development and tests.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from filestorage.core.errors import ObjectNotFoundError, UploadFailedError
from filestorage.storage.base_blob_store import BaseBlobStore, BlobSource

logger = logging.getLogger(__name__)

# Folder markers are stored under this name inside the directory they stand for.
_FOLDER_MARKER = ".folder"


class LocalBlobStore(BaseBlobStore):
    """Blob store on the local filesystem."""

    def __init__(self, root: str | Path, bucket: str) -> None:
        """Initialize with a root directory and bucket name.

        Args:
            root: Directory holding one sub-directory per bucket.
            bucket: Default bucket name.
        """
        self._root = Path(root).expanduser()
        self._bucket = bucket
        self._bucket_path(bucket).mkdir(parents=True, exist_ok=True)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _bucket_path(self, bucket: str | None = None) -> Path:
        return self._root / (bucket or self._bucket)

    def _resolve(self, key: str, bucket: str | None = None) -> Path:
        return self._bucket_path(bucket) / key.lstrip("/")

    def _to_key(self, path: Path, bucket: str | None = None) -> str:
        relative = path.relative_to(self._bucket_path(bucket)).as_posix()
        if path.name == _FOLDER_MARKER:
            return relative[: -len(_FOLDER_MARKER)]
        return relative

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def get(self, key: str) -> bytes:
        path = self._resolve(key)
        if not path.is_file():
            raise ObjectNotFoundError(
                f"No such key: {self._bucket}/{key}",
                details={"bucket": self._bucket, "key": key},
            )
        return path.read_bytes()

    def put(self, key: str, source: BlobSource) -> None:
        target = self._resolve(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(source, Path):
                shutil.copyfile(source, target)
            elif isinstance(source, str):
                target.write_text(source, encoding="utf-8")
            else:
                target.write_bytes(source)
        except OSError as e:
            raise UploadFailedError(
                f"Failed to write {self._bucket}/{key}: {e}",
                details={"bucket": self._bucket, "key": key, "error": str(e)},
            ) from e

    def delete(self, key: str) -> None:
        path = self._resolve(key)
        if path.is_file():
            path.unlink()

    def delete_by_prefix(self, prefix: str) -> int:
        keys = self.list_by_prefix(prefix)
        for key in keys:
            path = self._resolve(key)
            if key.endswith("/"):
                path = path / _FOLDER_MARKER
            path.unlink(missing_ok=True)
        return len(keys)

    def list_by_prefix(self, prefix: str) -> list[str]:
        base = self._bucket_path()
        keys = [
            self._to_key(p)
            for p in base.rglob("*")
            if p.is_file()
        ]
        return sorted(k for k in keys if k.startswith(prefix))

    def copy(
        self,
        source: str,
        target: str,
        source_bucket: str | None = None,
        target_bucket: str | None = None,
    ) -> None:
        src_path = self._resolve(source, source_bucket)
        dst_path = self._resolve(target, target_bucket)
        if not src_path.is_file():
            raise UploadFailedError(
                f"Copy source missing: {source}",
                details={"source": source, "target": target},
            )
        try:
            dst_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src_path, dst_path)
        except OSError as e:
            raise UploadFailedError(
                f"Failed to copy {source} to {target}: {e}",
                details={"source": source, "target": target, "error": str(e)},
            ) from e

    def create_folder_marker(self, key: str) -> None:
        marker = self._resolve(key.rstrip("/")) / _FOLDER_MARKER
        try:
            marker.parent.mkdir(parents=True, exist_ok=True)
            marker.touch()
        except OSError as e:
            raise UploadFailedError(
                f"Failed to create folder {key}: {e}",
                details={"bucket": self._bucket, "key": key, "error": str(e)},
            ) from e
