# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides settings, a local blob store rooted in tmp_path, a JSON side-index
and staging directories. No external services: S3 and Redis are mocked where
their backends are tested.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from filestorage.config.settings import Settings
from filestorage.files_storage import FilesStorage
from filestorage.index.json_index import JsonSideIndex
from filestorage.logging.context import clear_context
from filestorage.storage.local_store import LocalBlobStore

SAMPLE_HASH = "6981e08bc467f8af85fd686c54287ac755408e89"
SAMPLE_LANG = "it-it"


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() mutates the package logger; undo it after each test."""
    root = logging.getLogger("filestorage")
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# === FIXTURES: Settings ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Local-backend settings with every directory under tmp_path."""
    return Settings(
        _env_file=None,
        blob_store_backend="local",
        aws_storage_base_bucket="test-bucket",
        local_store_root=tmp_path / "blobs",
        side_index_backend="json",
        side_index_root=tmp_path / "index",
        upload_repository=tmp_path / "upload",
        zip_repository=tmp_path / "zip",
    )


# === FIXTURES: Clients ===


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(root=tmp_path / "blobs", bucket="test-bucket")


@pytest.fixture
def recording_store(blob_store: LocalBlobStore) -> MagicMock:
    """Local store wrapped so every call is recorded."""
    spy = MagicMock(wraps=blob_store)
    spy.bucket = blob_store.bucket
    return spy


@pytest.fixture
def side_index(tmp_path: Path) -> JsonSideIndex:
    return JsonSideIndex(root=tmp_path / "index")


@pytest.fixture
def files_storage(settings: Settings, blob_store, side_index) -> FilesStorage:
    return FilesStorage.build(settings, blob_store, side_index)


# === FIXTURES: Local files ===


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Directory for converter output and originals awaiting caching."""
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def xliff_file(work_dir: Path) -> Path:
    """Converted work file already carrying the canonical extension."""
    p = work_dir / "os.odt.sdlxliff"
    p.write_text(
        '<?xml version="1.0"?><xliff version="1.2" xmlns:sdl="http://sdl.com/FileTypes/SdlXliff/1.0">'
        "<file original=\"os.odt\"/></xliff>",
        encoding="utf-8",
    )
    return p


@pytest.fixture
def original_file(work_dir: Path) -> Path:
    p = work_dir / "os.odt"
    p.write_bytes(b"PK\x03\x04 fake odt bytes")
    return p
