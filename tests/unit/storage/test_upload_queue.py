# tests/unit/storage/test_upload_queue.py - v2
"""Tests for storage/upload_queue.py - staging sessions and file maps."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from filestorage.core.errors import ObjectNotFoundError, SerializationError, UploadFailedError
from filestorage.storage.local_store import LocalBlobStore
from filestorage.storage.upload_queue import (
    FILE_MAP_FIELD,
    UploadQueueManager,
    get_upload_session_safe_name,
    walk_self_first,
)

SESSION = "{CAD1B6E1-B312-8713-E8C3-97145410FD37}"
SAFE = "cad1b6e1-b312-8713-e8c3-97145410fd37"
QUEUE = f"queue-projects/{SAFE}"


class _FailingDocx(LocalBlobStore):
    def put(self, key, source):
        if key.endswith(".docx"):
            raise UploadFailedError("connection reset", details={"key": key})
        super().put(key, source)


@pytest.fixture
def upload_repo(settings) -> Path:
    return settings.upload_repository_path


@pytest.fixture
def session_dir(upload_repo) -> Path:
    """One sub-folder, one hash manifest and one uploaded document."""
    root = upload_repo / SESSION
    (root / "Docs").mkdir(parents=True)
    (root / "AAD03B600BC4|it-IT").write_text("Report.docx\nReport copy.docx\n", encoding="utf-8")
    (root / "Docs" / "Report.DOCX").write_bytes(b"PK docx")
    return root


@pytest.fixture
def manager(blob_store, side_index, upload_repo) -> UploadQueueManager:
    return UploadQueueManager(blob_store, side_index, upload_repository=upload_repo)


class TestWalkSelfFirst:
    def test_order(self, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "inner.txt").write_text("x")
        (tmp_path / "a.txt").write_text("x")
        (tmp_path / "c.txt").write_text("x")
        names = [p.relative_to(tmp_path).as_posix() for p in walk_self_first(tmp_path)]
        assert names == ["a.txt", "b", "b/inner.txt", "c.txt"]

    def test_root_not_yielded(self, tmp_path):
        assert list(walk_self_first(tmp_path)) == []


class TestSafeName:
    def test_guid(self):
        assert get_upload_session_safe_name(SESSION) == SAFE


class TestStaging:
    def test_markers_and_uploads(self, manager, session_dir):
        report = manager.move_file_from_upload_session_to_queue_path(SESSION)
        assert report.ok
        assert report.session == SAFE
        assert report.folders == [f"{QUEUE}/docs"]
        assert report.uploaded == [f"{QUEUE}/aad03b600bc4__it-it", f"{QUEUE}/docs/report.docx"]

    def test_blob_keys(self, manager, blob_store, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        assert blob_store.list_by_prefix(QUEUE + "/") == [
            f"{QUEUE}/aad03b600bc4__it-it",
            f"{QUEUE}/docs/",
            f"{QUEUE}/docs/report.docx",
        ]

    def test_local_tree_removed(self, manager, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        assert not session_dir.exists()

    def test_file_map_stored(self, manager, side_index, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        stored = json.loads(side_index.hash_get(SAFE, FILE_MAP_FIELD))
        assert stored == {
            "version": 1,
            "files": {f"{QUEUE}/aad03b600bc4__it-it": ["Report.docx", "Report copy.docx"]},
        }

    def test_manifest_not_utf8(self, manager, blob_store, side_index, upload_repo):
        root = upload_repo / SESSION
        root.mkdir(parents=True)
        (root / "AAD03B600BC4|it-IT").write_bytes("Relat\u00f3rio.docx\n".encode("latin-1"))

        report = manager.move_file_from_upload_session_to_queue_path(SESSION)

        assert report.ok
        names = json.loads(side_index.hash_get(SAFE, FILE_MAP_FIELD))["files"][f"{QUEUE}/aad03b600bc4__it-it"]
        assert names == ["Relat\ufffdrio.docx"]
        assert blob_store.get(f"{QUEUE}/aad03b600bc4__it-it") == b"Relat\xf3rio.docx\n"

    def test_missing_session(self, manager):
        with pytest.raises(ObjectNotFoundError):
            manager.move_file_from_upload_session_to_queue_path("{NOPE}")

    def test_failure_keeps_local_and_cleans_remote(self, side_index, upload_repo, session_dir, tmp_path):
        store = _FailingDocx(root=tmp_path / "blobs", bucket="test-bucket")
        manager = UploadQueueManager(store, side_index, upload_repository=upload_repo)

        report = manager.move_file_from_upload_session_to_queue_path(SESSION)

        assert not report.ok
        assert [f.key for f in report.failed] == [f"{QUEUE}/docs/report.docx"]
        assert report.failed[0].error == "connection reset"
        assert session_dir.exists()
        assert store.list_by_prefix(QUEUE + "/") == []
        assert side_index.hash_get(SAFE, FILE_MAP_FIELD) is None

    def test_retry_after_failure(self, blob_store, side_index, upload_repo, session_dir, tmp_path):
        failing = _FailingDocx(root=tmp_path / "blobs", bucket="test-bucket")
        UploadQueueManager(failing, side_index, upload_repo).move_file_from_upload_session_to_queue_path(SESSION)

        report = UploadQueueManager(
            blob_store, side_index, upload_repo
        ).move_file_from_upload_session_to_queue_path(SESSION)
        assert report.ok
        assert len(report.uploaded) == 2


class TestGetHashesFromDir:
    def test_round_trip(self, manager, session_dir, upload_repo):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        hashes = manager.get_hashes_from_dir(str(upload_repo / SESSION))
        key = f"{QUEUE}/aad03b600bc4__it-it"
        assert hashes.conversion_hashes.sha == [key]
        assert hashes.conversion_hashes.file_name == {key: ["Report.docx", "Report copy.docx"]}
        assert hashes.zip_hashes == []

    def test_wire_format(self, manager, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        dumped = manager.get_hashes_from_dir(f"/upload/{SESSION}/").model_dump(by_alias=True)
        assert set(dumped) == {"conversionHashes", "zipHashes"}
        assert set(dumped["conversionHashes"]) == {"sha", "fileName"}

    def test_no_map(self, manager):
        hashes = manager.get_hashes_from_dir("/upload/{UNKNOWN}")
        assert hashes.conversion_hashes.sha == []
        assert hashes.zip_hashes == []

    def test_corrupt_map(self, manager, side_index):
        side_index.hash_set(SAFE, FILE_MAP_FIELD, '{"version": 7}')
        with pytest.raises(SerializationError):
            manager.get_hashes_from_dir(f"/upload/{SESSION}")


class TestDeleteQueue:
    def test_deletes_session_only(self, manager, blob_store, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        blob_store.put(f"{QUEUE}-other/keep.txt", b"x")

        assert manager.delete_queue(f"/upload/{SESSION}") == 3
        assert blob_store.list_by_prefix(QUEUE + "/") == []
        assert blob_store.exists(f"{QUEUE}-other/keep.txt")

    def test_empty(self, manager):
        assert manager.delete_queue("/upload/{EMPTY}") == 0

    def test_drops_file_map(self, manager, side_index, session_dir):
        manager.move_file_from_upload_session_to_queue_path(SESSION)
        manager.delete_queue(f"/upload/{SESSION}")
        assert side_index.hash_get(SAFE, FILE_MAP_FIELD) is None
        assert manager.get_hashes_from_dir(f"/upload/{SESSION}").conversion_hashes.sha == []
