"""Tests for index snapshots and disk reindexing."""

from pathlib import Path

import pytest

from uploadspace.errors import IndexSnapshotError, StorageIOError
from uploadspace.index import AssetIndex, IndexRepository, scan_uploads
from uploadspace.models import FileRecord


def test_save_and_load_snapshot(tmp_path: Path) -> None:
    """Ensure a saved snapshot restores the same records.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = IndexRepository(tmp_path / "data" / "uploads.json")
    index = AssetIndex(
        [
            FileRecord(filename="a.png", folder="team-logos", category="image", size_bytes=12),
            FileRecord(filename="b.gif", category="image", mime_type="image/gif"),
        ]
    )

    path = repo.save(index)
    loaded = repo.load()

    assert path.exists()
    assert loaded == index.records()


def test_load_without_snapshot_returns_empty(tmp_path: Path) -> None:
    assert IndexRepository(tmp_path / "missing.json").load() == []


@pytest.mark.parametrize("payload", ["not json", '{"files": [{"filename": 3}]}'])
def test_load_invalid_snapshot_raises(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "uploads.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(IndexSnapshotError):
        IndexRepository(path).load()


def test_scan_uploads_builds_records_for_root_and_folders(tmp_path: Path) -> None:
    """Confirm scanning covers the root and valid folders only.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    (tmp_path / "team-logos").mkdir()
    (tmp_path / "Bad Dir").mkdir()
    (tmp_path / "a.png").write_bytes(b"a")
    (tmp_path / ".hidden.png").write_bytes(b"h")
    (tmp_path / "team-logos" / "b.jpg").write_bytes(b"bb")
    (tmp_path / "team-logos" / "notes.txt").write_bytes(b"notes")
    (tmp_path / "Bad Dir" / "c.png").write_bytes(b"c")

    records = scan_uploads(tmp_path)

    summary = {(r.folder, r.filename, r.category) for r in records}
    assert summary == {
        ("", "a.png", "image"),
        ("team-logos", "b.jpg", "image"),
        ("team-logos", "notes.txt", "binary"),
    }
    sizes = {r.filename: r.size_bytes for r in records}
    assert sizes["b.jpg"] == 2


def test_scan_uploads_missing_root(tmp_path: Path) -> None:
    assert scan_uploads(tmp_path / "absent") == []


def test_scan_uploads_wraps_unreadable_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Verify a file that cannot be stat'ed raises StorageIOError with its path.

    Args:
        tmp_path: Temporary directory provided by pytest.
        monkeypatch: Fixture used to make a single stat call fail.
    """
    (tmp_path / "ok.png").write_bytes(b"ok")
    locked = tmp_path / "locked.png"
    locked.write_bytes(b"locked")
    original_stat = Path.stat

    def _stat(self: Path, *args, **kwargs):
        if self.name == "locked.png":
            raise PermissionError("denied")
        return original_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", _stat)

    with pytest.raises(StorageIOError) as excinfo:
        scan_uploads(tmp_path)

    assert excinfo.value.operation == "stat"
    assert excinfo.value.path == locked
