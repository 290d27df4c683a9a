"""Tests for the in-memory metadata index."""

import threading

from uploadspace.index import AssetIndex
from uploadspace.models import FileRecord


def _record(filename: str, folder: str = "team-logos", category: str = "logo") -> FileRecord:
    return FileRecord(filename=filename, folder=folder, category=category)


def test_query_returns_seeded_records_in_filename_order() -> None:
    """Ensure query results come back sorted by filename."""
    index = AssetIndex()
    index.replace_all([_record("b.png"), _record("a.png")])

    result = index.query("logo", "team-logos")

    assert [record.filename for record in result] == ["a.png", "b.png"]


def test_query_requires_both_category_and_folder() -> None:
    """Verify a record matches only when both category and folder agree."""
    index = AssetIndex(
        [
            _record("a.png"),
            _record("b.png", category="photo"),
            _record("c.png", folder="icons"),
            _record("d.png", folder="", category="logo"),
        ]
    )

    assert [r.filename for r in index.query("logo", "team-logos")] == ["a.png"]
    assert [r.filename for r in index.query("photo", "team-logos")] == ["b.png"]
    assert [r.filename for r in index.query("logo", "")] == ["d.png"]
    assert index.query("photo", "icons") == []
    assert index.query("missing", "nowhere") == []


def test_replace_all_with_empty_input_keeps_existing_records() -> None:
    """Ensure an empty reload never wipes the index."""
    index = AssetIndex([_record("a.png")])

    index.replace_all([])

    assert [r.filename for r in index.query("logo", "team-logos")] == ["a.png"]


def test_replace_all_discards_previous_contents() -> None:
    """Verify replace_all drops records absent from the new input."""
    index = AssetIndex([_record("a.png"), _record("old.png", folder="icons")])

    index.replace_all(record for record in [_record("z.png")])

    assert len(index) == 1
    assert index.query("logo", "icons") == []
    assert [r.filename for r in index.query("logo", "team-logos")] == ["z.png"]


def test_replace_all_ignores_bare_record_and_mixed_input() -> None:
    """Verify replace_all leaves the index untouched for non-collection input."""
    index = AssetIndex([_record("a.png")])

    index.replace_all(_record("b.png"))
    index.replace_all([_record("c.png"), "not-a-record"])
    index.replace_all(None)
    index.replace_all(42)
    index.replace_all("a.png")

    assert [r.filename for r in index.records()] == ["a.png"]


def test_add_accepts_single_record_and_sequences() -> None:
    """Ensure add takes a bare record as well as a list of records."""
    index = AssetIndex([_record("b.png")])

    index.add(_record("c.png"))
    index.add([_record("a.png"), _record("d.png", folder="icons")])
    index.add((_record("e.png"),))

    assert [r.filename for r in index.query("logo", "team-logos")] == [
        "a.png",
        "b.png",
        "c.png",
        "e.png",
    ]
    assert len(index) == 5


def test_add_ignores_malformed_input() -> None:
    """Verify malformed add input is dropped without raising."""
    index = AssetIndex([_record("a.png")])

    index.add("a.png")
    index.add(42)
    index.add(None)
    index.add({"filename": "x.png", "folder": "team-logos", "category": "logo"})
    index.add([_record("b.png"), "not-a-record"])

    assert len(index) == 1


def test_add_after_replace_keeps_both() -> None:
    """Ensure records added after a replace sit alongside the replaced set."""
    index = AssetIndex()
    index.replace_all([_record("a.png")])
    index.add(_record("b.png"))

    assert [r.filename for r in index.records()] == ["a.png", "b.png"]


def test_readers_never_observe_partial_replace() -> None:
    """Readers must see either the old or the new record set during replacements."""
    old = [_record(f"old-{i}.png") for i in range(200)]
    new = [_record(f"new-{i}.png") for i in range(300)]
    index = AssetIndex(old)
    observed: set[int] = set()
    stop = threading.Event()

    def _reader() -> None:
        while not stop.is_set():
            observed.add(len(index.query("logo", "team-logos")))

    reader = threading.Thread(target=_reader)
    reader.start()
    for _ in range(50):
        index.replace_all(new)
        index.replace_all(old)
    stop.set()
    reader.join()

    assert observed <= {200, 300}
