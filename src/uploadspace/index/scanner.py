"""Rebuild upload records from the files on disk."""

from __future__ import annotations

import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Collection, Optional

from uploadspace.errors import StorageIOError
from uploadspace.models import FileRecord
from uploadspace.naming import FOLDER_NAME_PATTERN, IMAGE_EXTENSIONS

IMAGE_CATEGORY = "image"
BINARY_CATEGORY = "binary"


def _list_directory(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir())
    except OSError as exc:
        raise StorageIOError("scan", directory) from exc


def _build_record(
    path: Path, folder: str, image_extensions: Collection[str]
) -> Optional[FileRecord]:
    """Return a record for ``path``, or ``None`` if it is not a regular file."""
    try:
        if not path.is_file():
            return None
        stat = path.stat()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageIOError("stat", path) from exc

    mime, _ = mimetypes.guess_type(path.name)
    is_image = path.suffix.lower() in image_extensions
    return FileRecord(
        filename=path.name,
        folder=folder,
        category=IMAGE_CATEGORY if is_image else BINARY_CATEGORY,
        mime_type=mime,
        size_bytes=stat.st_size,
        uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def scan_uploads(
    uploads_root: Path,
    *,
    image_extensions: Collection[str] = IMAGE_EXTENSIONS,
) -> list[FileRecord]:
    """Return records for the files in the uploads root and its folders.

    Files directly under ``uploads_root`` get an empty folder. Only one level of
    folders is scanned, and only folders whose names satisfy the folder pattern.
    Files that disappear during the scan are skipped.

    Args:
        uploads_root: Root directory of the uploads store.
        image_extensions: Extensions recorded with the ``image`` category.

    Returns:
        list[FileRecord]: Records ordered by folder, then filename.

    Raises:
        StorageIOError: If a directory cannot be listed or a file cannot be read.
    """
    if not uploads_root.is_dir():
        return []

    entries = _list_directory(uploads_root)
    directories: list[tuple[str, Path]] = [("", uploads_root)]
    directories.extend(
        (entry.name, entry)
        for entry in entries
        if FOLDER_NAME_PATTERN.match(entry.name) and entry.is_dir()
    )

    records: list[FileRecord] = []
    for folder, directory in directories:
        listing = entries if folder == "" else _list_directory(directory)
        for path in listing:
            if path.name.startswith("."):
                continue
            record = _build_record(path, folder, image_extensions)
            if record is not None:
                records.append(record)
    return records


__all__ = ["scan_uploads", "IMAGE_CATEGORY", "BINARY_CATEGORY"]
