"""Filesystem collaborators backing the upload namespace."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

import aiofiles.os

from .errors import StorageIOError

LOGGER = logging.getLogger(__name__)


class LocalFilesystem:
    """Asynchronous directory and existence checks against the local disk.

    Blocking calls are delegated to ``aiofiles`` so concurrent uploads do not stall
    the event loop. Every ``OSError`` other than "not found" surfaces as
    :class:`StorageIOError`.
    """

    async def ensure_directory(self, path: Path) -> None:
        """Create ``path`` and its parents; existing directories are left alone."""
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise StorageIOError("ensure_directory", path) from exc

    async def path_exists(self, path: Path) -> bool:
        """Return whether anything exists at ``path``."""
        try:
            await aiofiles.os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageIOError("stat", path) from exc
        return True

    async def move(self, source: Path, destination: Path) -> None:
        """Move ``source`` to ``destination``, crossing devices when needed."""
        try:
            await aiofiles.os.wrap(shutil.move)(str(source), str(destination))
        except OSError as exc:
            raise StorageIOError("move", destination) from exc


@dataclass(slots=True)
class StorageLayout:
    """Base directories used by the uploads store.

    Attributes:
        uploads_dir: Root of the uploads namespace; folders live directly below it.
        thumbs_dir: Directory reserved for generated thumbnails.
        temp_dir: Staging directory for parts received by the upload handler.
    """

    uploads_dir: Path
    thumbs_dir: Path
    temp_dir: Path

    def initialize(self) -> None:
        """Create the base directories synchronously (idempotent).

        Raises:
            StorageIOError: If a directory cannot be created.
        """
        LOGGER.info("Checking upload storage directories...")
        for directory in (self.uploads_dir, self.thumbs_dir, self.temp_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageIOError("ensure_directory", directory) from exc
        LOGGER.info("Upload storage directories are OK.")


__all__ = ["LocalFilesystem", "StorageLayout"]
