"""Known-folder namespace for uploaded assets."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from .naming import FOLDER_NAME_PATTERN, validate_folder_name
from .storage import LocalFilesystem

LOGGER = logging.getLogger(__name__)


class FolderNamespace:
    """Track the set of valid upload folders and their storage locations.

    The known set is always kept sorted. Entries are only ever added; a folder is
    added after its directory exists on disk.
    """

    def __init__(
        self,
        uploads_root: Path,
        filesystem: LocalFilesystem,
        folders: Iterable[str] = (),
    ) -> None:
        """Initialize the namespace.

        Args:
            uploads_root: Root directory of the uploads store.
            filesystem: Collaborator used for directory creation.
            folders: Folder names already known to exist. Names failing the folder
                pattern are dropped.
        """
        self._root = uploads_root
        self._filesystem = filesystem
        self._folders: list[str] = sorted(
            {name for name in folders if FOLDER_NAME_PATTERN.match(name)}
        )
        self._lock = asyncio.Lock()

    @property
    def root(self) -> Path:
        """Return the uploads root directory."""
        return self._root

    @classmethod
    def discover(cls, uploads_root: Path, filesystem: LocalFilesystem) -> "FolderNamespace":
        """Build a namespace seeded from the directories under ``uploads_root``.

        Only subdirectories whose names already satisfy the folder pattern are
        picked up; anything else on disk is not part of the namespace.
        """
        names: list[str] = []
        if uploads_root.is_dir():
            names = [
                entry.name
                for entry in uploads_root.iterdir()
                if entry.is_dir() and FOLDER_NAME_PATTERN.match(entry.name)
            ]
        LOGGER.debug("Discovered %d upload folders under %s", len(names), uploads_root)
        return cls(uploads_root, filesystem, names)

    @staticmethod
    def validate(raw_name: str) -> Optional[str]:
        """Return the canonical folder name, or ``None`` when invalid."""
        return validate_folder_name(raw_name)

    async def create(self, raw_name: str) -> list[str]:
        """Create a folder and return the updated folder list.

        Invalid names are ignored and the current list is returned unchanged.
        Creating an existing folder is not an error.

        Args:
            raw_name: Requested folder name, canonicalized before use.

        Returns:
            list[str]: Sorted snapshot of the known folders.

        Raises:
            StorageIOError: If the directory cannot be created.
        """
        folder = validate_folder_name(raw_name)
        if folder is None:
            LOGGER.debug("Ignoring invalid folder name %r", raw_name)
            return self.names()

        await self._filesystem.ensure_directory(self._root / folder)
        async with self._lock:
            if folder not in self._folders:
                self._folders.append(folder)
                self._folders.sort()
                LOGGER.info("Created upload folder %s", folder)
        return self.names()

    def names(self) -> list[str]:
        """Return a sorted snapshot of the known folders."""
        return list(self._folders)

    def __contains__(self, name: object) -> bool:
        return name in self._folders

    def resolve(self, name: str) -> Path:
        """Return the storage directory for ``name``.

        Unknown names resolve to the uploads root instead of raising, so this must
        not be used to reject unknown folders.
        """
        if name in self._folders:
            return self._root / name
        return self._root


__all__ = ["FolderNamespace"]
