"""Public entry point composing folders, collision checks and the metadata index."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from .collisions import CollisionChecker
from .config import UploadspaceConfig
from .errors import InvalidNameError
from .folders import FolderNamespace
from .index import IMAGE_CATEGORY, AssetIndex, IndexRepository, scan_uploads
from .models import FileRecord, UploadedPart
from .naming import split_extension
from .storage import LocalFilesystem

LOGGER = logging.getLogger(__name__)


class UploadNamespaceManager:
    """Namespace of uploaded assets: folders, accepted names, and file metadata.

    Construct one instance at startup and hand it to request-handling code. The
    manager keeps no state of its own beyond its collaborators.
    """

    def __init__(
        self,
        folders: FolderNamespace,
        collisions: CollisionChecker,
        index: AssetIndex,
        *,
        filesystem: LocalFilesystem | None = None,
        repository: IndexRepository | None = None,
    ) -> None:
        """Initialize the manager from its collaborators.

        Args:
            folders: Known-folder namespace.
            collisions: Filename acceptance checker.
            index: Metadata index of stored files.
            filesystem: Collaborator used to move accepted uploads into place.
            repository: Optional snapshot store used by :meth:`save_index`.
        """
        self._folders = folders
        self._collisions = collisions
        self._index = index
        self._filesystem = filesystem or LocalFilesystem()
        self._repository = repository

    @classmethod
    def from_config(cls, config: UploadspaceConfig) -> "UploadNamespaceManager":
        """Provision storage and build a manager from configuration.

        Existing folders are discovered on disk and the index is seeded from its
        snapshot when one is present.

        Raises:
            StorageIOError: If base directories cannot be created.
            IndexSnapshotError: If the stored snapshot is unreadable.
        """
        layout = config.storage.layout()
        layout.initialize()
        filesystem = LocalFilesystem()
        folders = FolderNamespace.discover(layout.uploads_dir, filesystem)
        collisions = CollisionChecker(
            folders,
            filesystem,
            allowed_extensions=config.naming.allowed_extensions,
            fallback_extension=config.naming.fallback_extension,
        )
        repository = IndexRepository(config.storage.resolved_index_path())
        index = AssetIndex(repository.load())
        return cls(folders, collisions, index, filesystem=filesystem, repository=repository)

    # Folders ----------------------------------------------------------

    def validate_folder(self, name: str) -> Optional[str]:
        """Return the canonical folder name, or ``None`` if ``name`` is invalid."""
        return self._folders.validate(name)

    async def create_folder(self, name: str) -> list[str]:
        """Create ``name`` (invalid names are ignored) and return all folders."""
        return await self._folders.create(name)

    def list_folders(self) -> list[str]:
        """Return a sorted snapshot of the known folders."""
        return self._folders.names()

    def resolve_folder(self, name: str) -> Path:
        """Return the directory for ``name``; unknown folders map to the root."""
        return self._folders.resolve(name)

    # Uploads ----------------------------------------------------------

    async def accept_upload(self, raw_filename: str, folder: str) -> str:
        """Return the canonical filename for an upload into ``folder``.

        Raises:
            AlreadyExistsError: If the canonical name is already taken.
            StorageIOError: If the existence check fails.
        """
        return await self._collisions.accept(raw_filename, folder)

    async def store_upload(
        self,
        part: UploadedPart,
        folder: str,
        *,
        category: str = IMAGE_CATEGORY,
    ) -> FileRecord:
        """Accept a received part, move it into place and register it.

        Args:
            part: Part handed over by the upload handler.
            folder: Target folder; unknown folders resolve to the root.
            category: Classification tag recorded for the asset.

        Returns:
            FileRecord: The registered record.

        Raises:
            InvalidNameError: If the filename has no usable base name.
            AlreadyExistsError: If the canonical name is already taken.
            StorageIOError: If the existence check or the move fails.
        """
        filename = await self.accept_upload(part.filename, folder)
        base, _ = split_extension(filename)
        if not base:
            raise InvalidNameError(part.filename)

        directory = self.resolve_folder(folder)
        await self._filesystem.move(part.temp_path, directory / filename)
        record = FileRecord(
            filename=filename,
            folder=folder if directory != self._folders.root else "",
            category=category,
            mime_type=part.mime_type,
            size_bytes=part.size_bytes,
            uploaded_at=datetime.now(timezone.utc),
        )
        self.register_file(record)
        LOGGER.info("Stored upload %s", record.relative_path)
        return record

    # Metadata ---------------------------------------------------------

    def register_file(self, records: Any) -> None:
        """Add a record or sequence of records; malformed input is ignored."""
        self._index.add(records)

    def reindex_files(self, records: Iterable[FileRecord]) -> None:
        """Replace all records; an empty input keeps the current index."""
        self._index.replace_all(records)

    async def reindex_from_disk(self) -> int:
        """Rebuild the index from the files under the uploads root.

        Returns:
            int: Number of records found on disk.

        Raises:
            StorageIOError: If a directory or file under the root cannot be read.
        """
        records = await asyncio.to_thread(scan_uploads, self._folders.root)
        self.reindex_files(records)
        return len(records)

    def list_files(self, category: str, folder: str) -> list[FileRecord]:
        """Return records in ``category`` and ``folder`` sorted by filename."""
        return self._index.query(category, folder)

    def save_index(self) -> Optional[Path]:
        """Write an index snapshot when a repository is configured."""
        if self._repository is None:
            return None
        return self._repository.save(self._index)


__all__ = ["UploadNamespaceManager"]
