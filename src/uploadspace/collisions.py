"""Filename acceptance with collision detection."""

from __future__ import annotations

import logging
from typing import Collection

from .errors import AlreadyExistsError
from .folders import FolderNamespace
from .naming import FALLBACK_EXTENSION, IMAGE_EXTENSIONS, sanitize_filename
from .storage import LocalFilesystem

LOGGER = logging.getLogger(__name__)


class CollisionChecker:
    """Sanitize proposed filenames and reject those already taken.

    The existence check and the later write are not atomic: two uploads racing
    for the same canonical name can both be accepted. Uploads are human-initiated
    and collisions rare, so no locking is attempted here.
    """

    def __init__(
        self,
        folders: FolderNamespace,
        filesystem: LocalFilesystem,
        *,
        allowed_extensions: Collection[str] = IMAGE_EXTENSIONS,
        fallback_extension: str = FALLBACK_EXTENSION,
    ) -> None:
        """Initialize the checker.

        Args:
            folders: Namespace used to resolve target folders.
            filesystem: Collaborator used for existence checks.
            allowed_extensions: Extensions kept when sanitizing.
            fallback_extension: Extension substituted for anything else.
        """
        self._folders = folders
        self._filesystem = filesystem
        self._allowed_extensions = tuple(allowed_extensions)
        self._fallback_extension = fallback_extension

    def sanitize(self, raw_name: str) -> str:
        """Return the canonical form of ``raw_name`` using this checker's extension rules.

        Args:
            raw_name: Filename declared by the client.

        Returns:
            str: Canonical filename; the base may be empty.
        """
        return sanitize_filename(
            raw_name,
            allowed_extensions=self._allowed_extensions,
            fallback_extension=self._fallback_extension,
        )

    async def accept(self, raw_name: str, folder: str) -> str:
        """Return the canonical filename if it is free in ``folder``.

        Args:
            raw_name: Filename declared by the client.
            folder: Target folder; unknown folders resolve to the uploads root.

        Returns:
            str: Accepted canonical filename.

        Raises:
            AlreadyExistsError: If a file with the canonical name already exists.
            StorageIOError: If the existence check fails for another reason.
        """
        filename = self.sanitize(raw_name)
        target = self._folders.resolve(folder) / filename
        if await self._filesystem.path_exists(target):
            LOGGER.info("Rejected upload %r: %s already exists", raw_name, target)
            raise AlreadyExistsError(filename)
        LOGGER.debug("Accepted upload %r as %s", raw_name, target)
        return filename


__all__ = ["CollisionChecker"]
