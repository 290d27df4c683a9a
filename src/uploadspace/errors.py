"""Errors raised by the upload namespace."""

from __future__ import annotations

from pathlib import Path


class NamespaceError(Exception):
    """Base exception for upload namespace operations."""


class InvalidNameError(NamespaceError):
    """Raised when a folder name fails canonicalization in strict mode."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid folder name: {name!r}")
        self.name = name


class AlreadyExistsError(NamespaceError):
    """Raised when the canonical filename is already taken in its folder."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"File {filename} already exists.")
        self.filename = filename


class StorageIOError(NamespaceError):
    """Raised when a filesystem operation fails for a reason other than absence.

    The underlying ``OSError`` is chained as ``__cause__``; the message only
    carries the operation and path so it can be shown to operators.
    """

    def __init__(self, operation: str, path: Path | str) -> None:
        super().__init__(f"Storage operation '{operation}' failed for {path}")
        self.operation = operation
        self.path = Path(path)


class IndexSnapshotError(NamespaceError):
    """Raised when a persisted index snapshot cannot be read or parsed."""


__all__ = [
    "NamespaceError",
    "InvalidNameError",
    "AlreadyExistsError",
    "StorageIOError",
    "IndexSnapshotError",
]
