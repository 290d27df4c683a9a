"""Snapshot persistence for the metadata index."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError

from uploadspace.errors import IndexSnapshotError
from uploadspace.models import FileRecord

from .store import AssetIndex

LOGGER = logging.getLogger(__name__)


class IndexSnapshot(BaseModel):
    """Serialized form of the metadata index."""

    files: List[FileRecord] = Field(default_factory=list)
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class IndexRepository:
    """Load and save metadata index snapshots as JSON."""

    def __init__(self, path: Path) -> None:
        """Initialize the repository.

        Args:
            path: Location of the JSON snapshot file.
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Return the snapshot file location."""
        return self._path

    def load(self) -> list[FileRecord]:
        """Return the records stored in the snapshot.

        Returns:
            list[FileRecord]: Stored records; empty when no snapshot exists yet.

        Raises:
            IndexSnapshotError: If the snapshot cannot be read or parsed.
        """
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            snapshot = IndexSnapshot.model_validate(data)
        except OSError as exc:
            raise IndexSnapshotError(f"Unable to read index snapshot {self._path}") from exc
        except (json.JSONDecodeError, ValidationError) as exc:
            raise IndexSnapshotError(f"Invalid index snapshot data: {exc}") from exc
        LOGGER.debug("Loaded %d records from %s", len(snapshot.files), self._path)
        return snapshot.files

    def save(self, index: AssetIndex) -> Path:
        """Write the current index contents to the snapshot file.

        Args:
            index: Index to serialize.

        Returns:
            Path: Location of the written snapshot.
        """
        snapshot = IndexSnapshot(files=index.records())
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(snapshot.model_dump(mode="json"), indent=2), encoding="utf-8"
        )
        LOGGER.info("Saved %d records to %s", len(snapshot.files), self._path)
        return self._path


__all__ = ["IndexSnapshot", "IndexRepository"]
