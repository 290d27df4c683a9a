"""Data models describing stored assets and incoming uploads."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FileRecord(BaseModel):
    """Metadata describing one stored asset.

    Attributes:
        filename: Canonical filename of the asset.
        folder: Folder containing the asset, or an empty string for the root.
        category: Free-form classification tag (for example ``image``).
        mime_type: Declared MIME type reported at upload time.
        size_bytes: Size of the stored file in bytes.
        uploaded_at: Time the asset was registered.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    folder: str = ""
    category: str
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    uploaded_at: Optional[datetime] = None

    @property
    def relative_path(self) -> str:
        """Return the ``folder/filename`` path relative to the uploads root."""
        if not self.folder:
            return self.filename
        return f"{self.folder}/{self.filename}"


class UploadedPart(BaseModel):
    """A validated part handed over by the upload-receiving collaborator.

    Attributes:
        filename: Raw filename declared by the client.
        size_bytes: Size of the received payload.
        mime_type: MIME type declared by the client.
        temp_path: Temporary location holding the received bytes.
    """

    filename: str
    size_bytes: int
    mime_type: str
    temp_path: Path


class RelativeUploadPath(BaseModel):
    """Folder and filename components of a path inside the uploads root."""

    folder: str
    filename: str


def parse_relative_path(value: str) -> RelativeUploadPath:
    """Split an uploads-relative path into its folder and filename parts.

    Args:
        value: Relative path such as ``team-logos/a.png``.

    Returns:
        RelativeUploadPath: Parsed folder (empty for the root) and filename.
    """
    path = PurePosixPath(value.replace("\\", "/"))
    folder = str(path.parent)
    return RelativeUploadPath(folder="" if folder == "." else folder, filename=path.name)


__all__ = ["FileRecord", "UploadedPart", "RelativeUploadPath", "parse_relative_path"]
