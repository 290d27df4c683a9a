"""Configuration models describing uploadspace settings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uploadspace.models import UploadedPart
from uploadspace.naming import FALLBACK_EXTENSION, IMAGE_EXTENSIONS
from uploadspace.storage import StorageLayout


class UploadspaceBaseModel(BaseModel):
    """Shared configuration for uploadspace Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(UploadspaceBaseModel):
    """Locations of the uploads store on disk.

    Attributes:
        uploads_dir: Root directory of the uploads namespace.
        thumbs_dir: Directory reserved for thumbnails.
        temp_dir: Staging directory for received upload parts.
        index_path: JSON snapshot of the metadata index.
    """

    uploads_dir: str = "~/.uploadspace/repo/uploads"
    thumbs_dir: str = "~/.uploadspace/data/thumbs"
    temp_dir: str = "~/.uploadspace/data/temp-upload"
    index_path: str = "~/.uploadspace/data/uploads.json"

    def layout(self) -> StorageLayout:
        """Return the resolved directory layout."""
        return StorageLayout(
            uploads_dir=Path(self.uploads_dir).expanduser(),
            thumbs_dir=Path(self.thumbs_dir).expanduser(),
            temp_dir=Path(self.temp_dir).expanduser(),
        )

    def resolved_index_path(self) -> Path:
        return Path(self.index_path).expanduser()


class NamingSettings(UploadspaceBaseModel):
    """Filename canonicalization options.

    Attributes:
        allowed_extensions: Extensions kept when sanitizing filenames.
        fallback_extension: Extension substituted for anything else.
    """

    allowed_extensions: List[str] = Field(default_factory=lambda: list(IMAGE_EXTENSIONS))
    fallback_extension: str = FALLBACK_EXTENSION

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]

    @field_validator("fallback_extension")
    @classmethod
    def _normalize_fallback(cls, value: str) -> str:
        value = value.lower()
        return value if value.startswith(".") else f".{value}"


class UploadLimits(UploadspaceBaseModel):
    """Limits enforced by the upload-receiving handler before parts reach the core.

    Attributes:
        max_file_size_bytes: Largest accepted part.
        allowed_mime_types: MIME types accepted from clients.
        max_files_per_request: Maximum parts accepted in one request.
    """

    max_file_size_bytes: int = 3_145_728
    allowed_mime_types: List[str] = Field(
        default_factory=lambda: ["image/png", "image/jpeg", "image/gif", "image/webp"]
    )
    max_files_per_request: int = 20

    def accepts(self, part: UploadedPart) -> bool:
        """Return whether ``part`` passes the size and MIME checks."""
        if part.size_bytes > self.max_file_size_bytes:
            return False
        return part.mime_type in self.allowed_mime_types

    def accepts_batch(self, parts: Sequence[UploadedPart]) -> bool:
        """Return whether one request carrying ``parts`` is within limits.

        Args:
            parts: Every part received in the request.

        Returns:
            bool: True when the request is small enough and each part is accepted.
        """
        if len(parts) > self.max_files_per_request:
            return False
        return all(self.accepts(part) for part in parts)


class LoggingSettings(UploadspaceBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class UploadspaceConfig(UploadspaceBaseModel):
    """Top-level configuration struct for uploadspace.

    Attributes:
        storage: Storage locations.
        naming: Filename canonicalization settings.
        upload: Limits for the upload handler.
        logging: Logging configuration.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    naming: NamingSettings = Field(default_factory=NamingSettings)
    upload: UploadLimits = Field(default_factory=UploadLimits)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "UploadspaceBaseModel",
    "StorageSettings",
    "NamingSettings",
    "UploadLimits",
    "LoggingSettings",
    "UploadspaceConfig",
]
