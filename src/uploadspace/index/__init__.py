"""Metadata index for stored upload records."""

from .repository import IndexRepository, IndexSnapshot
from .scanner import BINARY_CATEGORY, IMAGE_CATEGORY, scan_uploads
from .store import AssetIndex

__all__ = [
    "AssetIndex",
    "IndexRepository",
    "IndexSnapshot",
    "scan_uploads",
    "IMAGE_CATEGORY",
    "BINARY_CATEGORY",
]
