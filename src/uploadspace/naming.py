"""Canonicalization rules for upload folder names and filenames."""

from __future__ import annotations

import re
import unicodedata
from pathlib import PurePosixPath
from typing import Collection, Optional

from .errors import InvalidNameError

IMAGE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")
FALLBACK_EXTENSION = ".png"

FOLDER_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-]*[a-z0-9]$")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_WORD_SEPARATORS = re.compile(r"[^a-z0-9]+")
_UNSAFE_CHARS = re.compile(r"[^a-z0-9\-]+")


def _deburr(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def kebab_case(value: str) -> str:
    """Convert ``value`` to lowercase hyphen-separated words.

    Camel-case boundaries start a new word and every run of characters outside
    ``[a-z0-9]`` collapses into a single hyphen. Leading and trailing hyphens are
    removed.

    Args:
        value: Arbitrary text.

    Returns:
        str: Kebab-cased text, possibly empty.
    """
    spaced = _CAMEL_BOUNDARY.sub("-", _deburr(value))
    return _WORD_SEPARATORS.sub("-", spaced.lower()).strip("-")


def split_extension(name: str) -> tuple[str, str]:
    """Split a filename into base name and extension (including the dot).

    A name made only of an extension (``.png``) yields an empty base so that
    sanitized output always splits back into the same parts.
    """
    base, dot, ext = name.rpartition(".")
    if not dot:
        return name, ""
    return base, f".{ext}"


def sanitize_filename(
    raw_name: str,
    *,
    allowed_extensions: Collection[str] = IMAGE_EXTENSIONS,
    fallback_extension: str = FALLBACK_EXTENSION,
) -> str:
    """Return the canonical, storage-safe form of an uploaded filename.

    Directory components are discarded. The base name is trimmed, lower-cased
    and kebab-cased; anything outside ``[a-z0-9-]`` is dropped. Extensions outside
    ``allowed_extensions`` are replaced by ``fallback_extension``. The base may
    come out empty; callers decide whether that is acceptable.

    Args:
        raw_name: Filename declared by the client.
        allowed_extensions: Lower-case extensions that are kept as-is.
        fallback_extension: Extension used for anything else.

    Returns:
        str: Canonical filename.
    """
    name = PurePosixPath(raw_name.strip().replace("\\", "/")).name
    base, ext = split_extension(name)
    base = _UNSAFE_CHARS.sub("", kebab_case(base.strip().lower()))
    ext = ext.lower()
    if ext not in allowed_extensions:
        ext = fallback_extension
    return base + ext


def validate_folder_name(raw_name: str) -> Optional[str]:
    """Canonicalize a folder name, returning ``None`` when it is not acceptable.

    Names that already satisfy :data:`FOLDER_NAME_PATTERN` are returned unchanged.
    Other names are kebab-cased, but only when they start and end with an
    alphanumeric character: ``"  Team Logos "`` becomes ``"team-logos"`` while
    ``"-bad-"`` is rejected rather than silently trimmed.
    """
    trimmed = raw_name.strip()
    if FOLDER_NAME_PATTERN.match(trimmed):
        return trimmed
    if not trimmed or not (trimmed[0].isalnum() and trimmed[-1].isalnum()):
        return None
    candidate = kebab_case(trimmed)
    if not candidate or not FOLDER_NAME_PATTERN.match(candidate):
        return None
    return candidate


def require_folder_name(raw_name: str) -> str:
    """Strict variant of :func:`validate_folder_name`.

    Raises:
        InvalidNameError: If the name cannot be canonicalized into a folder name.
    """
    folder = validate_folder_name(raw_name)
    if folder is None:
        raise InvalidNameError(raw_name)
    return folder


__all__ = [
    "IMAGE_EXTENSIONS",
    "FALLBACK_EXTENSION",
    "FOLDER_NAME_PATTERN",
    "kebab_case",
    "split_extension",
    "sanitize_filename",
    "validate_folder_name",
    "require_folder_name",
]
