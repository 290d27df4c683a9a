"""Tests for filename and folder-name canonicalization."""

import pytest

from uploadspace.errors import InvalidNameError
from uploadspace.naming import (
    kebab_case,
    require_folder_name,
    sanitize_filename,
    validate_folder_name,
)


def test_sanitize_lowercases_and_kebabs_base_name() -> None:
    assert sanitize_filename("My Photo!!.JPG") == "my-photo.jpg"


def test_sanitize_defaults_missing_extension_to_png() -> None:
    assert sanitize_filename("diagram") == "diagram.png"


@pytest.mark.parametrize("raw", ["notes.TXT", "vector.svg", "archive.tar.gz", "trailing."])
def test_sanitize_coerces_unsupported_extensions(raw: str) -> None:
    assert sanitize_filename(raw).endswith(".png")


def test_sanitize_keeps_allowed_extensions() -> None:
    assert sanitize_filename("Banner.WebP") == "banner.webp"
    assert sanitize_filename("shot.jpeg") == "shot.jpeg"


def test_sanitize_drops_directories_and_accents() -> None:
    assert sanitize_filename("../../etc/passwd") == "passwd.png"
    assert sanitize_filename("Café Menu.webp") == "cafe-menu.webp"


def test_sanitize_may_produce_empty_base() -> None:
    assert sanitize_filename("!!!.png") == ".png"
    assert sanitize_filename(".png") == ".png"


def test_sanitize_is_idempotent() -> None:
    samples = [
        "My Photo!!.JPG",
        "diagram",
        "  spaced   out  name .gif",
        "archive.tar.gz",
        "UPPER_case-Mixed.Jpeg",
        "!!!.png",
        "",
        "été 2024 (final).PNG",
    ]
    for raw in samples:
        once = sanitize_filename(raw)
        assert sanitize_filename(once) == once


def test_sanitize_honours_custom_extension_rules() -> None:
    rules = {"allowed_extensions": (".tiff",), "fallback_extension": ".jpg"}

    assert sanitize_filename("scan.tiff", **rules) == "scan.tiff"
    assert sanitize_filename("scan.bmp", **rules) == "scan.jpg"


def test_kebab_case_splits_camel_case_words() -> None:
    assert kebab_case("TeamLogos") == "team-logos"
    assert kebab_case("HTMLExport") == "html-export"
    assert kebab_case("--already--kebab--") == "already-kebab"


def test_validate_folder_name_canonicalizes_spaces() -> None:
    assert validate_folder_name("  Team Logos ") == "team-logos"
    assert validate_folder_name("My_Folder") == "my-folder"


@pytest.mark.parametrize("name", ["team-logos", "a1", "a--b", "2024"])
def test_validate_folder_name_returns_valid_names_unchanged(name: str) -> None:
    assert validate_folder_name(name) == name


@pytest.mark.parametrize("name", ["-bad-", "a", "", "   ", "logos!", "!!"])
def test_validate_folder_name_rejects_invalid(name: str) -> None:
    assert validate_folder_name(name) is None


def test_require_folder_name_raises_for_invalid() -> None:
    assert require_folder_name(" Icons ") == "icons"
    with pytest.raises(InvalidNameError) as excinfo:
        require_folder_name("-bad-")
    assert excinfo.value.name == "-bad-"
