"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from uploadspace.config import (
    ConfigError,
    ConfigManager,
    UploadspaceConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from uploadspace.config.models import NamingSettings, UploadLimits
from uploadspace.models import UploadedPart


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".uploadspace" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "uploadspace configuration file" in text
    assert "Last updated:" in text
    assert isinstance(manager.load(include_env=False), UploadspaceConfig)


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"storage": {"uploads_dir": "/srv/file"}, "logging": {"level": "INFO"}})
    env = {"UPLOADSPACE__STORAGE__UPLOADS_DIR": "/srv/env", "UNRELATED": "1"}

    from_env = manager.load(env_overrides=env)
    from_cli = manager.load(env_overrides=env, cli_overrides={"storage.uploads_dir": "/srv/cli"})

    assert from_env.storage.uploads_dir == "/srv/env"
    assert from_env.logging.level == "INFO"
    # CLI overrides take precedence over environment
    assert from_cli.storage.uploads_dir == "/srv/cli"


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_renders_defaults() -> None:
    flat = flatten_for_env(UploadspaceConfig())

    assert flat["UPLOADSPACE__NAMING__FALLBACK_EXTENSION"] == ".png"
    assert flat["UPLOADSPACE__UPLOAD__MAX_FILE_SIZE_BYTES"] == "3145728"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=UploadspaceConfig(),
            file_overrides={"upload": {"max_file_size_bytes": "not-an-int"}},
        )


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=UploadspaceConfig(), cli_overrides={"storage.bucket": "s3"}
        )


def test_naming_settings_normalize_extensions() -> None:
    naming = NamingSettings(allowed_extensions=["JPG", ".Png"], fallback_extension="PNG")

    assert naming.allowed_extensions == [".jpg", ".png"]
    assert naming.fallback_extension == ".png"


def test_upload_limits_accepts_only_small_images(tmp_path: Path) -> None:
    limits = UploadLimits()

    def _part(size: int, mime: str) -> UploadedPart:
        return UploadedPart(
            filename="x.png", size_bytes=size, mime_type=mime, temp_path=tmp_path
        )

    assert limits.accepts(_part(1024, "image/png"))
    assert not limits.accepts(_part(3_145_729, "image/png"))
    assert not limits.accepts(_part(1024, "application/pdf"))


def test_upload_limits_accepts_batch_within_file_count(tmp_path: Path) -> None:
    """Verify batches are bounded by file count as well as per-part limits.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    limits = UploadLimits()
    good = UploadedPart(
        filename="x.png", size_bytes=1024, mime_type="image/png", temp_path=tmp_path
    )
    bad = UploadedPart(
        filename="x.pdf", size_bytes=1024, mime_type="application/pdf", temp_path=tmp_path
    )

    assert limits.accepts_batch([good] * 20)
    assert not limits.accepts_batch([good] * 21)
    assert not limits.accepts_batch([good, bad])
    assert limits.accepts_batch([])
