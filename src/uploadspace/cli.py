"""Command line interface for managing the uploads namespace."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import shutil
import uuid
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from uploadspace.config import (
    ConfigError,
    ConfigManager,
    UploadspaceConfig,
    resolve_with_precedence,
)
from uploadspace.errors import AlreadyExistsError, NamespaceError
from uploadspace.manager import UploadNamespaceManager
from uploadspace.models import UploadedPart

console = Console()


def _configure_logging(level: str) -> None:
    """Route library logging through rich at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context) -> UploadspaceConfig:
    manager: ConfigManager = ctx.obj["config_manager"]
    try:
        return manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _open_manager(ctx: click.Context) -> UploadNamespaceManager:
    """Return the namespace manager for this invocation, creating it once."""
    if "namespace" not in ctx.obj:
        config = _load_config(ctx)
        level = "DEBUG" if ctx.obj["verbose"] else config.logging.level
        _configure_logging(level)
        try:
            ctx.obj["namespace"] = UploadNamespaceManager.from_config(config)
        except NamespaceError as exc:
            raise click.ClickException(str(exc)) from exc
        ctx.obj["config"] = config
    return ctx.obj["namespace"]


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the configuration file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Manage the folders, filenames and metadata of uploaded image assets."""
    ctx.ensure_object(dict)
    ctx.obj["config_manager"] = ConfigManager(config_path=config_path)
    ctx.obj["verbose"] = verbose


@cli.group()
def folders() -> None:
    """List and create upload folders."""


@folders.command("list")
@click.pass_context
def folders_list(ctx: click.Context) -> None:
    """Print the known upload folders."""
    namespace = _open_manager(ctx)
    names = namespace.list_folders()
    if not names:
        console.print("[yellow]No upload folders yet.[/yellow]")
        return
    for name in names:
        console.print(name)


@folders.command("create")
@click.argument("name")
@click.pass_context
def folders_create(ctx: click.Context, name: str) -> None:
    """Create the folder NAME after canonicalizing it."""
    namespace = _open_manager(ctx)
    canonical = namespace.validate_folder(name)
    if canonical is None:
        raise click.ClickException(
            f"'{name}' is not a valid folder name (use lowercase letters, digits and hyphens)."
        )
    try:
        asyncio.run(namespace.create_folder(name))
    except NamespaceError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Folder ready: {canonical}[/green]")


@cli.command()
@click.argument("filename")
@click.option("--folder", default="", help="Target folder (defaults to the uploads root).")
@click.pass_context
def accept(ctx: click.Context, filename: str, folder: str) -> None:
    """Check whether FILENAME can be uploaded and print its canonical form."""
    namespace = _open_manager(ctx)
    try:
        accepted = asyncio.run(namespace.accept_upload(filename, folder))
    except AlreadyExistsError as exc:
        raise click.ClickException(f"{exc.filename} already exists.") from exc
    except NamespaceError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(accepted)


def _stage(source: Path, temp_dir: Path) -> UploadedPart:
    """Copy ``source`` into the staging directory the way the upload handler would.

    Args:
        source: File selected on the command line.
        temp_dir: Staging directory from the storage settings.

    Returns:
        UploadedPart: Part describing the staged copy.

    Raises:
        click.ClickException: If the file cannot be copied.
    """
    mime, _ = mimetypes.guess_type(source.name)
    staged = temp_dir / f"{uuid.uuid4().hex}-{source.name}"
    try:
        shutil.copy2(source, staged)
    except OSError as exc:
        staged.unlink(missing_ok=True)
        raise click.ClickException(f"Unable to stage {source} for upload.") from exc
    return UploadedPart(
        filename=source.name,
        size_bytes=staged.stat().st_size,
        mime_type=mime or "application/octet-stream",
        temp_path=staged,
    )


def _discard(parts: list[UploadedPart]) -> None:
    for part in parts:
        part.temp_path.unlink(missing_ok=True)


@cli.command()
@click.argument(
    "sources",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--folder", default="", help="Target folder (defaults to the uploads root).")
@click.option("--category", default="image", show_default=True, help="Category tag to record.")
@click.pass_context
def store(ctx: click.Context, sources: tuple[Path, ...], folder: str, category: str) -> None:
    """Copy SOURCES into the uploads store and register them."""
    namespace = _open_manager(ctx)
    config: UploadspaceConfig = ctx.obj["config"]
    limits = config.upload
    temp_dir = config.storage.layout().temp_dir

    parts: list[UploadedPart] = []
    try:
        for source in sources:
            parts.append(_stage(source, temp_dir))
    except click.ClickException:
        _discard(parts)
        raise

    if not limits.accepts_batch(parts):
        _discard(parts)
        if len(parts) > limits.max_files_per_request:
            raise click.ClickException(
                f"Too many files: at most {limits.max_files_per_request} per request."
            )
        rejected = ", ".join(part.filename for part in parts if not limits.accepts(part))
        raise click.ClickException(
            f"{rejected} exceeds upload limits or is not a supported image."
        )

    try:
        for index, part in enumerate(parts):
            try:
                record = asyncio.run(namespace.store_upload(part, folder, category=category))
            except NamespaceError as exc:
                _discard(parts[index:])
                raise click.ClickException(str(exc)) from exc
            console.print(f"[green]Stored {record.relative_path}[/green]")
    finally:
        namespace.save_index()


@cli.group()
def files() -> None:
    """Query registered files."""


@files.command("list")
@click.option("--category", default="image", show_default=True, help="Category to match.")
@click.option("--folder", default="", help="Folder to match (empty for the root).")
@click.option("--json", "json_output", is_flag=True, help="Emit records as JSON.")
@click.pass_context
def files_list(ctx: click.Context, category: str, folder: str, json_output: bool) -> None:
    """List files registered under CATEGORY and FOLDER."""
    namespace = _open_manager(ctx)
    records = namespace.list_files(category, folder)
    if json_output:
        console.print_json(data=[record.model_dump(mode="json") for record in records])
        return
    if not records:
        console.print("[yellow]No matching files.[/yellow]")
        return
    table = Table(title=f"{category} files in /{folder}")
    table.add_column("Filename")
    table.add_column("MIME")
    table.add_column("Size", justify="right")
    for record in records:
        size = "" if record.size_bytes is None else str(record.size_bytes)
        table.add_row(record.filename, record.mime_type or "", size)
    console.print(table)


@cli.command()
@click.pass_context
def reindex(ctx: click.Context) -> None:
    """Rebuild the metadata index from the files on disk."""
    namespace = _open_manager(ctx)
    try:
        count = asyncio.run(namespace.reindex_from_disk())
    except NamespaceError as exc:
        raise click.ClickException(str(exc)) from exc
    if count == 0:
        console.print("[yellow]No files found; existing index left unchanged.[/yellow]")
        return
    path = namespace.save_index()
    console.print(f"[green]Indexed {count} files into {path}.[/green]")


@cli.group()
def config() -> None:
    """Inspect and update the configuration file."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration."""
    manager: ConfigManager = ctx.obj["config_manager"]
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value addressed by a dotted KEY."""
    manager: ConfigManager = ctx.obj["config_manager"]
    manager.ensure_exists()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'storage.uploads_dir'.")

    try:
        parsed_value = yaml.safe_load(value)
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=UploadspaceConfig(), file_overrides=file_data)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    console.print(f"[green]Updated {'.'.join(segments)} = {parsed_value!r}.[/green]")


def main() -> None:
    """Console script entry point."""
    cli(obj={})


__all__ = ["cli", "main"]
