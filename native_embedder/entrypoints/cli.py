"""native-embedder CLI entrypoint.

Command-line interface for embedding text with a local model.
"""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

from native_embedder.core.errors import NativeEmbedderCliError
from native_embedder.core.progress import progress_context
from native_embedder.domain.exceptions import NativeEmbedderError
from native_embedder.version import __version__

if TYPE_CHECKING:
    from native_embedder.core.embedding.native_embedder import NativeEmbedder
    from native_embedder.domain.config import EmbedderConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    Domain errors keep their hint; RuntimeError gets a generic hint; anything
    else is reported as unexpected, with a traceback in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except click.ClickException:
                raise
            except NativeEmbedderError as e:
                raise NativeEmbedderCliError(e.message, hint=e.hint) from e
            except RuntimeError as e:
                raise NativeEmbedderCliError(
                    str(e),
                    hint="Run with --verbose for more details",
                ) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise NativeEmbedderCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send log records to stderr so stdout only carries command output."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _load_config(ctx: click.Context) -> EmbedderConfig:
    from native_embedder.adapters.factory import load_config

    return load_config(ctx.obj.get("config_path"))


def _create_embedder(ctx: click.Context) -> NativeEmbedder:
    from native_embedder.adapters.factory import create_native_embedder

    return create_native_embedder(_load_config(ctx))


def _write_json(data: object, output: Path | None) -> None:
    if output is None:
        click.echo(json.dumps(data))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f)


@click.group()
@click.version_option(version=__version__, prog_name="native-embedder")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress non-essential output.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file layered over the global config.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """native-embedder - Embed text with a local model.

    Models are downloaded on first use and cached in the storage directory.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path
    _configure_logging(verbose, quiet)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_cli_errors("models")
def models(ctx: click.Context, json_output: bool) -> None:
    """List supported embedding models."""
    from native_embedder.adapters.local_models.registry import (
        DEFAULT_MODEL,
        list_supported_models,
    )

    supported = list_supported_models()
    if json_output:
        click.echo(json.dumps(supported, indent=2))
        return

    for info in supported:
        marker = " (default)" if info["id"] == DEFAULT_MODEL else ""
        click.echo(f"{click.style(info['id'], bold=True)}{marker}")
        click.echo(f"  {info['description']}")
        click.echo(f"  Language: {info['language']}  Size: {info['size']}")
        click.echo(f"  {info['reference_url']}")


@cli.command()
@click.argument("text", type=str)
@click.pass_context
@handle_cli_errors("embed")
def embed(ctx: click.Context, text: str) -> None:
    """Embed a query TEXT and print its vector as JSON.

    The model's query prefix is applied before embedding.
    """
    embedder = _create_embedder(ctx)
    click.echo(json.dumps(embedder.embed_text_input(text)))


@cli.command(name="embed-file")
@click.argument(
    "path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write vectors to this file instead of stdout.",
)
@click.pass_context
@handle_cli_errors("embed-file")
def embed_file(ctx: click.Context, path: Path, output: Path | None) -> None:
    """Embed each non-blank line of PATH as a document chunk.

    Prints a JSON list with one vector per embedded line. The model's
    document prefix is applied to every line.
    """
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    if not lines:
        raise NativeEmbedderCliError(
            f"No text to embed in {path}",
            hint="The file is empty or contains only blank lines",
        )

    embedder = _create_embedder(ctx)
    chunks = embedder.apply_chunk_prefix(lines)
    with progress_context(quiet_mode=ctx.obj.get("quiet", False)) as progress:
        vectors = embedder.embed_chunks(chunks, progress=progress)

    vectors = vectors or []
    if len(vectors) != len(lines):
        click.echo(
            f"Warning: embedded {len(vectors)} of {len(lines)} lines",
            err=True,
        )
    _write_json(vectors, output)


@cli.command()
@click.pass_context
@handle_cli_errors("download")
def download(ctx: click.Context) -> None:
    """Download the selected model into the storage directory."""
    embedder = _create_embedder(ctx)
    quiet = ctx.obj.get("quiet", False)

    if embedder.model_downloaded and not quiet:
        click.echo(f"Model {embedder.model.identifier} is already downloaded")

    embedder.embedder_client()

    if not quiet:
        click.echo(f"✓ {embedder.model.identifier} ready in {embedder.cache_dir}")


@cli.group()
def config() -> None:
    """Manage native-embedder configuration files.

    Settings are merged from built-in defaults, the global config file, an
    optional --config file and the SELECTED_MODEL / STORAGE_DIRECTORY
    environment variables, in increasing priority.
    """
    pass


def _display_path_status(path: Path, label: str) -> None:
    """Display a config path with its existence status."""
    status = "exists" if path.exists() else "not created"
    color = "green" if path.exists() else "yellow"
    click.echo(f"{label}{path}")
    click.echo(f"  Status: {click.style(status, fg=color)}")


@config.command(name="show")
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context) -> None:
    """Show config file locations and the effective settings."""
    from native_embedder.adapters.local_models.registry import resolve_model
    from native_embedder.core.storage import resolve_storage_dir
    from native_embedder.shared.config_io import dump_config, get_global_config_path

    _display_path_status(get_global_config_path(), "Global config: ")
    config_path = ctx.obj.get("config_path")
    if config_path is not None:
        _display_path_status(config_path, "Config file: ")

    effective = _load_config(ctx)
    descriptor = resolve_model(effective.model.name)

    click.echo("\nEffective configuration:")
    click.echo(dump_config(effective).rstrip())
    click.echo("\nResolved:")
    click.echo(f"  model = {descriptor.identifier}")
    click.echo(f"  storage = {resolve_storage_dir(effective)}")


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.option(
    "--model",
    type=str,
    default="",
    help="Model identifier to preselect (see 'native-embedder models').",
)
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool, model: str) -> None:
    """Create a commented config file.

    Writes to the --config path when given, otherwise to the global config.
    """
    from native_embedder.adapters.local_models.registry import is_supported_model
    from native_embedder.shared.config_io import (
        create_default_config_file,
        get_global_config_path,
    )

    path = ctx.obj.get("config_path") or get_global_config_path()
    if path.exists() and not force:
        raise NativeEmbedderCliError(
            f"Config file already exists: {path}",
            hint="Use --force to overwrite it",
        )
    if model and not is_supported_model(model):
        raise NativeEmbedderCliError(
            f"Unsupported model: {model}",
            hint="Run 'native-embedder models' to see supported models",
        )

    create_default_config_file(path, model=model)
    click.echo(f"✓ Created config file {path}")


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
