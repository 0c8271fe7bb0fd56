"""CLI commands for patching third-party source packages."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer

from .manifest import (
    DEFAULT_CONFIG_NAME,
    ConfigError,
    copy_config_template,
    load_config,
    write_config,
)
from .tools.errors import PatchError
from .tools.sources import PatchSource
from .workflow import NO_PATCHES_MESSAGE, resolve_entries, run_patches

APP_HELP = "Apply unified-diff patch files to copies of third-party source packages."
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = typer.Typer(help=APP_HELP)


def _diagnostic(message: str) -> None:
    typer.echo(message, err=True)


def _fail(error: Exception) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1) from error


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output and patch telemetry to stderr.",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


@app.command("apply")
def apply_command(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the patch configuration file.",
    ),
) -> None:
    """Copy each configured package into the sandbox and apply its patches."""
    try:
        loaded = load_config(Path(config), diagnostic=_diagnostic)
        runs = run_patches(loaded, echo=typer.echo, diagnostic=_diagnostic)
    except (ConfigError, PatchError, OSError) as error:
        _fail(error)

    if not runs:
        typer.echo(NO_PATCHES_MESSAGE)


@app.command("init")
def init_command(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path of the configuration file to create.",
    ),
    force: bool = typer.Option(
        False,
        "--force/--no-force",
        help="Overwrite an existing configuration file.",
    ),
) -> None:
    """Write a starter configuration file."""
    config_path = Path(config)
    if config_path.exists() and not force:
        typer.echo(f"Config already exists at {config_path}; use --force to overwrite.", err=True)
        raise typer.Exit(code=1)
    write_config(config_path, copy_config_template())
    typer.echo(f"Wrote {config_path}")


@app.command("list")
def list_command(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the patch configuration file.",
    ),
) -> None:
    """Show which package each entry resolves to and its patch files, without patching."""
    try:
        loaded = load_config(Path(config), diagnostic=_diagnostic)
    except ConfigError as error:
        _fail(error)

    resolved = resolve_entries(loaded, diagnostic=_diagnostic)
    if not resolved:
        typer.echo(NO_PATCHES_MESSAGE)
        return

    for entry, package in resolved:
        typer.echo(f"{entry.name}: {package.root}")
        for item in entry.patches:
            suffix = "" if item.source is PatchSource.DEFAULT else f" ({item.source.value})"
            typer.echo(f"  - {item.path.as_posix()}{suffix}")


if __name__ == "__main__":
    app()
