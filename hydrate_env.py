#!/usr/bin/env python3
"""
Layered Dotenv CLI

Inspect dotenv files and preview what a layered `.env` + `.env.<NODE_ENV>`
load would put into the environment, without modifying it.
"""

from enum import Enum
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from typing_extensions import Annotated

import dotenv_loader as dl
import env_layering as el
from config import settings
from dotenv_codec import DotenvParseError, stringify
from env_backends import MemoryEnvironment
from env_utils import is_env_var_truthy

app = typer.Typer(
    help="Load and inspect layered dotenv files",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    table = "table"
    dotenv = "dotenv"


# =============================================================================
# LOGGING SETUP
# =============================================================================


def setup_logging(level: str | None = None) -> None:
    """
    Configure loguru with rich handler for console output.

    Should be called once at application entry point.
    """
    if level is None:
        level = settings.logging.level  # pyright: ignore[reportUnknownMemberType]

    # Remove default handler
    logger.remove()

    _ = logger.add(
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
        ),
        format="{message}",
        level=str(level).upper(),  # pyright: ignore[reportUnknownArgumentType]
    )


# =============================================================================
# RENDERING
# =============================================================================


def mask_value(value: str, reveal: bool) -> str:
    """Hide a value unless revealing was requested; empty stays empty."""
    if reveal or value == "":
        return value
    return settings.cli.mask  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]


def render(
    values: dict[str, str],
    title: str,
    output: OutputFormat,
    reveal: bool,
    origins: dict[str, str] | None = None,
) -> None:
    """Print variables as a Rich table or as dotenv text."""

    if output is OutputFormat.dotenv:
        typer.echo(stringify({k: mask_value(v, reveal) for k, v in values.items()}))
        return

    if not values:
        console.print(f"[dim]{title}: no variables[/dim]")
        return

    table = Table(title=title)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    if origins is not None:
        table.add_column("Origin", style="dim")

    for key, value in values.items():
        row = [key, mask_value(value, reveal)]
        if origins is not None:
            row.append(origins.get(key, ""))
        table.add_row(*row)

    console.print(table)


def fail(error: Exception) -> typer.Exit:
    """Report a load failure and build the exit to raise."""
    console.print(f"[bold red]✗ Failed:[/bold red] {error}")
    return typer.Exit(code=1)


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def show(
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Dotenv file to read (default: configured base file)"),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--format", "-o", help="Output format"),
    ] = OutputFormat.table,
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Print values instead of masking them"),
    ] = False,
) -> None:
    """
    Parse a single dotenv file and print its variables.

    Nothing is exported. A missing file prints as empty.

    Examples:
        python hydrate_env.py show
        python hydrate_env.py show -p .env.production --format dotenv --reveal
    """
    setup_logging()

    options = dl.LoadOptions() if path is None else dl.LoadOptions.for_path(path)
    try:
        values = dl.load(options)
    except (OSError, DotenvParseError) as e:
        raise fail(e) from e

    source = dl.resolve_path(options.path)
    title = "(skipped)" if source is None else str(source)
    render(values, title=title, output=output, reveal=reveal)


@app.command()
def hydrate(
    base: Annotated[
        Path | None,
        typer.Option("--base", "-b", help="Base dotenv file (default: configured base file)"),
    ] = None,
    env_var: Annotated[
        str | None,
        typer.Option("--env-var", help="Variable naming the current environment (default: NODE_ENV)"),
    ] = None,
    environment_name: Annotated[
        str | None,
        typer.Option("--env", "-e", help="Preview as if the environment variable had this value"),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--format", "-o", help="Output format"),
    ] = OutputFormat.table,
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Print values instead of masking them"),
    ] = False,
) -> None:
    """
    Preview a layered load of the base file and its environment overlay.

    Runs against a copy of the current environment, so variables already set
    in the shell win exactly as they would at startup. The real environment
    is left untouched.

    Examples:
        python hydrate_env.py hydrate
        python hydrate_env.py hydrate --env production --reveal
    """
    setup_logging()

    preview = MemoryEnvironment.from_process()
    before = {key: preview.get(key) for key in preview.keys()}

    engine = el.LayeringEngine(
        environment=preview,
        base_path=base,
        indicator_variable=env_var,
    )
    if environment_name is not None:
        preview.set(engine.indicator_variable, environment_name)

    try:
        engine.load_env()
    except (OSError, DotenvParseError) as e:
        raise fail(e) from e

    values = {key: preview.get(key) or "" for key in engine.tracked}
    origins = {
        key: "pre-set" if key in before and before[key] == value else "loaded"
        for key, value in values.items()
    }

    indicator = preview.get(engine.indicator_variable)
    title = str(engine.base_path)
    if indicator:
        title = f"{title} + {engine.overlay_path(indicator)}"

    render(values, title=title, output=output, reveal=reveal, origins=origins)


@app.command()
def check(
    key: Annotated[str, typer.Argument(help="Environment variable to test")],
) -> None:
    """
    Exit 0 if the variable holds a truthy value, 1 otherwise.

    Truthy: true, t, 1, y, yes, on, enabled, active (any case).
    """
    if is_env_var_truthy(key):
        console.print(f"[green]✓[/green] {key} is truthy")
        return

    console.print(f"[yellow]![/yellow] {key} is not truthy")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
