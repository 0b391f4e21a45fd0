"""
Dotenv File Loader

Reads a single dotenv file into a mapping and optionally exports it.

Key features:
- Missing file is not an error: it loads as an empty mapping
- Blocking and asyncio variants with identical parsing and error behaviour
- Export never overwrites a variable the environment already holds
"""

import asyncio
import os
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, field_validator
from typing_extensions import Annotated

from config import settings
from dotenv_codec import parse
from env_backends import Environment, ProcessEnvironment

# =============================================================================
# LOAD OPTIONS
# =============================================================================


class DefaultPath(BaseModel, frozen=True):
    """Use the configured base file name (`.env` unless overridden)."""

    kind: Literal["default"] = "default"


class ExplicitPath(BaseModel, frozen=True):
    """Read this exact file."""

    kind: Literal["explicit"] = "explicit"
    path: Path

    @field_validator("path")
    @classmethod
    def reject_empty_path(cls, value: Path) -> Path:
        # "" and Path("") both come out as Path("."), which has no parts
        if not value.parts:
            raise ValueError("explicit path is empty; use SkipPath to load nothing")
        return value


class SkipPath(BaseModel, frozen=True):
    """Read nothing; the load produces an empty mapping."""

    kind: Literal["skip"] = "skip"


PathChoice = Annotated[
    DefaultPath | ExplicitPath | SkipPath,
    Field(discriminator="kind"),
]


class LoadOptions(BaseModel, frozen=True):
    """
    Options for a single-file load.

    `path` distinguishes "never given" (DefaultPath) from "explicitly empty"
    (SkipPath) from an actual location (ExplicitPath).
    """

    path: PathChoice = DefaultPath()
    export: bool = False

    @classmethod
    def for_path(
        cls,
        path: str | os.PathLike[str] | None,
        export: bool = False,
    ) -> "LoadOptions":
        """
        Build options from a nullable path.

        None, "" and Path("") mean skip. Path("") is indistinguishable from
        Path("."), so a path with no parts is treated as empty too.
        """
        if path is None or os.fspath(path) == "" or not Path(path).parts:
            return cls(path=SkipPath(), export=export)
        return cls(path=ExplicitPath(path=Path(path)), export=export)


def resolve_path(choice: DefaultPath | ExplicitPath | SkipPath) -> Path | None:
    """Map a path choice to the file to read, or None when loading is skipped."""

    if isinstance(choice, ExplicitPath):
        return choice.path
    if isinstance(choice, SkipPath):
        return None
    return Path(settings.loader.base_filename)  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]


# =============================================================================
# FILE LOADING
# =============================================================================


def _read_text(path: Path) -> str | None:
    """Whole-file read; None when the file does not exist."""
    try:
        return path.read_text(encoding=settings.loader.encoding)  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
    except FileNotFoundError:
        logger.debug(f"No dotenv file at {path}, nothing to load")
        return None


def _parse_text(path: Path, text: str | None) -> dict[str, str]:
    if text is None:
        return {}
    values = parse(text)
    logger.debug(f"Read {len(values)} variable(s) from {path}")
    return values


def load_file(path: str | os.PathLike[str]) -> dict[str, str]:
    """
    Read and parse one dotenv file.

    Returns an empty mapping if the file does not exist. Any other OSError
    and any DotenvParseError propagate unchanged.
    """
    file_path = Path(path)
    return _parse_text(file_path, _read_text(file_path))


async def load_file_async(path: str | os.PathLike[str]) -> dict[str, str]:
    """Asynchronous `load_file`: the read runs in a worker thread."""

    file_path = Path(path)
    text = await asyncio.to_thread(_read_text, file_path)
    return _parse_text(file_path, text)


# =============================================================================
# LOAD AND EXPORT
# =============================================================================


def export_missing(values: dict[str, str], environment: Environment) -> list[str]:
    """
    Set each variable the environment does not already hold.

    First writer wins: existing values, even empty ones, are left alone.
    Returns the keys that were written.
    """
    written: list[str] = []
    for key, value in values.items():
        if environment.get(key) is not None:
            continue
        environment.set(key, value)
        written.append(key)
    return written


def _finish_load(
    values: dict[str, str],
    options: LoadOptions,
    environment: Environment | None,
) -> dict[str, str]:
    if options.export:
        if environment is None:
            environment = ProcessEnvironment()
        written = export_missing(values, environment)
        logger.debug(f"Exported {len(written)} of {len(values)} variable(s)")
    return values


def load(
    options: LoadOptions | None = None,
    *,
    environment: Environment | None = None,
) -> dict[str, str]:
    """
    Load one dotenv file and optionally export it into the environment.

    With `export`, a key is only written when the environment has no value
    for it. The returned mapping is the file content either way.
    """
    if options is None:
        options = LoadOptions()

    path = resolve_path(options.path)
    values = load_file(path) if path is not None else {}
    return _finish_load(values, options, environment)


async def load_async(
    options: LoadOptions | None = None,
    *,
    environment: Environment | None = None,
) -> dict[str, str]:
    """Asynchronous `load`, same precedence and return value."""

    if options is None:
        options = LoadOptions()

    path = resolve_path(options.path)
    values = await load_file_async(path) if path is not None else {}
    return _finish_load(values, options, environment)
