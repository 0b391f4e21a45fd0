"""
Tests for single-file loading and export.

Covers the missing-file rule, error propagation, the three path choices,
and the first-writer-wins export.
"""

import asyncio
import os
from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from dotenv_codec import DotenvParseError
from dotenv_loader import (
    DefaultPath,
    ExplicitPath,
    LoadOptions,
    SkipPath,
    export_missing,
    load,
    load_async,
    load_file,
    load_file_async,
    resolve_path,
)
from env_backends import MemoryEnvironment

WriteEnv = Callable[[str, str], Path]

# =============================================================================
# FILE LOADER TESTS
# =============================================================================


def test_load_file_reads_and_parses(write_env: WriteEnv):
    path = write_env(".env", "GREETING=hello world\nCOUNT=3\n")
    assert load_file(path) == {"GREETING": "hello world", "COUNT": "3"}


def test_load_file_missing_returns_empty(tmp_path: Path):
    """A file that does not exist is not an error."""
    assert load_file(tmp_path / "does-not-exist.env") == {}


def test_load_file_accepts_string_path(write_env: WriteEnv):
    path = write_env("custom.env", "A=1\n")
    assert load_file(str(path)) == {"A": "1"}


def test_load_file_directory_propagates(tmp_path: Path):
    """I/O failures other than not-found reach the caller unchanged."""
    with pytest.raises(OSError):
        _ = load_file(tmp_path)


def test_load_file_parse_error_propagates(write_env: WriteEnv):
    path = write_env(".env", "OK=1\nthis line is broken\n")
    with pytest.raises(DotenvParseError):
        _ = load_file(path)


def test_load_file_async_matches_sync(write_env: WriteEnv, tmp_path: Path):
    path = write_env(".env", 'MULTI="one\ntwo"\nEMPTY=\n')

    assert asyncio.run(load_file_async(path)) == load_file(path)
    assert asyncio.run(load_file_async(tmp_path / "missing")) == {}


def test_load_file_async_errors_propagate(tmp_path: Path, write_env: WriteEnv):
    broken = write_env(".env", "this line is broken\n")

    with pytest.raises(OSError):
        _ = asyncio.run(load_file_async(tmp_path))
    with pytest.raises(DotenvParseError):
        _ = asyncio.run(load_file_async(broken))


# =============================================================================
# LOAD OPTIONS TESTS
# =============================================================================


def test_load_options_defaults():
    options = LoadOptions()
    assert options.path == DefaultPath()
    assert options.export is False


def test_load_options_for_path_none_or_empty_skips():
    """An explicitly empty path means "load nothing", not "use the default"."""
    assert LoadOptions.for_path(None).path == SkipPath()
    assert LoadOptions.for_path("").path == SkipPath()


def test_load_options_for_empty_path_object_skips(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    """Path("") reads as the working directory, so it is treated as empty."""
    monkeypatch.chdir(tmp_path)
    options = LoadOptions.for_path(Path(""), export=True)

    assert options.path == SkipPath()
    assert options.export is True
    assert load(options, environment=MemoryEnvironment()) == {}


def test_explicit_path_rejects_empty():
    with pytest.raises(ValidationError):
        _ = ExplicitPath(path="")
    with pytest.raises(ValidationError):
        _ = ExplicitPath(path=Path(""))


def test_load_options_for_path_explicit():
    options = LoadOptions.for_path("config/custom.env", export=True)
    assert options.path == ExplicitPath(path=Path("config/custom.env"))
    assert options.export is True


def test_load_options_validate_from_dict():
    """The tagged path choice round-trips through plain data."""
    options = LoadOptions.model_validate(
        {"path": {"kind": "explicit", "path": "x.env"}, "export": True}
    )
    assert options.path == ExplicitPath(path=Path("x.env"))


def test_resolve_path():
    assert resolve_path(DefaultPath()) == Path(".env")
    assert resolve_path(ExplicitPath(path=Path("a.env"))) == Path("a.env")
    assert resolve_path(SkipPath()) is None


# =============================================================================
# LOAD AND EXPORT TESTS
# =============================================================================


def test_export_missing_first_writer_wins():
    env = MemoryEnvironment({"KEEP": "external", "BLANK": ""})
    written = export_missing({"KEEP": "file", "BLANK": "file", "NEW": "file"}, env)

    assert written == ["NEW"]
    assert env.as_dict() == {"KEEP": "external", "BLANK": "", "NEW": "file"}


def test_load_without_export_leaves_environment_alone(write_env: WriteEnv):
    path = write_env(".env", "ONLY_IN_FILE=1\n")
    env = MemoryEnvironment()

    assert load(LoadOptions.for_path(path), environment=env) == {"ONLY_IN_FILE": "1"}
    assert env.as_dict() == {}


def test_load_export_does_not_override_existing(write_env: WriteEnv):
    """Externally set values survive an exporting load (no-clobber)."""
    path = write_env(".env", "LOG_LEVEL=info\nDEBUG=false\n")
    env = MemoryEnvironment({"LOG_LEVEL": "trace"})

    values = load(LoadOptions.for_path(path, export=True), environment=env)

    assert values == {"LOG_LEVEL": "info", "DEBUG": "false"}
    assert env.get("LOG_LEVEL") == "trace"
    assert env.get("DEBUG") == "false"


def test_load_custom_file_with_empty_value(write_env: WriteEnv):
    """EMPTY_VAR= is returned and exported as an empty string."""
    path = write_env("custom.env", "EMPTY_VAR=\n")
    env = MemoryEnvironment()

    values = load(LoadOptions.for_path(path, export=True), environment=env)

    assert values == {"EMPTY_VAR": ""}
    assert env.get("EMPTY_VAR") == ""


def test_load_missing_file_with_export(tmp_path: Path):
    env = MemoryEnvironment({"UNRELATED": "x"})
    options = LoadOptions.for_path(tmp_path / "nope.env", export=True)

    assert load(options, environment=env) == {}
    assert env.as_dict() == {"UNRELATED": "x"}


def test_load_default_path_reads_dotenv_in_cwd(
    tmp_path: Path, write_env: WriteEnv, monkeypatch: pytest.MonkeyPatch
):
    _ = write_env(".env", "FROM_DEFAULT=yes\n")
    monkeypatch.chdir(tmp_path)

    assert load() == {"FROM_DEFAULT": "yes"}


def test_load_skip_path_ignores_existing_file(
    tmp_path: Path, write_env: WriteEnv, monkeypatch: pytest.MonkeyPatch
):
    _ = write_env(".env", "FROM_DEFAULT=yes\n")
    monkeypatch.chdir(tmp_path)
    env = MemoryEnvironment()

    assert load(LoadOptions(path=SkipPath(), export=True), environment=env) == {}
    assert env.as_dict() == {}


def test_load_exports_into_process_environment_by_default(
    write_env: WriteEnv, unset_env: Callable[..., None]
):
    unset_env("LAYERS_TEST_TOKEN")
    path = write_env(".env", "LAYERS_TEST_TOKEN=abc\n")

    _ = load(LoadOptions.for_path(path, export=True))

    assert os.environ["LAYERS_TEST_TOKEN"] == "abc"


def test_load_async_same_precedence(write_env: WriteEnv):
    path = write_env(".env", "LOG_LEVEL=info\nEMPTY_VAR=\n")
    env = MemoryEnvironment({"LOG_LEVEL": "trace"})

    values = asyncio.run(
        load_async(LoadOptions.for_path(path, export=True), environment=env)
    )

    assert values == {"LOG_LEVEL": "info", "EMPTY_VAR": ""}
    assert env.as_dict() == {"LOG_LEVEL": "trace", "EMPTY_VAR": ""}


def test_load_async_skip_path():
    assert asyncio.run(load_async(LoadOptions.for_path(None))) == {}
