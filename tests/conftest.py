"""Shared fixtures: loguru capture, env cleanup, dotenv file writer."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Messages logged through loguru while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def unset_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """
    Remove variables from os.environ for the duration of the test.

    Setting first makes monkeypatch record the original state, so anything
    the code under test exports is cleaned up afterwards too.
    """

    def _unset(*keys: str) -> None:
        for key in keys:
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)

    return _unset


@pytest.fixture
def write_env(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dotenv file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        _ = path.write_text(content, encoding="utf-8")
        return path

    return _write
