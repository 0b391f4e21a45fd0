"""
Environment Backends

The environment-variable table the loaders read from and export into.

Production code talks to the real process environment; tests and previews
use an in-memory table with the same interface.
"""

import os
from collections.abc import Iterator, Mapping
from typing import Protocol


class Environment(Protocol):
    """
    Minimal get/set/delete/enumerate view of an environment table.

    The loaders only get and set. `keys()` snapshots a table (the CLI preview
    uses it), and `delete` lets callers reset variables between loads.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class ProcessEnvironment:
    """Environment backed by `os.environ`."""

    def get(self, key: str) -> str | None:
        return os.environ.get(key)

    def set(self, key: str, value: str) -> None:
        os.environ[key] = value

    def delete(self, key: str) -> None:
        _ = os.environ.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(os.environ))


class MemoryEnvironment:
    """
    Dict-backed environment.

    Starts as a copy of `initial`, so the source mapping is never mutated.
    """

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    @classmethod
    def from_process(cls) -> "MemoryEnvironment":
        """Snapshot of the current process environment."""
        return cls(os.environ)

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        _ = self._values.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._values))

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)
