"""
Layered Environment Loader

Merges a base dotenv file with an environment-specific overlay and exports
the result into the environment.

File loading order:
1. Base file (`.env`), exported without touching pre-existing variables
2. Overlay file (`.env.<NODE_ENV>`), only when the indicator variable is set

Precedence per key:
- Externally set before loading: base never overrides it
- Mentioned by the base file: tracked, overlay may override it
- Untracked and already set: overlay leaves it alone
- Unset (or empty): overlay sets it
"""

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger

from config import settings
from dotenv_loader import ExplicitPath, LoadOptions, load, load_async
from env_backends import Environment, ProcessEnvironment

# =============================================================================
# TRACKING SET
# =============================================================================


class TrackedKeys:
    """
    Insertion-ordered set of keys the engine has exported.

    Only grows. A tracked key may be overridden by a later overlay.
    """

    def __init__(self, keys: Iterable[str] = ()):
        self._keys: dict[str, None] = dict.fromkeys(keys)

    def add(self, key: str) -> None:
        self._keys.setdefault(key, None)

    def update(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"TrackedKeys({list(self._keys)!r})"

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._keys)


# =============================================================================
# LAYERING ENGINE
# =============================================================================


class LayeringEngine:
    """
    Owns one tracking set and the environment it exports into.

    Not synchronized: concurrent calls on one engine must be serialized by
    the caller.
    """

    def __init__(
        self,
        environment: Environment | None = None,
        tracked: TrackedKeys | None = None,
        base_path: str | os.PathLike[str] | None = None,
        indicator_variable: str | None = None,
    ):
        if base_path is None:
            base_path = settings.loader.base_filename  # pyright: ignore[reportUnknownMemberType]
        if indicator_variable is None:
            indicator_variable = settings.loader.indicator_variable  # pyright: ignore[reportUnknownMemberType]

        self.environment: Environment = (
            environment if environment is not None else ProcessEnvironment()
        )
        self._tracked = tracked if tracked is not None else TrackedKeys()
        self.base_path = Path(base_path)  # pyright: ignore[reportArgumentType]
        self.indicator_variable: str = indicator_variable  # pyright: ignore[reportAttributeAccessIssue]

    @property
    def tracked(self) -> tuple[str, ...]:
        """Every key this engine has exported, oldest first."""
        return self._tracked.snapshot()

    def overlay_path(self, indicator: str) -> Path:
        """
        Overlay file for an environment name: `<base>.<indicator>`.

        The indicator is used verbatim, path separators included.
        """
        return Path(f"{self.base_path}.{indicator}")

    def summary(self) -> str:
        return f"Hydrated environment variables: {', '.join(self._tracked)}"

    # -------------------------------------------------------------------------
    # Merge steps
    # -------------------------------------------------------------------------

    def _base_options(self) -> LoadOptions:
        return LoadOptions(path=ExplicitPath(path=self.base_path), export=True)

    def _claim_base(self, base: dict[str, str]) -> None:
        # Tracked even when an external value won the export.
        self._tracked.update(base)

    def _current_indicator(self) -> str | None:
        indicator = self.environment.get(self.indicator_variable)
        if not indicator:
            logger.debug(f"{self.indicator_variable} not set, skipping overlay")
            return None
        return indicator

    def _apply_overlay(self, overlay: dict[str, str]) -> None:
        for key, value in overlay.items():
            if key in self._tracked or not self.environment.get(key):
                self.environment.set(key, value)
                self._tracked.add(key)
            else:
                logger.debug(f"Keeping externally set {key}, overlay value ignored")

    def _finish(self) -> None:
        logger.info(self.summary())

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def load_env(self) -> None:
        """
        Load the base file, then the overlay named by the indicator variable.

        Errors reading or parsing either file propagate; whatever the base
        step already exported stays exported.
        """
        base = load(self._base_options(), environment=self.environment)
        self._claim_base(base)

        indicator = self._current_indicator()
        if indicator is not None:
            overlay = load(
                LoadOptions(path=ExplicitPath(path=self.overlay_path(indicator))),
                environment=self.environment,
            )
            self._apply_overlay(overlay)

        self._finish()

    async def load_env_async(self) -> None:
        """Asynchronous `load_env` with the same precedence rules."""

        base = await load_async(self._base_options(), environment=self.environment)
        self._claim_base(base)

        indicator = self._current_indicator()
        if indicator is not None:
            overlay = await load_async(
                LoadOptions(path=ExplicitPath(path=self.overlay_path(indicator))),
                environment=self.environment,
            )
            self._apply_overlay(overlay)

        self._finish()


# =============================================================================
# PROCESS-WIDE DEFAULT
# =============================================================================

_default_engine: LayeringEngine | None = None


def get_default_engine() -> LayeringEngine:
    """Engine bound to the real process environment, created on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = LayeringEngine(environment=ProcessEnvironment())
    return _default_engine


def load_env() -> None:
    """Layered load into `os.environ` using the shared default engine."""
    get_default_engine().load_env()


async def load_env_async() -> None:
    await get_default_engine().load_env_async()
