"""
Import to run the layered `.env` + `.env.<NODE_ENV>` load.

    import autoload_env  # noqa: F401

Uses the shared default engine, so a later `env_layering.load_env()` call
still sees the keys hydrated here as tracked.
"""

from env_layering import load_env

load_env()
