"""
Import to load `.env` into the process environment.

    import autoload  # noqa: F401

Only the base file is read, and variables already set are kept. For the
`.env` + `.env.<NODE_ENV>` layering use `autoload_env` instead.
"""

from dotenv_loader import LoadOptions, load

load(LoadOptions(export=True))
