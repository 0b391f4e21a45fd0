from pathlib import Path

from dynaconf import Dynaconf, Validator

settings = Dynaconf(
    envvar_prefix="DOTENV_LAYERS",
    root_path=str(Path(__file__).parent),
    settings_files=[
        "settings.toml",  # Application defaults
        "settings.local.toml",  # Local overrides, not version controlled
    ],
    merge_enabled=True,  # Merge nested tables instead of replacing
    validators=[
        Validator("loader.base_filename", default=".env"),
        Validator("loader.indicator_variable", default="NODE_ENV"),
        Validator("loader.encoding", default="utf-8"),
        Validator("logging.level", default="INFO"),
        Validator("cli.mask", default="****"),
    ],
)

# `envvar_prefix` = override with `export DOTENV_LAYERS_LOADER__BASE_FILENAME=.env.shared`.
# `root_path` keeps settings.toml lookup next to this module regardless of cwd.
# Validator defaults apply when settings.toml is absent (e.g. installed wheel).
# Dynaconf's own dotenv loading stays off: reading .env files is our job.
