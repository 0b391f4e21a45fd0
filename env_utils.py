"""
Environment Variable Helpers

Boolean interpretation of environment variable strings.
"""

from env_backends import Environment, ProcessEnvironment

TRUTHY_VALUES = ("true", "t", "1", "y", "yes", "on", "enabled", "active")


def is_truthy_string(value: str) -> bool:
    """
    True for common "yes" spellings, case-insensitive.

    E.g., "TRUE", "yes", "1", "enabled" -> True; "false", "no", "" -> False
    """
    return value.lower() in TRUTHY_VALUES


def is_env_var_truthy(key: str, environment: Environment | None = None) -> bool:
    """Check a variable with `is_truthy_string`; a missing variable is falsy."""

    if environment is None:
        environment = ProcessEnvironment()
    return is_truthy_string(environment.get(key) or "")
