"""
Dotenv Codec

Converts between dotenv text and flat key/value mappings.

Key features:
- Tokenising delegated to python-dotenv's stream parser
- Malformed statements raise instead of being skipped silently
- Inverse serializer whose output parses back to the same mapping
"""

import io
import re
from collections.abc import Mapping

from dotenv.parser import parse_stream
from loguru import logger

# =============================================================================
# EXCEPTIONS
# =============================================================================


class DotenvParseError(ValueError):
    """Raised when dotenv text contains a statement that cannot be parsed."""

    def __init__(self, line: int, statement: str):
        self.line = line
        self.statement = statement
        super().__init__(f"Could not parse statement at line {line}: {statement!r}")


# =============================================================================
# PARSING
# =============================================================================


def parse(text: str) -> dict[str, str]:
    """
    Parse dotenv text into a flat mapping.

    Comments and blank lines are ignored, a later duplicate key wins, and
    `KEY=` yields an empty string. A bare `KEY` with no `=` has no value and
    is left out. Values are taken as written: no `${VAR}` expansion.
    """
    values: dict[str, str] = {}

    for binding in parse_stream(io.StringIO(text)):
        if binding.error:
            raise DotenvParseError(
                line=binding.original.line,
                statement=binding.original.string.rstrip("\r\n"),
            )
        if binding.key is None or binding.value is None:
            continue
        values[binding.key] = binding.value

    return values


# =============================================================================
# SERIALIZING
# =============================================================================

_NON_WORD = re.compile(r"\W")


def quote_value(value: str) -> str:
    """
    Quote a single value so the parser reads it back unchanged.

    Double quotes when the value holds a newline or a single quote (newlines
    become `\\n`), single quotes for any other non-word character, bare
    otherwise.
    """
    if "\n" in value or "'" in value:
        quote = '"'
        escaped = value.replace("\\", "\\\\").replace("\n", "\\n")
    elif _NON_WORD.search(value):
        quote = "'"
        escaped = value.replace("\\", "\\\\")
    else:
        return value

    escaped = escaped.replace(quote, f"\\{quote}")
    return f"{quote}{escaped}{quote}"


def stringify(values: Mapping[str, str]) -> str:
    """Serialize a mapping to dotenv text, one `KEY=value` line per entry."""

    lines: list[str] = []
    for key, value in values.items():
        if key.startswith("#"):
            logger.warning(f"Key starts with '#' and would read as a comment, skipping: {key!r}")
            continue
        lines.append(f"{key}={quote_value(value or '')}")

    return "\n".join(lines)
