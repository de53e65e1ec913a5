"""String utilities for PLOON encoding/decoding."""

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import PloonConfig


def reserved_tokens(config: "PloonConfig") -> tuple[str, ...]:
    """
    Tokens that must be escaped inside a value, longest first.

    With newline records a bare CR is reserved too, so that a CR ending
    a value is not read as part of a CRLF line ending.
    """
    tokens = {config.field_delimiter, config.record_separator, config.escape_char}
    if config.record_separator == "\n":
        tokens.add("\r")
    return tuple(sorted(tokens, key=len, reverse=True))


def escape_value(value: str, config: "PloonConfig") -> str:
    """
    Escape a string for use as a record value.

    Every reserved token (field delimiter, record separator, escape
    character, and CR under newline records) is prefixed with the escape
    character.

    Args:
        value: The raw string.
        config: The active delimiters.

    Returns:
        The escaped string.
    """
    if not value:
        return value

    tokens = reserved_tokens(config)
    escape = config.escape_char
    result = []
    i = 0
    while i < len(value):
        for token in tokens:
            if value.startswith(token, i):
                result.append(escape)
                result.append(token)
                i += len(token)
                break
        else:
            result.append(value[i])
            i += 1
    return "".join(result)


def unescape_value(value: str, config: "PloonConfig") -> str:
    """
    Unescape a record value.

    Processes the escape sequences:
    - escape + field delimiter → field delimiter
    - escape + record separator → record separator
    - escape + escape → escape
    - escape + CR → CR, under newline records

    Any other escape sequence, and a trailing lone escape, are kept
    verbatim. Each character is unescaped at most once.

    Args:
        value: The escaped value.
        config: The active delimiters.

    Returns:
        The unescaped string.
    """
    escape = config.escape_char
    if not value or escape not in value:
        return value

    tokens = reserved_tokens(config)
    result = []
    i = 0
    while i < len(value):
        if value.startswith(escape, i):
            j = i + len(escape)
            token = _match_token(value, j, tokens)
            if token is not None:
                result.append(token)
                i = j + len(token)
                continue
            # Unknown sequence: keep the escape, next char is handled normally
            result.append(escape)
            i = j
            continue
        result.append(value[i])
        i += 1
    return "".join(result)


def split_unescaped(value: str, delimiter: str, config: "PloonConfig") -> list[str]:
    """
    Split a string by delimiter, skipping escaped delimiters.

    The scanner has two states: normal, and escaped (right after an escape
    character). In the escaped state the next reserved token, or the next
    character, is copied as is. Escape sequences are kept in the pieces so
    they can be unescaped exactly once afterwards.

    Args:
        value: The string to split.
        delimiter: The delimiter token.
        config: The active delimiters.

    Returns:
        List of pieces, including empty ones. An empty string gives [""].
    """
    escape = config.escape_char
    tokens = reserved_tokens(config)
    result = []
    current = []
    i = 0

    while i < len(value):
        if value.startswith(escape, i):
            j = i + len(escape)
            token = _match_token(value, j, tokens)
            end = j + len(token) if token is not None else min(j + 1, len(value))
            current.append(value[i:end])
            i = end
            continue
        if value.startswith(delimiter, i):
            result.append("".join(current))
            current = []
            i += len(delimiter)
            continue
        current.append(value[i])
        i += 1

    # Add the last segment
    result.append("".join(current))
    return result


def _match_token(value: str, pos: int, tokens: Iterable[str]) -> str | None:
    """Return the first token found at pos, or None."""
    for token in tokens:
        if token and value.startswith(token, pos):
            return token
    return None
