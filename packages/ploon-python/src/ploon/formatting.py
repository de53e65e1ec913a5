"""Conversions between standard and compact PLOON text."""

from .types import COMPACT_CONFIG, STANDARD_CONFIG, PloonConfig

NEWLINE = STANDARD_CONFIG.record_separator
SEMICOLON = COMPACT_CONFIG.record_separator


def minify(text: str) -> str:
    """
    Convert standard PLOON text to compact form.

    Newlines become semicolons and the blank line after the schema
    collapses. Literal semicolons already in the text are not protected.
    """
    if not text or not text.strip():
        return text

    compact = text.replace("\r\n", SEMICOLON).replace(NEWLINE, SEMICOLON)
    return compact.replace(SEMICOLON * 2, SEMICOLON)


def prettify(text: str) -> str:
    """
    Convert compact PLOON text to standard form.

    Semicolons become newlines, and the separator after the schema is
    doubled. Semicolons inside values are not protected.
    """
    if not text or not text.strip():
        return text

    expanded = text.replace(SEMICOLON, NEWLINE)
    schema, separator, data = expanded.partition(NEWLINE)
    if not separator:
        return expanded
    if not data.startswith(NEWLINE):
        data = NEWLINE + data
    return schema + separator + data


def is_valid(text: str | None, config: PloonConfig | None = None) -> bool:
    """
    Cheap structural check for PLOON text.

    True if the text starts with the schema opener and has the schema
    closer right before the fields opener. This is not a grammar check:
    a False result is reliable, a True result is not.
    """
    if not text or not text.strip():
        return False

    cfg = config or STANDARD_CONFIG
    if not text.lstrip().startswith(cfg.schema_open):
        return False
    return cfg.schema_close + cfg.fields_open in text
