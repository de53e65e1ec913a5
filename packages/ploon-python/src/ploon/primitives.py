"""Primitive value formatting and host value normalization for PLOON."""

import dataclasses
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .string_utils import escape_value

if TYPE_CHECKING:
    from .types import JsonValue, PloonConfig


class JsonNumber(Decimal):
    """A Decimal that keeps the literal it was read from, such as ``1e5``."""

    def __new__(cls, text: str) -> "JsonNumber":
        number = super().__new__(cls, text)
        number.text = text
        return number


def format_value(value: "JsonValue", config: "PloonConfig") -> str:
    """
    Format a value for a record slot.

    Args:
        value: The value found under a primitive field.
        config: The active delimiters, for escaping strings.

    Returns:
        The record text for the value. Null and compound values give "".
    """
    if value is None:
        return ""

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float, Decimal)):
        return format_number(value)

    if isinstance(value, str):
        return escape_value(value, config)

    # A list or dict under a field whose first-seen value was primitive
    return ""


def format_number(value: int | float | Decimal) -> str:
    """
    Format a number as its exact decimal text.

    Integers and Decimals keep their own text, and a JsonNumber keeps its
    source literal; floats use repr, which is the shortest text that reads
    back to the same float. No rounding happens.
    """
    if isinstance(value, JsonNumber):
        return value.text

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return ""
        return repr(value)

    if isinstance(value, Decimal):
        if not value.is_finite():
            return ""
        return str(value)

    return str(value)


def normalize_value(value: Any) -> "JsonValue":
    """
    Normalize a host value into the PLOON value model.

    Converts:
    - Tuples and other iterables to lists
    - Bytes to UTF-8 text
    - Sets to sorted lists
    - Date/time objects to ISO strings
    - Dataclass instances and mappings to dicts
    - Non-finite floats to None

    Args:
        value: The value to normalize.

    Returns:
        A value made of dict, list, str, int, float, Decimal, bool and None.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    if isinstance(value, (int, Decimal, str)):
        return value

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")

    if isinstance(value, Mapping):
        return {str(k): normalize_value(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [normalize_value(v) for v in value]

    if isinstance(value, (set, frozenset)):
        return [normalize_value(v) for v in sorted(value, key=str)]

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: normalize_value(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }

    if hasattr(value, "isoformat"):
        return value.isoformat()

    if hasattr(value, "__iter__"):
        return [normalize_value(v) for v in value]

    # Last resort: string conversion
    return str(value)
