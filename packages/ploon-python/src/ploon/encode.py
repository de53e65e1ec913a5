"""PLOON encoder implementation."""

import asyncio
import json
import logging
from collections.abc import Generator
from typing import Any

from .primitives import JsonNumber, format_value, normalize_value
from .schema import fields_of_kind, infer_schema, primitive_fields, render_schema, root_collection
from .types import (
    ArrayPath,
    FieldKind,
    JsonValue,
    ObjectPath,
    PathTag,
    PloonConfig,
    PloonFormat,
    SchemaField,
    SchemaNode,
    StringifyOptions,
)

logger = logging.getLogger(__name__)


def stringify(value: Any, options: StringifyOptions | None = None) -> str:
    """
    Encode a Python value to PLOON format.

    Args:
        value: The value to encode (dict, list, or anything normalizable).
        options: Stringify options.

    Returns:
        The PLOON-formatted string: schema header, then records.
    """
    opts = options or StringifyOptions()
    config = opts.resolve_config()
    normalized = normalize_value(value)

    schema = infer_schema(normalized, opts.multi_root)
    records = encode_records(normalized, schema, config)
    return _combine(render_schema(schema, config), records, opts.format, config)


async def stringify_async(value: Any, options: StringifyOptions | None = None) -> str:
    """
    Encode a Python value to PLOON format, yielding to the event loop
    between stages.

    The output is identical to stringify.
    """
    opts = options or StringifyOptions()
    config = opts.resolve_config()
    normalized = normalize_value(value)

    await asyncio.sleep(0)
    schema = infer_schema(normalized, opts.multi_root)

    await asyncio.sleep(0)
    records = encode_records(normalized, schema, config)

    await asyncio.sleep(0)
    return _combine(render_schema(schema, config), records, opts.format, config)


def from_json(json_text: str, options: StringifyOptions | None = None) -> str:
    """
    Encode a JSON document to PLOON format.

    Numbers are read as JsonNumber so their literal text, such as
    ``1e5`` or ``-0.0``, is kept verbatim.
    """
    return stringify(_load_json(json_text), options)


async def from_json_async(json_text: str, options: StringifyOptions | None = None) -> str:
    """Encode a JSON document to PLOON format asynchronously."""
    value = _load_json(json_text)
    await asyncio.sleep(0)
    return await stringify_async(value, options)


def _load_json(json_text: str) -> Any:
    return json.loads(json_text, parse_float=JsonNumber, parse_int=JsonNumber)


def encode_records(root: JsonValue, schema: SchemaNode, config: PloonConfig) -> list[str]:
    """
    Encode a value tree to data records, guided by its schema.

    Args:
        root: The normalized value tree the schema was inferred from.
        schema: The schema.
        config: The active delimiters.

    Returns:
        Records in document order, without separators.
    """
    return list(encode_lines(root, schema, config))


def encode_lines(
    root: JsonValue, schema: SchemaNode, config: PloonConfig
) -> Generator[str, None, None]:
    """
    Encode a value tree to data records, yielding them one at a time.

    The root collection is picked the same way as during inference.
    """
    if isinstance(root, dict):
        # Sibling keys were already accepted or rejected during inference
        collection = root_collection(root)
        if collection is not None:
            yield from _encode_array(collection[1], schema.fields, 1, config)
        else:
            yield from _encode_object(root, schema.fields, ObjectPath(1), config)
    elif isinstance(root, list):
        yield from _encode_array(root, schema.fields, 1, config)


def _combine(
    schema_text: str, records: list[str], fmt: PloonFormat, config: PloonConfig
) -> str:
    """Join schema and records into the final document."""
    separator = config.record_separator
    head = schema_text + separator
    if fmt == PloonFormat.STANDARD:
        # Blank line between schema and data
        head += separator
    return head + separator.join(records)


def _encode_array(
    items: list, fields: list[SchemaField] | None, depth: int, config: PloonConfig
) -> Generator[str, None, None]:
    """Encode the object items of an array. Indices start at 1."""
    for index, item in enumerate(items, start=1):
        if isinstance(item, dict):
            yield from _encode_object(item, fields, ArrayPath(depth, index), config)
        else:
            logger.debug("Skipping non-object item at depth %d, index %d", depth, index)


def _encode_object(
    obj: dict, fields: list[SchemaField] | None, path: PathTag, config: PloonConfig
) -> Generator[str, None, None]:
    """
    Encode one object: its own record, then its nested objects and arrays.

    Array items get an ArrayPath, nested and root objects an ObjectPath.
    """
    values = []
    for field in primitive_fields(fields):
        if field.name in obj:
            values.append(format_value(obj[field.name], config))
        elif field.optional:
            values.append("")
        # A missing required field is left out, shifting later values

    if values:
        delimiter = config.field_delimiter
        yield path.render(config) + delimiter + delimiter.join(values)

    depth = path.depth
    for field in fields_of_kind(fields, FieldKind.OBJECT):
        nested = obj.get(field.name)
        if isinstance(nested, dict):
            yield from _encode_object(nested, field.fields, ObjectPath(depth + 1), config)

    for field in fields_of_kind(fields, FieldKind.ARRAY):
        nested = obj.get(field.name)
        if isinstance(nested, list):
            yield from _encode_array(nested, field.fields, depth + 1, config)
