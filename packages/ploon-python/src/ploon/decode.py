"""PLOON decoder implementation."""

from __future__ import annotations

import asyncio
import logging
import re

from .errors import (
    EmptyInputError,
    InvalidPathError,
    MalformedSchemaError,
    SchemaInconsistencyError,
)
from .schema import fields_of_kind, primitive_fields
from .string_utils import split_unescaped, unescape_value
from .types import (
    ArrayPath,
    DataRecord,
    FieldKind,
    JsonValue,
    ObjectPath,
    ParseOptions,
    PathTag,
    PloonConfig,
    SchemaField,
    SchemaNode,
)

logger = logging.getLogger(__name__)

DIGITS_PATTERN = re.compile(r"[0-9]+")


def parse(text: str | None, options: ParseOptions | None = None) -> JsonValue:
    """
    Decode PLOON text to a Python value.

    Args:
        text: The PLOON-formatted string.
        options: Parse options.

    Returns:
        A list of dicts for array roots, a dict for object roots. Leaves are
        always strings.

    Raises:
        EmptyInputError: For None or blank input.
        MalformedSchemaError: For a missing or unbalanced schema header.
        InvalidPathError: For a bad record path (strict mode).
        SchemaInconsistencyError: For a value count mismatch (strict mode).
    """
    opts = options or ParseOptions()
    config = opts.resolve_config()
    _check_structure(text, config)

    schema_text, data_text = split_document(text, config)
    schema = parse_schema(schema_text, config)
    records = tokenize_records(data_text, config)

    if opts.strict:
        validate_records(schema, records, config)

    return reconstruct(schema, records)


async def parse_async(text: str | None, options: ParseOptions | None = None) -> JsonValue:
    """
    Decode PLOON text, yielding to the event loop between stages.

    The result is identical to parse.
    """
    opts = options or ParseOptions()
    config = opts.resolve_config()
    _check_structure(text, config)

    await asyncio.sleep(0)
    schema_text, data_text = split_document(text, config)
    schema = parse_schema(schema_text, config)

    await asyncio.sleep(0)
    records = tokenize_records(data_text, config)
    if opts.strict:
        validate_records(schema, records, config)

    await asyncio.sleep(0)
    return reconstruct(schema, records)


def _check_structure(text: str | None, config: PloonConfig) -> None:
    """Reject input that cannot hold a schema header."""
    if text is None or not text.strip():
        raise EmptyInputError("PLOON text cannot be empty")

    if not text.lstrip().startswith(config.schema_open):
        raise MalformedSchemaError(
            f"PLOON text must start with {config.schema_open!r}", text[:40]
        )

    if config.schema_close + config.fields_open not in text:
        raise MalformedSchemaError(
            f"PLOON text must contain {config.schema_close!r} followed by {config.fields_open!r}",
            text[:40],
        )


def split_document(text: str, config: PloonConfig) -> tuple[str, str]:
    """
    Split PLOON text into its schema and data segments.

    The schema ends at the fields closer that balances the first fields
    opener. Record separators and whitespace before the data are skipped.

    Raises:
        MalformedSchemaError: If the field list is missing or unterminated.
    """
    anchor = text.find(config.schema_close + config.fields_open)
    if anchor == -1:
        raise MalformedSchemaError(f"Missing fields opener {config.fields_open!r}", text[:40])

    start = anchor + len(config.schema_close)
    end = _find_group_end(text, start, config.fields_open, config.fields_close)
    schema_end = end + len(config.fields_close)

    separator = config.record_separator
    data_start = schema_end
    while data_start < len(text):
        if text.startswith(separator, data_start):
            data_start += len(separator)
        elif text[data_start].isspace():
            data_start += 1
        else:
            break

    return text[:schema_end], text[data_start:]


def parse_schema(schema_text: str, config: PloonConfig) -> SchemaNode:
    """
    Parse a schema header such as ``[users#2](id,name)``.

    Raises:
        MalformedSchemaError: For missing brackets or unbalanced groups.
    """
    open_index = schema_text.find(config.schema_open)
    close_index = schema_text.find(config.schema_close, open_index + 1)
    if open_index == -1 or close_index == -1:
        raise MalformedSchemaError("Invalid schema header", schema_text)

    head = schema_text[open_index + len(config.schema_open) : close_index]
    parts = head.split(config.array_size_marker)

    schema = SchemaNode(root_name=parts[0])
    if len(parts) > 1 and DIGITS_PATTERN.fullmatch(parts[1].strip()):
        schema.count = int(parts[1])

    fields_start = schema_text.find(config.fields_open, close_index)
    if fields_start == -1:
        raise MalformedSchemaError("Invalid fields format", schema_text)
    fields_end = _find_group_end(schema_text, fields_start, config.fields_open, config.fields_close)

    schema.fields = parse_fields(
        schema_text[fields_start + len(config.fields_open) : fields_end], config
    )
    return schema


def parse_fields(text: str, config: PloonConfig) -> list[SchemaField]:
    """
    Parse a field list into schema fields.

    A token is an array field if the array marker comes before any nested
    object opener, an object field if the opener comes first, and a
    primitive field otherwise.
    """
    fields = []

    for token in _split_fields(text, config):
        token = token.strip()
        if not token:
            continue

        marker = token.find(config.array_size_marker)
        brace = token.find(config.nested_object_open)

        if marker != -1 and (brace == -1 or marker < brace):
            rest = token[marker + len(config.array_size_marker) :].strip()
            nested = None
            if rest:
                inner = _unwrap(rest, config.fields_open, config.fields_close, token)
                nested = parse_fields(inner, config) or None
            fields.append(
                SchemaField(name=token[:marker].strip(), kind=FieldKind.ARRAY, fields=nested)
            )
        elif brace != -1:
            inner = _unwrap(
                token[brace:], config.nested_object_open, config.nested_object_close, token
            )
            fields.append(
                SchemaField(
                    name=token[:brace].strip(),
                    kind=FieldKind.OBJECT,
                    fields=parse_fields(inner, config),
                )
            )
        else:
            fields.append(SchemaField(name=token, kind=FieldKind.PRIMITIVE))

    return fields


def _split_fields(text: str, config: PloonConfig) -> list[str]:
    """Split a field list on the field separator at nesting level 0."""
    openers = (config.fields_open, config.nested_object_open)
    closers = (config.fields_close, config.nested_object_close)
    separator = config.schema_field_separator

    result = []
    level = 0
    start = 0
    i = 0
    while i < len(text):
        if text.startswith(openers, i):
            level += 1
        elif text.startswith(closers, i):
            level -= 1
            if level < 0:
                raise MalformedSchemaError("Unbalanced closer in field list", text)
        elif level == 0 and text.startswith(separator, i):
            result.append(text[start:i])
            i += len(separator)
            start = i
            continue
        i += 1

    if level != 0:
        raise MalformedSchemaError("Unterminated nested group in field list", text)

    result.append(text[start:])
    return result


def _unwrap(text: str, opener: str, closer: str, token: str) -> str:
    """Strip one opener/closer pair from text, which must be exactly one group."""
    if not text.startswith(opener) or not text.endswith(closer):
        raise MalformedSchemaError("Malformed nested group", token)
    if len(text) < len(opener) + len(closer):
        raise MalformedSchemaError("Malformed nested group", token)
    return text[len(opener) : len(text) - len(closer)]


def _find_group_end(text: str, start: int, opener: str, closer: str) -> int:
    """Return the index of the closer that balances the opener at start."""
    level = 0
    i = start
    while i < len(text):
        if text.startswith(opener, i):
            level += 1
            i += len(opener)
            continue
        if text.startswith(closer, i):
            level -= 1
            if level == 0:
                return i
            i += len(closer)
            continue
        i += 1
    raise MalformedSchemaError(f"Missing fields closer {closer!r}", text[start : start + 40])


def tokenize_records(data_text: str, config: PloonConfig) -> list[DataRecord]:
    """
    Split the data segment into records.

    Records without a field delimiter are dropped.
    """
    if not data_text or not data_text.strip():
        return []

    records = []
    for raw in split_unescaped(data_text, config.record_separator, config):
        raw = _strip_carriage_return(raw, config)
        if not raw.strip():
            continue

        record = parse_record(raw, config)
        if record is None:
            logger.debug("Dropping record without field delimiter: %r", raw)
            continue
        records.append(record)

    return records


def _strip_carriage_return(raw: str, config: PloonConfig) -> str:
    """Drop the CR of a CRLF line ending. An escaped CR is value data."""
    if config.record_separator != "\n" or not raw.endswith("\r"):
        return raw

    body = raw[:-1]
    escape = config.escape_char
    escapes = 0
    while body.endswith(escape * (escapes + 1)):
        escapes += 1
    return raw if escapes % 2 else body


def parse_record(raw: str, config: PloonConfig) -> DataRecord | None:
    """
    Parse one record into its path and unescaped values.

    Returns:
        The record, or None if it has no field delimiter.
    """
    delimiter_index = raw.find(config.field_delimiter)
    if delimiter_index == -1:
        return None

    path = raw[:delimiter_index].strip()
    values_text = raw[delimiter_index + len(config.field_delimiter) :]
    values = [
        unescape_value(value, config)
        for value in split_unescaped(values_text, config.field_delimiter, config)
    ]

    return DataRecord(path=path, values=values, tag=parse_path(path, config), raw=raw)


def parse_path(path: str, config: PloonConfig) -> PathTag | None:
    """
    Parse a path into an ObjectPath (``depth``) or ArrayPath
    (``depth:index``). Returns None if it matches neither.
    """
    path = path.strip()
    if DIGITS_PATTERN.fullmatch(path):
        return ObjectPath(int(path))

    parts = path.split(config.path_separator)
    if len(parts) == 2 and all(DIGITS_PATTERN.fullmatch(p) for p in parts):
        return ArrayPath(int(parts[0]), int(parts[1]))

    return None


def validate_records(schema: SchemaNode, records: list[DataRecord], config: PloonConfig) -> None:
    """
    Strict mode checks.

    Raises:
        InvalidPathError: If a path is neither ``depth`` nor ``depth:index``.
        SchemaInconsistencyError: If a root array item has a different
            number of values than the schema has top-level primitive fields.
    """
    for record in records:
        if record.tag is None:
            raise InvalidPathError(
                f"Invalid path {record.path!r}, expected 'depth' or "
                f"'depth{config.path_separator}index'",
                record.raw,
            )

    if not schema.count:
        return

    expected = len(primitive_fields(schema.fields))
    seen: set[int] = set()
    for record in records:
        tag = record.tag
        if not isinstance(tag, ArrayPath) or tag.depth != 1 or tag.index in seen:
            continue
        seen.add(tag.index)
        if len(record.values) != expected:
            raise SchemaInconsistencyError(
                f"Array item at index {tag.index} has {len(record.values)} values, "
                f"expected {expected}",
                record.raw,
            )


def reconstruct(schema: SchemaNode, records: list[DataRecord]) -> JsonValue:
    """
    Rebuild a value tree from a schema and its records.

    Primitive values are bound to fields by position. Nested objects and
    arrays are looked up by depth alone, across all records: with several
    array items that each carry nested data at the same depth, every item
    sees the same nested records.
    """
    index = _RecordIndex(records)
    if schema.is_array:
        return _reconstruct_array(schema.fields, index, 1)
    return _reconstruct_object(schema.fields, index, index.object_at(1), 1)


class _RecordIndex:
    """Records grouped by path for depth lookups."""

    def __init__(self, records: list[DataRecord]):
        self.objects: dict[int, DataRecord] = {}
        self.arrays: dict[int, dict[int, DataRecord]] = {}

        for record in records:
            tag = record.tag
            if isinstance(tag, ObjectPath):
                self.objects.setdefault(tag.depth, record)
            elif isinstance(tag, ArrayPath):
                self.arrays.setdefault(tag.depth, {}).setdefault(tag.index, record)
            else:
                logger.debug("Ignoring record with invalid path: %r", record.raw)

    def object_at(self, depth: int) -> DataRecord | None:
        """First object record at depth."""
        return self.objects.get(depth)

    def items_at(self, depth: int) -> dict[int, DataRecord]:
        """First array record per index at depth."""
        return self.arrays.get(depth, {})


def _reconstruct_array(
    fields: list[SchemaField] | None, index: _RecordIndex, depth: int
) -> list[dict]:
    """Rebuild array items from the records at depth. Missing indices are skipped."""
    items = index.items_at(depth)
    return [
        _reconstruct_object(fields, index, items[i], depth) for i in sorted(items)
    ]


def _reconstruct_object(
    fields: list[SchemaField] | None,
    index: _RecordIndex,
    record: DataRecord | None,
    depth: int,
) -> dict:
    """Rebuild one object from its own record and the records below it."""
    result: dict[str, JsonValue] = {}

    if record is not None:
        # Positional binding; missing trailing values leave fields unset
        for field, value in zip(primitive_fields(fields), record.values):
            result[field.name] = value

    for field in fields_of_kind(fields, FieldKind.OBJECT):
        nested = index.object_at(depth + 1)
        if nested is not None:
            result[field.name] = _reconstruct_object(field.fields, index, nested, depth + 1)

    for field in fields_of_kind(fields, FieldKind.ARRAY):
        # Arrays of primitives never produce records
        if field.fields and index.items_at(depth + 1):
            result[field.name] = _reconstruct_array(field.fields, index, depth + 1)

    return result
