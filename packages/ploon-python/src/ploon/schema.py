"""PLOON schema inference and rendering."""

import logging

from .errors import AmbiguousRootError
from .types import (
    FieldKind,
    JsonValue,
    MultiRootPolicy,
    PloonConfig,
    SchemaField,
    SchemaNode,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "root"


def infer_schema(root: JsonValue, multi_root: MultiRootPolicy = "first_key") -> SchemaNode:
    """
    Infer the schema of a value tree.

    A root object whose first value is an array is treated as that array,
    named after the key. Any other root object is a singleton object root.

    Args:
        root: The normalized value tree.
        multi_root: "first_key" ignores sibling keys next to a root array,
            "error" rejects them.

    Returns:
        The inferred schema.

    Raises:
        AmbiguousRootError: If multi_root is "error" and the root array has
            sibling keys.
    """
    if isinstance(root, dict):
        collection = root_collection(root, multi_root)
        if collection is not None:
            name, items = collection
            return SchemaNode(root_name=name, count=len(items), fields=analyze_array(items))
        return SchemaNode(root_name=DEFAULT_ROOT_NAME, fields=analyze_object(root))

    if isinstance(root, list):
        return SchemaNode(root_name=DEFAULT_ROOT_NAME, count=len(root), fields=analyze_array(root))

    return SchemaNode(root_name=DEFAULT_ROOT_NAME)


def root_collection(
    root: dict, multi_root: MultiRootPolicy = "first_key"
) -> tuple[str, list] | None:
    """
    Find the array that governs a root object, if any.

    Only the first key is looked at. Returns (key, array) when its value is
    an array, None when the object is a singleton root.
    """
    if not root:
        return None

    first_key = next(iter(root))
    first_value = root[first_key]
    if not isinstance(first_value, list):
        return None

    if len(root) > 1:
        ignored = list(root)[1:]
        if multi_root == "error":
            raise AmbiguousRootError(
                f"Root object has keys besides the root array {first_key!r}",
                ", ".join(ignored),
            )
        logger.debug("Ignoring root keys next to %r: %s", first_key, ignored)

    return first_key, first_value


def analyze_array(items: list) -> list[SchemaField]:
    """
    Infer fields from an array of objects.

    Keys are unioned in first-seen order, kinds come from the first value
    seen for each key. A field is optional if any object item lacks it.
    Non-object items contribute nothing.
    """
    fields: dict[str, SchemaField] = {}

    for item in items:
        if not isinstance(item, dict):
            continue
        for key, value in item.items():
            if key not in fields:
                fields[key] = analyze_property(key, value)

    # Second pass: optionality
    for item in items:
        if not isinstance(item, dict):
            continue
        for name, field in fields.items():
            if name not in item:
                field.optional = True

    return list(fields.values())


def analyze_object(obj: dict) -> list[SchemaField]:
    """Infer fields from a single object, in key order."""
    return [analyze_property(key, value) for key, value in obj.items()]


def analyze_property(name: str, value: JsonValue) -> SchemaField:
    """Infer the field for one key/value pair."""
    if isinstance(value, list):
        nested = None
        if value and isinstance(value[0], dict):
            nested = analyze_array(value)
        return SchemaField(name=name, kind=FieldKind.ARRAY, fields=nested)

    if isinstance(value, dict):
        return SchemaField(name=name, kind=FieldKind.OBJECT, fields=analyze_object(value))

    return SchemaField(name=name, kind=FieldKind.PRIMITIVE)


def render_schema(schema: SchemaNode, config: PloonConfig) -> str:
    """
    Render the schema header.

    Args:
        schema: The schema to render.
        config: The active delimiters.

    Returns:
        Text such as ``[users#2](id,name)`` or ``[root](a,b)``.
    """
    head = schema.root_name
    if schema.count is not None:
        head += f"{config.array_size_marker}{schema.count}"

    return (
        f"{config.schema_open}{head}{config.schema_close}"
        f"{config.fields_open}{render_fields(schema.fields, config)}{config.fields_close}"
    )


def render_fields(fields: list[SchemaField], config: PloonConfig) -> str:
    """Render a field list, recursing into nested fields."""
    parts = []

    for field in fields:
        text = field.name
        if field.kind == FieldKind.ARRAY:
            text += config.array_size_marker
            if field.fields:
                text += f"{config.fields_open}{render_fields(field.fields, config)}{config.fields_close}"
        elif field.kind == FieldKind.OBJECT and field.fields:
            text += (
                f"{config.nested_object_open}"
                f"{render_fields(field.fields, config)}"
                f"{config.nested_object_close}"
            )
        parts.append(text)

    return config.schema_field_separator.join(parts)


def primitive_fields(fields: list[SchemaField] | None) -> list[SchemaField]:
    """Return the primitive fields of a field list, in order."""
    return [f for f in fields or () if f.kind == FieldKind.PRIMITIVE]


def fields_of_kind(fields: list[SchemaField] | None, kind: FieldKind) -> list[SchemaField]:
    """Return the fields of one kind, in order."""
    return [f for f in fields or () if f.kind == kind]
