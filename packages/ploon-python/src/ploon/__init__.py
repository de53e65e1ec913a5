"""
PLOON (Path-Level Object Oriented Notation) - Python Implementation

A schema-once, path-addressed text encoding for hierarchical data. Field
names are declared once in a schema header; each object becomes one flat
record tagged with its depth (and index, for array items).

Usage:
    import ploon

    # Encode Python data to PLOON
    data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
    encoded = ploon.stringify(data)
    # [users#2](id,name)
    #
    # 1:1|1|Alice
    # 1:2|2|Bob

    # Decode PLOON back (leaves come back as strings)
    decoded = ploon.parse(encoded)

    # With options
    from ploon import ParseOptions, PloonFormat, StringifyOptions

    compact = ploon.stringify(data, StringifyOptions(format=PloonFormat.COMPACT))
    decoded = ploon.parse(text, ParseOptions(strict=False))
"""

__version__ = "1.0.0"

from .decode import (
    parse,
    parse_async,
    parse_schema,
    reconstruct,
    split_document,
    tokenize_records,
    validate_records,
)
from .encode import encode_records, from_json, from_json_async, stringify, stringify_async
from .errors import (
    AmbiguousRootError,
    EmptyInputError,
    InvalidPathError,
    MalformedRecordError,
    MalformedSchemaError,
    PloonError,
    SchemaInconsistencyError,
)
from .formatting import is_valid, minify, prettify
from .schema import infer_schema, render_schema
from .types import (
    COMPACT_CONFIG,
    STANDARD_CONFIG,
    ArrayPath,
    DataRecord,
    FieldKind,
    JsonValue,
    ObjectPath,
    ParseOptions,
    PloonConfig,
    PloonFormat,
    SchemaField,
    SchemaNode,
    StringifyOptions,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "stringify",
    "stringify_async",
    "from_json",
    "from_json_async",
    "parse",
    "parse_async",
    "minify",
    "prettify",
    "is_valid",
    # Codec stages
    "infer_schema",
    "render_schema",
    "encode_records",
    "split_document",
    "parse_schema",
    "tokenize_records",
    "validate_records",
    "reconstruct",
    # Options
    "PloonConfig",
    "PloonFormat",
    "StringifyOptions",
    "ParseOptions",
    "STANDARD_CONFIG",
    "COMPACT_CONFIG",
    # Types
    "JsonValue",
    "FieldKind",
    "SchemaField",
    "SchemaNode",
    "ArrayPath",
    "ObjectPath",
    "DataRecord",
    # Errors
    "PloonError",
    "EmptyInputError",
    "MalformedSchemaError",
    "MalformedRecordError",
    "InvalidPathError",
    "SchemaInconsistencyError",
    "AmbiguousRootError",
]
