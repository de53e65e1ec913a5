"""Type definitions for the PLOON encoder/decoder."""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Literal

# Value model
JsonPrimitive = str | int | float | Decimal | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# What to do with sibling keys next to a root collection
MultiRootPolicy = Literal["first_key", "error"]


class PloonFormat(str, Enum):
    """Output format for stringify."""

    STANDARD = "standard"
    """Human-readable, one record per line."""

    COMPACT = "compact"
    """Single line, records separated by semicolons."""


@dataclass(frozen=True)
class PloonConfig:
    """Delimiter alphabet shared by the encoder and the decoder.

    Every token is expected to be a single character; escaping is only
    unambiguous under that assumption.
    """

    field_delimiter: str = "|"
    """Separates values inside a record."""

    path_separator: str = ":"
    """Separates depth and index in array paths."""

    array_size_marker: str = "#"
    """Marks array length in the schema."""

    record_separator: str = "\n"
    """Separates records."""

    escape_char: str = "\\"
    """Makes the following character literal."""

    schema_open: str = "["
    schema_close: str = "]"
    fields_open: str = "("
    fields_close: str = ")"
    nested_object_open: str = "{"
    nested_object_close: str = "}"
    schema_field_separator: str = ","

    @classmethod
    def standard(cls) -> "PloonConfig":
        return cls(record_separator="\n")

    @classmethod
    def compact(cls) -> "PloonConfig":
        return cls(record_separator=";")

    def replace(self, **changes: str) -> "PloonConfig":
        """Return a copy with the given tokens changed."""
        return replace(self, **changes)


STANDARD_CONFIG = PloonConfig.standard()
COMPACT_CONFIG = PloonConfig.compact()


@dataclass
class StringifyOptions:
    """Options for PLOON stringify."""

    format: PloonFormat = PloonFormat.STANDARD
    """Output format. STANDARD adds a blank line after the schema."""

    config: PloonConfig | None = None
    """Custom delimiters. None picks the preset matching the format."""

    multi_root: MultiRootPolicy = "first_key"
    """Whether sibling keys next to a root array are ignored or rejected."""

    def resolve_config(self) -> PloonConfig:
        if self.config is not None:
            return self.config
        if self.format == PloonFormat.COMPACT:
            return COMPACT_CONFIG
        return STANDARD_CONFIG


@dataclass
class ParseOptions:
    """Options for PLOON parse."""

    strict: bool = True
    """Validate path grammar and schema consistency."""

    config: PloonConfig | None = None
    """Custom delimiters. None means the standard preset."""

    def resolve_config(self) -> PloonConfig:
        return self.config if self.config is not None else STANDARD_CONFIG


class FieldKind(str, Enum):
    """Structural kind of a schema field."""

    PRIMITIVE = "primitive"
    ARRAY = "array"
    OBJECT = "object"


@dataclass
class SchemaField:
    """A named field in the schema, possibly with nested fields."""

    name: str
    """Field name as it appears in the source objects."""

    kind: FieldKind = FieldKind.PRIMITIVE
    """Primitive, array or object."""

    fields: list["SchemaField"] | None = None
    """Nested fields for arrays of objects and objects."""

    optional: bool = False
    """True if some sibling array item lacks this key."""


@dataclass
class SchemaNode:
    """The root of a schema."""

    root_name: str = "root"
    """Name of the root collection."""

    count: int | None = None
    """Array length. None for object roots."""

    fields: list[SchemaField] = field(default_factory=list)
    """Top-level fields."""

    @property
    def is_array(self) -> bool:
        return self.count is not None


@dataclass(frozen=True)
class ArrayPath:
    """Path of an array item: depth and 1-based index."""

    depth: int
    index: int

    def render(self, config: PloonConfig) -> str:
        return f"{self.depth}{config.path_separator}{self.index}"


@dataclass(frozen=True)
class ObjectPath:
    """Path of a nested object: depth only."""

    depth: int

    def render(self, config: PloonConfig | None = None) -> str:
        # Depth plus a literal space, regardless of the path separator
        return f"{self.depth} "


PathTag = ArrayPath | ObjectPath


@dataclass
class DataRecord:
    """A tokenized data record."""

    path: str
    """Path text, trimmed."""

    values: list[str] = field(default_factory=list)
    """Unescaped values in record order."""

    tag: PathTag | None = None
    """Parsed path, or None if the path does not match the grammar."""

    raw: str = ""
    """Record text as it appeared in the input."""
