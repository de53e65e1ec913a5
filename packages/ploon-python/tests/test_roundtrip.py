"""Round-trip tests for PLOON stringify/parse."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ploon import (
    ParseOptions,
    PloonConfig,
    PloonFormat,
    StringifyOptions,
    parse,
    parse_async,
    stringify,
    stringify_async,
)


def roundtrip(data, fmt=PloonFormat.STANDARD, config=None):
    """Stringify then parse, returning the result."""
    encoded = stringify(data, StringifyOptions(format=fmt, config=config))
    if config is None and fmt == PloonFormat.COMPACT:
        config = PloonConfig.compact()
    return parse(encoded, ParseOptions(config=config))


class TestRoundtripFlat:
    """Test round-trip for arrays of flat objects."""

    def test_users(self):
        data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
        assert roundtrip(data) == [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]

    def test_root_array(self):
        data = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}, {"a": 3, "b": "z"}]
        assert roundtrip(data) == [
            {"a": "1", "b": "x"},
            {"a": "2", "b": "y"},
            {"a": "3", "b": "z"},
        ]

    def test_literals(self):
        data = [{"t": True, "f": False, "n": None, "x": 2.5}]
        assert roundtrip(data) == [{"t": "true", "f": "false", "n": "", "x": "2.5"}]

    def test_order_preserved(self):
        data = [{"i": i} for i in range(1, 25)]
        assert [item["i"] for item in roundtrip(data)] == [str(i) for i in range(1, 25)]

    def test_compact(self):
        data = {"products": [{"id": 1, "name": "Laptop"}, {"id": 2, "name": "Mouse"}]}
        assert roundtrip(data, PloonFormat.COMPACT) == [
            {"id": "1", "name": "Laptop"},
            {"id": "2", "name": "Mouse"},
        ]


class TestRoundtripOptional:
    """Test round-trip with heterogeneous keys."""

    def test_missing_last_field(self):
        assert roundtrip([{"a": 1, "b": 2}, {"a": 3}]) == [
            {"a": "1", "b": "2"},
            {"a": "3", "b": ""},
        ]

    def test_missing_first_field(self):
        assert roundtrip([{"a": 1, "b": 2}, {"b": 4}]) == [
            {"a": "1", "b": "2"},
            {"a": "", "b": "4"},
        ]


class TestRoundtripNested:
    """Test round-trip for nested structures."""

    def test_object_root(self):
        assert roundtrip({"a": 1, "b": 2}) == {"a": "1", "b": "2"}

    def test_nested_objects(self):
        data = {
            "orders": [
                {
                    "id": 101,
                    "customer": {"name": "Alice", "address": {"city": "NYC", "zip": "10001"}},
                }
            ]
        }
        assert roundtrip(data) == [
            {
                "id": "101",
                "customer": {"name": "Alice", "address": {"city": "NYC", "zip": "10001"}},
            }
        ]

    def test_nested_array_single_parent(self):
        data = {
            "products": [
                {"id": 1, "colors": [{"name": "Red", "hex": "#FF0000"}, {"name": "Blue", "hex": "#0000FF"}]}
            ]
        }
        assert roundtrip(data) == [
            {
                "id": "1",
                "colors": [
                    {"name": "Red", "hex": "#FF0000"},
                    {"name": "Blue", "hex": "#0000FF"},
                ],
            }
        ]

    def test_object_root_with_children(self):
        data = {"name": "x", "owner": {"n": "o"}, "pets": [{"kind": "cat"}, {"kind": "dog"}]}
        assert roundtrip(data) == {
            "name": "x",
            "owner": {"n": "o"},
            "pets": [{"kind": "cat"}, {"kind": "dog"}],
        }


class TestRoundtripEscaping:
    """Test round-trip of reserved characters."""

    @pytest.mark.parametrize(
        "text",
        [
            "a|b",
            "C:\\Users\\name",
            "line1\nline2",
            "a\\|b",
            "trailing\\",
            "semi;colon",
            "",
            " spaced ",
            "a\r",
            "crlf\r\nx",
            "slash\\\r",
        ],
    )
    def test_standard(self, text):
        assert roundtrip([{"t": text, "n": 1}]) == [{"t": text, "n": "1"}]

    def test_carriage_return_ending_record(self):
        data = [{"t": "a\r"}, {"t": "b\\\r"}, {"t": "c"}]
        assert roundtrip(data) == data

    @pytest.mark.parametrize("text", ["a;b", "a|b;c", "x\\;"])
    def test_compact(self, text):
        assert roundtrip([{"t": text}], PloonFormat.COMPACT) == [{"t": text}]


class TestRoundtripConfig:
    """Test round-trip with custom delimiters."""

    def test_custom_tokens(self):
        config = PloonConfig(
            field_delimiter="\t",
            path_separator=".",
            array_size_marker="@",
            escape_char="~",
        )
        data = {"rows": [{"id": 1, "note": "tab\there"}, {"id": 2, "note": "tilde~"}]}
        assert roundtrip(data, config=config) == [
            {"id": "1", "note": "tab\there"},
            {"id": "2", "note": "tilde~"},
        ]


class TestRoundtripAsync:
    """Test the async round-trip."""

    def test_async(self):
        data = {"users": [{"id": 1, "name": "Alice"}]}

        async def run():
            return await parse_async(await stringify_async(data))

        assert asyncio.run(run()) == [{"id": "1", "name": "Alice"}]
