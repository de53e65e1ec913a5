"""Tests for standard/compact conversion and validity checks."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ploon import PloonConfig, PloonFormat, StringifyOptions, is_valid, minify, prettify, stringify

STANDARD = "[users#2](id,name)\n\n1:1|1|Alice\n1:2|2|Bob"
COMPACT = "[users#2](id,name);1:1|1|Alice;1:2|2|Bob"


class TestMinify:
    """Test standard to compact conversion."""

    def test_standard(self):
        assert minify(STANDARD) == COMPACT

    def test_crlf(self):
        assert minify("[u#1](id)\r\n\r\n1:1|1\r\n1:2|2") == "[u#1](id);1:1|1;1:2|2"

    def test_already_compact(self):
        assert minify(COMPACT) == COMPACT

    @pytest.mark.parametrize("text", ["", "  "])
    def test_blank_unchanged(self, text):
        assert minify(text) == text

    def test_matches_compact_stringify(self):
        data = {"orders": [{"id": 101, "customer": {"name": "Alice"}, "items": [{"s": "x"}]}]}
        compact = stringify(data, StringifyOptions(format=PloonFormat.COMPACT))
        assert minify(stringify(data)) == compact


class TestPrettify:
    """Test compact to standard conversion."""

    def test_compact(self):
        assert prettify(COMPACT) == STANDARD

    def test_already_standard(self):
        assert prettify(STANDARD) == STANDARD

    def test_schema_only(self):
        assert prettify("[root#0]();") == "[root#0]()\n\n"

    def test_no_separator(self):
        assert prettify("[root](a)") == "[root](a)"

    @pytest.mark.parametrize("text", ["", "  "])
    def test_blank_unchanged(self, text):
        assert prettify(text) == text

    def test_semicolon_in_value_not_protected(self):
        # Documented limitation: a literal semicolon becomes a line break
        assert prettify("[t#1](v);1:1|a;b") == "[t#1](v)\n\n1:1|a\nb"


class TestIdempotence:
    """Test that minify and prettify undo each other."""

    @pytest.mark.parametrize(
        "data",
        [
            {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]},
            {"a": 1, "b": 2},
            {"products": [{"id": 1, "colors": [{"name": "Red"}, {"name": "Blue"}]}]},
            [],
        ],
    )
    def test_both_directions(self, data):
        standard = stringify(data)
        compact = stringify(data, StringifyOptions(format=PloonFormat.COMPACT))
        assert prettify(minify(standard)) == standard
        assert minify(prettify(compact)) == compact


class TestIsValid:
    """Test the structural heuristic."""

    def test_valid(self):
        assert is_valid(STANDARD)
        assert is_valid(COMPACT)

    def test_leading_whitespace(self):
        assert is_valid("  [a](b)")

    @pytest.mark.parametrize("text", [None, "", "   ", "hello", "[users#2] (id)", "(id)[u]"])
    def test_invalid(self, text):
        assert not is_valid(text)

    def test_false_positive_possible(self):
        # Not a grammar check
        assert is_valid("[x](")

    def test_custom_config(self):
        config = PloonConfig(schema_open="<", schema_close=">")
        assert is_valid("<u#1>(id)\n\n1:1|1", config)
        assert not is_valid(STANDARD, config)
