"""Unit tests for content_converter.json_converter module."""

import json

import pytest

from docupack.content_converter.errors import FrontmatterError
from docupack.content_converter.json_converter import JsonConverter


@pytest.fixture
def converter():
    return JsonConverter()


class TestConvert:
    """Test cases for JsonConverter.convert."""

    def test_header_fields_then_body(self, converter):
        """Output is compact JSON with header fields followed by body."""
        result = converter.convert("---\ntitle: X\n---\nhello")

        assert result == '{"title":"X","body":"\\nhello"}'

    def test_field_order_follows_header(self, converter):
        result = converter.convert("---\nzeta: 1\nalpha: 2\n---\n")

        assert list(json.loads(result)) == ["zeta", "alpha", "body"]

    def test_non_ascii_is_not_escaped(self, converter):
        result = converter.convert("---\ntitle: Café\n---\nnaïve")

        assert "Café" in result
        assert "naïve" in result

    def test_dates_serialized_as_iso(self, converter):
        result = converter.convert("---\ndate: 2024-03-01\nat: 2024-03-01T10:20:30\n---\n")

        data = json.loads(result)
        assert data["date"] == "2024-03-01"
        assert data["at"] == "2024-03-01T10:20:30"

    def test_nested_values(self, converter):
        result = converter.convert("---\nmeta:\n  tags: [a, b]\n  draft: false\n---\n")

        assert json.loads(result)["meta"] == {"tags": ["a", "b"], "draft": False}

    def test_body_field_in_header_is_overwritten(self, converter):
        result = converter.convert("---\nbody: from header\n---\nreal")

        assert json.loads(result)["body"] == "\nreal"

    def test_missing_frontmatter_returns_none(self, converter):
        assert converter.convert("# Just markdown\n") is None

    def test_empty_frontmatter_returns_none(self, converter):
        assert converter.convert("---\n---\nbody") is None

    def test_invalid_frontmatter_raises(self, converter):
        with pytest.raises(FrontmatterError):
            converter.convert("---\n- not\n- a mapping\n---\nbody", "doc.md")

    def test_deterministic(self, converter):
        text = "---\ntitle: X\ntags: [b, a]\n---\nbody"

        assert converter.convert(text) == converter.convert(text)


class TestBuildIndex:
    """Test cases for JsonConverter.build_index."""

    def test_sorted_by_reference(self, converter):
        result = converter.build_index([("b", '{"t":2}'), ("a", '{"t":1}')])

        assert result == '[{"docRef":"a","content":"{\\"t\\":1}"},{"docRef":"b","content":"{\\"t\\":2}"}]'

    def test_order_independent(self, converter):
        pairs = [("guide/x", "1"), ("a", "2"), ("guide/a", "3")]

        assert converter.build_index(pairs) == converter.build_index(list(reversed(pairs)))

    def test_backslashes_normalized(self, converter):
        result = json.loads(converter.build_index([("guide\\x", "1")]))

        assert result == [{"docRef": "guide/x", "content": "1"}]

    def test_empty(self, converter):
        assert converter.build_index([]) == "[]"
