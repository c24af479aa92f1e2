"""Tests for record filters."""

from __future__ import annotations

import pytest

from localrag.errors import FilterError
from localrag.index.filters import All, Equals, matches, parse_filter


class TestParseFilter:
    """Test parse_filter function."""

    def test_equals_on_id(self) -> None:
        assert parse_filter('id = "r1"') == Equals("id", "r1")

    def test_equals_tolerates_spacing(self) -> None:
        assert parse_filter('  id="chunk_a_0_1"  ') == Equals("id", "chunk_a_0_1")

    def test_equals_dotted_field(self) -> None:
        assert parse_filter('metadata.filename = "notes.md"') == Equals(
            "metadata.filename", "notes.md"
        )

    def test_not_null_means_all(self) -> None:
        assert parse_filter("id IS NOT NULL") == All()
        assert parse_filter("id is not null") == All()

    def test_filter_values_pass_through(self) -> None:
        flt = Equals("id", 3)
        assert parse_filter(flt) is flt

    @pytest.mark.parametrize(
        "expression",
        ["", "id > 3", "id = r1", "text IS NOT NULL", "DROP TABLE documents"],
    )
    def test_rejects_unknown_expressions(self, expression: str) -> None:
        """Unknown expressions raise instead of silently matching nothing."""
        with pytest.raises(FilterError):
            parse_filter(expression)

    def test_rejects_other_types(self) -> None:
        with pytest.raises(FilterError):
            parse_filter(42)  # type: ignore[arg-type]

    def test_filter_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_filter("nonsense")


class TestMatches:
    """Test matches predicate."""

    record = {"id": "r1", "text": "hello", "metadata": {"filename": "a.txt", "chunk_index": 0}}

    def test_all_matches_everything(self) -> None:
        assert matches(self.record, All())
        assert matches({}, All())

    def test_equals(self) -> None:
        assert matches(self.record, Equals("id", "r1"))
        assert not matches(self.record, Equals("id", "r2"))

    def test_nested_field(self) -> None:
        assert matches(self.record, Equals("metadata.filename", "a.txt"))
        assert matches(self.record, Equals("metadata.chunk_index", 0))

    def test_missing_field_never_matches(self) -> None:
        assert not matches(self.record, Equals("missing", None))
        assert not matches(self.record, Equals("metadata.missing.deeper", "x"))
        assert not matches(self.record, Equals("text.length", 5))
