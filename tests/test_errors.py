"""
tests/test_errors.py
Unit tests for sourcebox.errors (located error formatting, result
container) and the small helpers in sourcebox.utils.
"""

from __future__ import annotations

import pytest

from sourcebox.errors import (
    ErrorKind,
    Location,
    SchemaDecodeError,
    SchemaError,
    SchemaValidationError,
    ValidationResult,
    dangling_reference,
    duplicate,
    incomplete,
    invalid_value,
    missing_field,
)
from sourcebox.utils import Timer, format_field_path, plural


class TestLocation:
    @pytest.mark.parametrize(
        "location, text",
        [
            (Location("schema"), "schema"),
            (Location("schema", name="loans"), "schema (loans)"),
            (Location("table", 1), "table 1"),
            (Location("table", 0, "borrowers"), "table 0 (borrowers)"),
            (Location("column", 2, ""), "column 2"),
        ],
    )
    def test_str(self, location: Location, text: str) -> None:
        assert str(location) == text


class TestSchemaValidationError:
    def test_within_prepends_context(self) -> None:
        inner = dangling_reference(
            "DANGLING_FOREIGN_KEY",
            "foreign key references table 'x' which does not exist in schema",
            Location("column", 1, "x_id"),
        )
        outer = inner.within(Location("table", 3, "orders"))
        assert outer.message == (
            "table 3 (orders): column 1 (x_id): foreign key references "
            "table 'x' which does not exist in schema"
        )
        assert outer.code == inner.code
        assert outer.kind is ErrorKind.DANGLING_REFERENCE
        assert inner.message.startswith("column 1 (x_id):")

    def test_without_location(self) -> None:
        err = invalid_value("X", "bad value")
        assert str(err) == "bad value"
        assert err.locations == ()

    def test_constructors_set_kind(self) -> None:
        assert missing_field("C", "name").kind is ErrorKind.MISSING_FIELD
        assert invalid_value("C", "d").kind is ErrorKind.INVALID_VALUE
        assert duplicate("C", "d").kind is ErrorKind.DUPLICATE
        assert dangling_reference("C", "d").kind is ErrorKind.DANGLING_REFERENCE
        assert incomplete("C", "d").kind is ErrorKind.INCOMPLETE

    def test_missing_field_context(self) -> None:
        err = missing_field("MISSING_TABLE_NAME", "name", Location("table", 0), {"extra": 1})
        assert err.message == "table 0: missing required field 'name'"
        assert err.context == {"field": "name", "extra": 1}

    def test_is_catchable_as_schema_error(self) -> None:
        with pytest.raises(SchemaError):
            raise duplicate("DUPLICATE_TABLE_NAME", "dup")

    def test_to_dict(self) -> None:
        err = incomplete("MISSING_PRIMARY_KEY", "no pk", Location("table", 0, "t"))
        data = err.to_dict()
        assert data["kind"] == "incomplete"
        assert data["code"] == "MISSING_PRIMARY_KEY"
        assert data["message"] == "table 0 (t): no pk"
        assert data["locations"] == [{"entity": "table", "index": 0, "name": "t"}]

    def test_repr(self) -> None:
        assert repr(duplicate("D", "dup")) == "[duplicate] D: dup"


class TestSchemaDecodeError:
    def test_full_message(self) -> None:
        err = SchemaDecodeError("malformed JSON: oops", fmt="json", source="a.json", line=3, column=7)
        assert err.message == "failed to decode JSON from a.json: malformed JSON: oops (line 3, column 7)"
        assert err.kind is ErrorKind.DECODE

    def test_minimal_message(self) -> None:
        assert str(SchemaDecodeError("bad")) == "failed to decode: bad"


class TestValidationResult:
    def test_empty_result(self) -> None:
        result = ValidationResult()
        assert result.is_valid and bool(result)
        assert len(result) == 0
        assert result.summary() == "Validation: 0 error(s)."

    def test_add_merge_and_raise(self) -> None:
        first = ValidationResult([missing_field("A", "name")])
        second = ValidationResult()
        second.add(invalid_value("B", "bad"))
        first.merge(second)
        assert first.codes == ["A", "B"]
        assert [e.code for e in first] == ["A", "B"]
        with pytest.raises(SchemaValidationError) as exc_info:
            first.raise_first()
        assert exc_info.value.code == "A"

    def test_errors_is_a_copy(self) -> None:
        result = ValidationResult([duplicate("D", "dup")])
        result.errors.clear()
        assert result.error_count == 1


class TestUtils:
    def test_format_field_path(self) -> None:
        assert format_field_path(("tables", 0, "columns", 1, "colour")) == "tables[0].columns[1].colour"
        assert format_field_path(("name",)) == "name"
        assert format_field_path(()) == ""

    def test_plural(self) -> None:
        assert plural(1, "defect") == "1 defect"
        assert plural(3, "defect") == "3 defects"

    def test_timer(self) -> None:
        with Timer("unit") as t:
            sum(range(100))
        assert t.elapsed >= 0.0
        assert "unit" in repr(t)
