"""
tests/test_catalog.py
Unit tests for sourcebox.catalog: keyword matching, families, and
validate_type error reporting.
"""

from __future__ import annotations

import logging

import pydantic
import pytest

from sourcebox.catalog import DEFAULT_CATALOG, TypeCatalog, TypeFamily, validate_type
from sourcebox.errors import ErrorKind, SchemaValidationError


class TestTypeCatalogTotality:
    """Every keyword is accepted bare, parameterized and upper-cased."""

    @pytest.mark.parametrize("keyword", DEFAULT_CATALOG.keywords)
    def test_keyword_variants_accepted(self, keyword: str) -> None:
        family = DEFAULT_CATALOG.family_of(keyword)
        assert family is not None
        assert validate_type(keyword) is family
        assert validate_type(f"{keyword}(10)") is family
        assert validate_type(keyword.upper()) is family

    def test_surrounding_whitespace_ignored(self) -> None:
        assert validate_type("  VarChar(64) ") is TypeFamily.STRING

    @pytest.mark.parametrize("spelling", ["hyperblob", "uuid", "string", "money"])
    def test_unknown_type_echoes_spelling(self, spelling: str) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_type(spelling)
        err = exc_info.value
        assert err.kind is ErrorKind.INVALID_VALUE
        assert err.code == "UNKNOWN_DATA_TYPE"
        assert f"'{spelling}'" in err.message
        assert err.context["catalog_version"] == DEFAULT_CATALOG.version

    def test_unknown_type_keeps_original_case(self) -> None:
        with pytest.raises(SchemaValidationError, match="'HyperBlob'"):
            validate_type("HyperBlob")

    def test_empty_spelling_is_missing_field(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_type("")
        assert exc_info.value.kind is ErrorKind.MISSING_FIELD
        assert "'type'" in exc_info.value.message


class TestFamilies:
    """Longest-prefix classification."""

    @pytest.mark.parametrize(
        "spelling, family",
        [
            ("int", TypeFamily.INTEGER),
            ("bigint", TypeFamily.INTEGER),
            ("tinyint(1)", TypeFamily.INTEGER),
            ("smallint unsigned", TypeFamily.INTEGER),
            ("decimal(10,2)", TypeFamily.NUMERIC),
            ("double precision", TypeFamily.NUMERIC),
            ("varchar(255)", TypeFamily.STRING),
            ("char(2)", TypeFamily.STRING),
            ("text", TypeFamily.STRING),
            ("datetime(6)", TypeFamily.TEMPORAL),
            ("timestamp", TypeFamily.TEMPORAL),
            ("boolean", TypeFamily.BOOLEAN),
            ("bit(1)", TypeFamily.BOOLEAN),
            ("jsonb", TypeFamily.STRUCTURED),
            ("enum('a','b')", TypeFamily.ENUMERATED),
        ],
    )
    def test_family_of(self, spelling: str, family: TypeFamily) -> None:
        assert DEFAULT_CATALOG.family_of(spelling) is family

    def test_longest_keyword_wins(self) -> None:
        assert DEFAULT_CATALOG.match("datetime") == "datetime"
        assert DEFAULT_CATALOG.match("jsonb") == "jsonb"
        assert DEFAULT_CATALOG.match("VARCHAR(20)") == "varchar"

    def test_prefix_match_is_permissive(self) -> None:
        # Only the base keyword is compared; the remainder is not parsed.
        assert DEFAULT_CATALOG.is_recognized("interval")
        assert DEFAULT_CATALOG.is_integer("interval")

    def test_is_integer(self) -> None:
        assert DEFAULT_CATALOG.is_integer("BIGINT")
        assert not DEFAULT_CATALOG.is_integer("varchar(50)")
        assert not DEFAULT_CATALOG.is_integer("hyperblob")


class TestCustomCatalog:
    """Alternate catalogs are plain pydantic models."""

    def test_keywords_are_normalized(self) -> None:
        catalog = TypeCatalog(
            version="test",
            families={TypeFamily.STRING: (" UUID ", "Citext")},
        )
        assert catalog.keywords == ("uuid", "citext")
        assert validate_type("uuid", catalog) is TypeFamily.STRING

    def test_default_keywords_not_inherited(self) -> None:
        catalog = TypeCatalog(version="test", families={TypeFamily.STRING: ("uuid",)})
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_type("int", catalog)
        assert exc_info.value.context["catalog_version"] == "test"

    def test_keyword_in_two_families_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            TypeCatalog(
                version="bad",
                families={
                    TypeFamily.STRING: ("money",),
                    TypeFamily.NUMERIC: ("money",),
                },
            )

    def test_empty_keyword_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            TypeCatalog(version="bad", families={TypeFamily.STRING: ("  ",)})

    def test_catalog_is_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            DEFAULT_CATALOG.version = "2.0"

    def test_families_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_CATALOG.families[TypeFamily.INTEGER] = ("varchar",)
        assert dict(DEFAULT_CATALOG.families)[TypeFamily.INTEGER] == (
            "int",
            "bigint",
            "smallint",
            "tinyint",
        )
        assert validate_type("int") is TypeFamily.INTEGER
        assert validate_type("varchar(5)") is TypeFamily.STRING

    def test_custom_families_are_read_only(self) -> None:
        catalog = TypeCatalog(version="test", families={TypeFamily.STRING: ("uuid",)})
        with pytest.raises(TypeError):
            catalog.families[TypeFamily.INTEGER] = ("serial",)
        assert catalog.family_of("serial") is None

    def test_families_accept_pairs(self) -> None:
        catalog = TypeCatalog(
            version="pairs",
            families=((TypeFamily.INTEGER, ("serial",)), (TypeFamily.STRING, ("uuid",))),
        )
        assert catalog.keywords == ("serial", "uuid")
        assert catalog.is_integer("serial")

    def test_family_listed_twice_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            TypeCatalog(
                version="bad",
                families=((TypeFamily.STRING, ("uuid",)), (TypeFamily.STRING, ("citext",))),
            )

    def test_normalization_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="sourcebox.catalog")
        TypeCatalog(version="test", families={TypeFamily.STRING: ("uuid", "citext")})
        assert "2 keyword(s) across 1 type families" in caplog.text
