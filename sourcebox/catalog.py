"""
SourceBox - Column Data-Type Catalog
=====================================
The fixed, versioned list of column data-type spellings the loader
recognizes.  Matching is case-insensitive and prefix based, so
parameterized spellings such as ``VARCHAR(255)`` or ``decimal(10,2)``
validate against their base keyword without the parameters being parsed.
Extracting length / precision / scale is left to the data-generation
engine.

``DEFAULT_CATALOG`` is a read-only module constant.  Validators receive the
catalog through ``ValidatorConfig.type_catalog`` so an alternate catalog
can be injected without code changes.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sourcebox.errors import Location, invalid_value, missing_field

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox.catalog")


class TypeFamily(str, Enum):
    """Broad families of column data types."""

    INTEGER = "integer"
    NUMERIC = "numeric"
    STRING = "string"
    TEMPORAL = "temporal"
    BOOLEAN = "boolean"
    STRUCTURED = "structured"
    ENUMERATED = "enumerated"


class TypeCatalog(BaseModel):
    """
    An immutable set of base type keywords grouped by family.

    A spelling is recognized when its normalized form (stripped,
    lower-cased) starts with one of the keywords.  When several keywords
    match (``datetime`` starts with both ``date`` and ``datetime``) the
    longest wins.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(..., min_length=1, description="Catalog format version.")
    families: Tuple[Tuple[TypeFamily, Tuple[str, ...]], ...] = Field(
        ...,
        min_length=1,
        description="(family, keywords) pairs; accepts a mapping on input.",
    )

    @field_validator("families", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return tuple(v.items())
        return v

    @field_validator("families")
    @classmethod
    def _normalize_keywords(
        cls, v: Tuple[Tuple[TypeFamily, Tuple[str, ...]], ...]
    ) -> Tuple[Tuple[TypeFamily, Tuple[str, ...]], ...]:
        seen: Dict[str, TypeFamily] = {}
        normalized: Dict[TypeFamily, Tuple[str, ...]] = {}
        for family, keywords in v:
            if family in normalized:
                raise ValueError(f"Type family '{family.value}' is listed twice.")
            cleaned: List[str] = []
            for keyword in keywords:
                kw: str = keyword.strip().lower()
                if not kw:
                    raise ValueError(f"Empty keyword in type family '{family.value}'.")
                if kw in seen:
                    raise ValueError(
                        f"Keyword '{kw}' is listed under both "
                        f"'{seen[kw].value}' and '{family.value}'."
                    )
                seen[kw] = family
                cleaned.append(kw)
            normalized[family] = tuple(cleaned)
        logger.debug(
            "Type catalog normalized: %d keyword(s) across %d type families.",
            len(seen),
            len(normalized),
        )
        return tuple(normalized.items())

    # -- Lookup -------------------------------------------------------------

    @property
    def keywords(self) -> Tuple[str, ...]:
        """Every keyword, in family declaration order."""
        return tuple(kw for _, kws in self.families for kw in kws)

    def _best_match(self, spelling: str) -> Optional[Tuple[str, TypeFamily]]:
        normalized: str = spelling.strip().lower()
        best: Optional[Tuple[str, TypeFamily]] = None
        for family, keywords in self.families:
            for keyword in keywords:
                if normalized.startswith(keyword) and (
                    best is None or len(keyword) > len(best[0])
                ):
                    best = (keyword, family)
        return best

    def match(self, spelling: str) -> Optional[str]:
        """Return the base keyword ``spelling`` is recognized by, or ``None``."""
        found = self._best_match(spelling)
        return found[0] if found else None

    def family_of(self, spelling: str) -> Optional[TypeFamily]:
        found = self._best_match(spelling)
        return found[1] if found else None

    def is_recognized(self, spelling: str) -> bool:
        return self._best_match(spelling) is not None

    def is_integer(self, spelling: str) -> bool:
        return self.family_of(spelling) is TypeFamily.INTEGER

    def __repr__(self) -> str:
        return f"<TypeCatalog v{self.version}: {len(self.keywords)} keywords>"


DEFAULT_CATALOG: TypeCatalog = TypeCatalog(
    version="1.0",
    families={
        TypeFamily.INTEGER: ("int", "bigint", "smallint", "tinyint"),
        TypeFamily.NUMERIC: ("decimal", "float", "double"),
        TypeFamily.STRING: ("varchar", "text", "char"),
        TypeFamily.TEMPORAL: ("date", "datetime", "timestamp"),
        TypeFamily.BOOLEAN: ("boolean", "bit"),
        TypeFamily.STRUCTURED: ("json", "jsonb"),
        TypeFamily.ENUMERATED: ("enum",),
    },
)


def validate_type(
    spelling: Optional[str],
    catalog: TypeCatalog = DEFAULT_CATALOG,
    location: Optional[Location] = None,
) -> TypeFamily:
    """
    Confirm that ``spelling`` is a recognized data type and return its family.

    Raises:
        SchemaValidationError: missing-field for an empty spelling,
            invalid-value (echoing the exact spelling) for an unknown one.
    """
    if not spelling:
        raise missing_field("MISSING_DATA_TYPE", "type", location)

    family: Optional[TypeFamily] = catalog.family_of(spelling)
    if family is None:
        raise invalid_value(
            "UNKNOWN_DATA_TYPE",
            f"unrecognized data type '{spelling}'",
            location,
            {"type": spelling, "catalog_version": catalog.version},
        )
    return family


__all__: List[str] = [
    "TypeFamily",
    "TypeCatalog",
    "DEFAULT_CATALOG",
    "validate_type",
]
