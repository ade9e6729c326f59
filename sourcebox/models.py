"""
SourceBox - Validated Schema Models
====================================
Immutable Pydantic V2 models for a schema that has passed validation.
These are the single source of truth handed to the data-generation engine:

    Schema ──owns──▶ Table ──owns──▶ Column ──owns──▶ ForeignKey (0..1)

Ownership is strictly tree-shaped; there are no back-references.  Sequences
are stored as tuples and every model is frozen, so an accepted schema can
be shared freely between threads.

Field names are identical to the document vocabulary and optional fields
keep ``None`` when the document left them out, so ``Schema.to_document()``
reproduces the accepted input exactly.

Instances are built by ``sourcebox.validators`` after every check has
passed; constructing them by hand bypasses the cross-entity checks.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from sourcebox.catalog import DEFAULT_CATALOG, TypeCatalog, TypeFamily

# ---------------------------------------------------------------------------
# Enums: fixed vocabularies
# ---------------------------------------------------------------------------


class DatabaseKind(str, Enum):
    """Target databases a schema may declare support for."""

    MYSQL = "mysql"
    POSTGRES = "postgres"


class ReferentialAction(str, Enum):
    """Foreign-key ON DELETE / ON UPDATE behaviour (absent = database default)."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"


def _to_action(value: Optional[str]) -> Optional[ReferentialAction]:
    if value is None:
        return None
    return ReferentialAction(value.upper())


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_ENTITY_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Column-level entities
# ---------------------------------------------------------------------------


class ForeignKey(BaseModel):
    """A reference from a column to a column of another table."""

    model_config = _ENTITY_CONFIG

    table: str = Field(..., min_length=1, description="Referenced table name.")
    column: str = Field(..., min_length=1, description="Referenced column name.")
    on_delete: Optional[str] = Field(
        default=None, description="ON DELETE action, spelled as in the document."
    )
    on_update: Optional[str] = Field(
        default=None, description="ON UPDATE action, spelled as in the document."
    )

    @property
    def on_delete_action(self) -> Optional[ReferentialAction]:
        return _to_action(self.on_delete)

    @property
    def on_update_action(self) -> Optional[ReferentialAction]:
        return _to_action(self.on_update)

    def __repr__(self) -> str:
        return f"<FK → {self.table}.{self.column}>"


class Column(BaseModel):
    """
    A typed field within a table.

    ``type`` is kept exactly as written (``varchar(255)``); use
    ``type_family()`` for the catalog classification.  Flags are ``None``
    when the document did not set them, the ``is_*`` helpers collapse that
    to a boolean.
    """

    model_config = _ENTITY_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    type: str = Field(..., min_length=1, description="Data-type spelling.")
    nullable: Optional[bool] = Field(default=None)
    primary_key: Optional[bool] = Field(default=None)
    auto_increment: Optional[bool] = Field(default=None)
    default: Optional[str] = Field(
        default=None, description="Default-value expression (opaque)."
    )
    unique: Optional[bool] = Field(default=None)
    description: Optional[str] = Field(default=None)
    generator: Optional[str] = Field(default=None, description="Generator name.")
    generator_params: Optional[Dict[str, JsonValue]] = Field(
        default=None,
        description="Generator-specific parameters; shape owned by the generator.",
    )
    foreign_key: Optional[ForeignKey] = Field(default=None)

    @property
    def is_primary_key(self) -> bool:
        return bool(self.primary_key)

    @property
    def is_auto_increment(self) -> bool:
        return bool(self.auto_increment)

    @property
    def is_nullable(self) -> bool:
        return bool(self.nullable)

    @property
    def is_unique(self) -> bool:
        return bool(self.unique)

    def type_family(self, catalog: TypeCatalog = DEFAULT_CATALOG) -> Optional[TypeFamily]:
        return catalog.family_of(self.type)

    def __repr__(self) -> str:
        pk_flag: str = " PK" if self.is_primary_key else ""
        fk_flag: str = f" → {self.foreign_key.table}" if self.foreign_key else ""
        return f"<Column {self.name} {self.type}{pk_flag}{fk_flag}>"


class Index(BaseModel):
    """Index descriptor; only checked for a name and at least one column."""

    model_config = _ENTITY_CONFIG

    name: str = Field(..., min_length=1)
    columns: Tuple[str, ...] = Field(..., min_length=1)
    type: Optional[str] = Field(default=None, description="Index method, e.g. btree.")
    unique: Optional[bool] = Field(default=None)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class Table(BaseModel):
    """A named collection of columns with a target record count."""

    model_config = _ENTITY_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    description: Optional[str] = Field(default=None)
    record_count: int = Field(..., gt=0, description="Rows to generate.")
    columns: Tuple[Column, ...] = Field(..., min_length=1)
    indexes: Optional[Tuple[Index, ...]] = Field(default=None)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def primary_key(self) -> Column:
        """The table's single primary-key column."""
        return next(c for c in self.columns if c.is_primary_key)

    @property
    def foreign_key_columns(self) -> List[Column]:
        return [c for c in self.columns if c.foreign_key is not None]

    def __repr__(self) -> str:
        return (
            f"<Table {self.name} "
            f"({len(self.columns)} cols, {self.record_count} records)>"
        )


# ---------------------------------------------------------------------------
# Schema-level annotations
# ---------------------------------------------------------------------------


class SchemaMetadata(BaseModel):
    model_config = _ENTITY_CONFIG

    industry: Optional[str] = Field(default=None)
    tags: Optional[Tuple[str, ...]] = Field(default=None)
    total_records: Optional[int] = Field(default=None, ge=0)
    complexity_tier: Optional[int] = Field(default=None)


class Relationship(BaseModel):
    """Documentation-only description of a link between two tables."""

    model_config = _ENTITY_CONFIG

    from_table: str = Field(..., min_length=1)
    from_column: str = Field(..., min_length=1)
    to_table: str = Field(..., min_length=1)
    to_column: str = Field(..., min_length=1)
    relationship_type: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)


class ValidationRule(BaseModel):
    """A soft/hard rule annotation, carried through uninterpreted."""

    model_config = _ENTITY_CONFIG

    rule: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    severity: Optional[str] = Field(default=None)


# ---------------------------------------------------------------------------
# Schema: top-level container
# ---------------------------------------------------------------------------


class Schema(BaseModel):
    """
    The root model: a validated description of related tables, their
    generation order, and metadata.

    Invariants (enforced by the validators before construction):
    table names are unique, every table has exactly one primary key, every
    foreign key names an existing table, and ``generation_order`` is a
    permutation of the table names.
    """

    model_config = _ENTITY_CONFIG

    schema_version: Optional[str] = Field(default=None, description="Format version tag.")
    name: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None)
    author: Optional[str] = Field(default=None)
    version: Optional[str] = Field(default=None, description="Content version (X.Y.Z).")
    database_type: Tuple[str, ...] = Field(..., min_length=1)
    metadata: Optional[SchemaMetadata] = Field(default=None)
    tables: Tuple[Table, ...] = Field(..., min_length=1)
    relationships: Optional[Tuple[Relationship, ...]] = Field(default=None)
    generation_order: Tuple[str, ...] = Field(..., min_length=1)
    validation_rules: Optional[Tuple[ValidationRule, ...]] = Field(default=None)

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_count(self) -> int:
        return len(self.tables)

    @property
    def total_columns(self) -> int:
        return sum(len(t.columns) for t in self.tables)

    @property
    def total_records(self) -> int:
        """Sum of per-table record counts (not the declared metadata total)."""
        return sum(t.record_count for t in self.tables)

    def foreign_key_edges(self) -> List[Tuple[str, str, str, str]]:
        """(from_table, from_column, to_table, to_column) for every foreign key."""
        return [
            (table.name, column.name, column.foreign_key.table, column.foreign_key.column)
            for table in self.tables
            for column in table.columns
            if column.foreign_key is not None
        ]

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible dict in the document vocabulary; absent fields omitted."""
        return self.model_dump(mode="json", exclude_unset=True)

    def __repr__(self) -> str:
        return (
            f"<Schema {self.name} {self.table_count} tables, "
            f"{self.total_columns} columns>"
        )


# ---------------------------------------------------------------------------
# Validator configuration
# ---------------------------------------------------------------------------


class ValidatorConfig(BaseModel):
    """
    Settings for one validation run.  ``None`` wherever a config is accepted
    means ``ValidatorConfig()``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_catalog: TypeCatalog = Field(
        default=DEFAULT_CATALOG, description="Recognized data-type spellings."
    )
    database_kinds: Tuple[str, ...] = Field(
        default=tuple(k.value for k in DatabaseKind),
        min_length=1,
        description="Accepted values of 'database_type'.",
    )
    referential_actions: Tuple[str, ...] = Field(
        default=tuple(a.value for a in ReferentialAction),
        min_length=1,
        description=(
            "Accepted foreign-key actions (matched case-insensitively); "
            "a subset of ReferentialAction."
        ),
    )
    check_referenced_columns: bool = Field(
        default=False,
        description="Also require foreign keys to name an existing column.",
    )

    @field_validator("referential_actions")
    @classmethod
    def _upper_actions(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        known: Tuple[str, ...] = tuple(a.value for a in ReferentialAction)
        upper: Tuple[str, ...] = tuple(a.upper() for a in v)
        unsupported: List[str] = [a for a in upper if a not in known]
        if unsupported:
            raise ValueError(
                f"Unsupported referential action(s) {unsupported}; "
                f"expected a subset of: {', '.join(known)}."
            )
        return upper


DEFAULT_CONFIG: ValidatorConfig = ValidatorConfig()


__all__: List[str] = [
    "DatabaseKind",
    "ReferentialAction",
    "ForeignKey",
    "Column",
    "Index",
    "Table",
    "SchemaMetadata",
    "Relationship",
    "ValidationRule",
    "Schema",
    "ValidatorConfig",
    "DEFAULT_CONFIG",
]
