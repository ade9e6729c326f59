"""
SourceBox - Schema Validators
==============================
Semantic validation of a decoded ``SchemaDocument``.  Pydantic's decoding
handles vocabulary and field types; this module owns everything else:
required fields, value domains, duplicate names, foreign-key targets and
the generation order.

Every check is written once, as a generator of located errors, and walked
in a fixed order:

    1. top-level required fields
    2. tables (outer loop) → columns (inner loop), building the table index
    3. cross-reference pass (foreign keys)
    4. generation-order pass
    5. relationship annotations

``validate_document`` is fail-fast: it raises the first error the walk
produces and never builds a partial ``Schema``.  ``collect_errors`` walks
the same generators to the end and returns every defect, so its first
error is always the one ``validate_document`` raises.

All indexes (table names, per-table column names) are local to a call;
the module holds no mutable state, so validations may run concurrently.
The total work is a single linear pass over tables and columns.
"""

from __future__ import annotations

import logging
import re
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
)

from sourcebox.catalog import TypeFamily, validate_type
from sourcebox.documents import (
    ColumnDocument,
    ForeignKeyDocument,
    IndexDocument,
    RelationshipDocument,
    SchemaDocument,
    TableDocument,
)
from sourcebox.errors import (
    Location,
    SchemaValidationError,
    ValidationResult,
    dangling_reference,
    duplicate,
    incomplete,
    invalid_value,
    missing_field,
)
from sourcebox.models import DEFAULT_CONFIG, Column, Schema, Table, ValidatorConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox.validators")

# ---------------------------------------------------------------------------
# Patterns & entity labels
# ---------------------------------------------------------------------------

_VERSION_RE: re.Pattern[str] = re.compile(r"^\d+\.\d+\.\d+$")

_SCHEMA: str = "schema"
_TABLE: str = "table"
_COLUMN: str = "column"
_INDEX: str = "index"
_GENERATION_ORDER: str = "generation_order"
_RELATIONSHIP: str = "relationship"

ErrorStream = Iterator[SchemaValidationError]


def _resolve(config: Optional[ValidatorConfig]) -> ValidatorConfig:
    return config if config is not None else DEFAULT_CONFIG


# ---------------------------------------------------------------------------
# Column level
# ---------------------------------------------------------------------------


def _iter_column_errors(
    column: ColumnDocument,
    index: int,
    seen: Set[str],
    config: ValidatorConfig,
) -> ErrorStream:
    """
    Checks, in order: name present → name unique in table → type present →
    type recognized → auto_increment only on integers → generator_params
    keys → foreign-key fields present.  Adds the column name to ``seen``.
    """
    location: Location = Location(_COLUMN, index, column.name or None)

    if not column.name:
        yield missing_field("MISSING_COLUMN_NAME", "name", location)
        return

    if column.name in seen:
        yield duplicate(
            "DUPLICATE_COLUMN_NAME",
            f"column name '{column.name}' is already used in this table",
            location,
            {"column": column.name},
        )
    seen.add(column.name)

    if not column.type:
        yield missing_field("MISSING_COLUMN_TYPE", "type", location)
    else:
        try:
            family: TypeFamily = validate_type(column.type, config.type_catalog)
        except SchemaValidationError as exc:
            yield exc.within(location)
        else:
            if column.auto_increment and family is not TypeFamily.INTEGER:
                yield invalid_value(
                    "AUTO_INCREMENT_NON_INTEGER",
                    f"auto_increment requires an integer-family type, "
                    f"got '{column.type}'",
                    location,
                    {"type": column.type, "family": family.value},
                )

    if column.generator_params is not None:
        empty_keys: List[str] = [k for k in column.generator_params if not k.strip()]
        if empty_keys:
            yield invalid_value(
                "INVALID_GENERATOR_PARAMS",
                "generator_params keys must be non-empty strings",
                location,
                {"generator": column.generator},
            )

    fk: Optional[ForeignKeyDocument] = column.foreign_key
    if fk is not None:
        if not fk.table:
            yield missing_field("MISSING_FOREIGN_KEY_TABLE", "foreign_key.table", location)
        if not fk.column:
            yield missing_field("MISSING_FOREIGN_KEY_COLUMN", "foreign_key.column", location)


def validate_column(
    column: ColumnDocument,
    index: int = 0,
    seen: Optional[Set[str]] = None,
    config: Optional[ValidatorConfig] = None,
) -> Column:
    """
    Validate one candidate column against the names already seen in its
    table.  Foreign-key *targets* are not checked here; the full table index
    does not exist yet.

    Returns:
        The validated ``Column``.

    Raises:
        SchemaValidationError: the first defect, located at the column.
    """
    seen_names: Set[str] = seen if seen is not None else set()
    for error in _iter_column_errors(column, index, seen_names, _resolve(config)):
        raise error
    return Column.model_validate(column.model_dump(exclude_unset=True))


# ---------------------------------------------------------------------------
# Table level
# ---------------------------------------------------------------------------


def _iter_index_errors(index_doc: IndexDocument, position: int) -> ErrorStream:
    location: Location = Location(_INDEX, position, index_doc.name or None)
    if not index_doc.name:
        yield missing_field("INVALID_INDEX", "name", location)
    if not index_doc.columns:
        yield missing_field("INVALID_INDEX", "columns", location)


def _iter_table_errors(
    table: TableDocument,
    index: int,
    config: ValidatorConfig,
) -> ErrorStream:
    """
    Checks, in order: name → record_count → columns non-empty → every
    column (declaration order) → exactly one primary key → indexes.
    """
    location: Location = Location(_TABLE, index, table.name or None)

    if not table.name:
        yield missing_field("MISSING_TABLE_NAME", "name", location)

    if table.record_count is None:
        yield missing_field("MISSING_RECORD_COUNT", "record_count", location)
    elif table.record_count <= 0:
        yield invalid_value(
            "INVALID_RECORD_COUNT",
            f"record_count must be greater than 0, got {table.record_count}",
            location,
            {"record_count": table.record_count},
        )

    if not table.columns:
        yield missing_field("MISSING_COLUMNS", "columns", location)
        return

    seen: Set[str] = set()
    for position, column in enumerate(table.columns):
        for error in _iter_column_errors(column, position, seen, config):
            yield error.within(location)

    pk_count: int = sum(1 for c in table.columns if c.primary_key)
    if pk_count == 0:
        yield incomplete(
            "MISSING_PRIMARY_KEY",
            "must have exactly one primary key, found none",
            location,
        )
    elif pk_count > 1:
        pk_names: List[str] = [c.name or "?" for c in table.columns if c.primary_key]
        yield invalid_value(
            "MULTIPLE_PRIMARY_KEYS",
            f"must have exactly one primary key, found {pk_count} "
            f"({', '.join(pk_names)})",
            location,
            {"primary_keys": pk_names},
        )

    for position, index_doc in enumerate(table.indexes or ()):
        for error in _iter_index_errors(index_doc, position):
            yield error.within(location)


def validate_table(
    table: TableDocument,
    index: int = 0,
    config: Optional[ValidatorConfig] = None,
) -> Table:
    """
    Validate one candidate table and all of its columns.

    Returns:
        The validated ``Table``.

    Raises:
        SchemaValidationError: the first defect, located at the table.
    """
    for error in _iter_table_errors(table, index, _resolve(config)):
        raise error
    return Table.model_validate(table.model_dump(exclude_unset=True))


# ---------------------------------------------------------------------------
# Schema level: required top-level fields
# ---------------------------------------------------------------------------


def _iter_top_level_errors(
    document: SchemaDocument, config: ValidatorConfig
) -> ErrorStream:
    location: Location = Location(_SCHEMA, name=document.name or None)

    if not document.name:
        yield missing_field("MISSING_SCHEMA_NAME", "name", location)

    if not document.database_type:
        yield missing_field("MISSING_DATABASE_TYPE", "database_type", location)
    else:
        seen_kinds: Set[str] = set()
        for kind in document.database_type:
            if kind not in config.database_kinds:
                yield invalid_value(
                    "INVALID_DATABASE_TYPE",
                    f"invalid database_type '{kind}': must be one of: "
                    f"{', '.join(config.database_kinds)}",
                    location,
                    {"database_type": kind},
                )
            elif kind in seen_kinds:
                yield duplicate(
                    "DUPLICATE_DATABASE_TYPE",
                    f"database_type '{kind}' is listed more than once",
                    location,
                    {"database_type": kind},
                )
            seen_kinds.add(kind)

    if not document.tables:
        yield missing_field("MISSING_TABLES", "tables", location)

    if not document.generation_order:
        yield missing_field("MISSING_GENERATION_ORDER", "generation_order", location)

    if document.version is not None and not _VERSION_RE.match(document.version):
        yield invalid_value(
            "INVALID_VERSION",
            f"version '{document.version}' must be a three-part version "
            f"number (e.g. 1.0.0)",
            location,
            {"version": document.version},
        )

    metadata = document.metadata
    if metadata is not None and metadata.total_records is not None and metadata.total_records < 0:
        yield invalid_value(
            "INVALID_TOTAL_RECORDS",
            f"metadata.total_records must not be negative, got {metadata.total_records}",
            location,
            {"total_records": metadata.total_records},
        )


# ---------------------------------------------------------------------------
# Cross-reference pass
# ---------------------------------------------------------------------------


def _iter_foreign_key_errors(
    tables: Sequence[TableDocument],
    table_index: Mapping[str, TableDocument],
    config: ValidatorConfig,
) -> ErrorStream:
    """
    For every foreign key (tables outer, columns inner): the referenced
    table exists → optionally the referenced column exists → on_delete and
    on_update are absent or in the action vocabulary.
    """
    column_index: Dict[str, Set[str]] = {}

    for t_pos, table in enumerate(tables):
        for c_pos, column in enumerate(table.columns or ()):
            fk: Optional[ForeignKeyDocument] = column.foreign_key
            if fk is None or not fk.table:
                continue

            table_loc: Location = Location(_TABLE, t_pos, table.name or None)
            column_loc: Location = Location(_COLUMN, c_pos, column.name or None)
            ctx: Dict[str, Optional[str]] = {
                "table": table.name,
                "column": column.name,
                "referenced_table": fk.table,
                "referenced_column": fk.column,
            }

            target: Optional[TableDocument] = table_index.get(fk.table)
            if target is None:
                yield dangling_reference(
                    "DANGLING_FOREIGN_KEY",
                    f"foreign key references table '{fk.table}' which does "
                    f"not exist in schema",
                    column_loc,
                    ctx,
                ).within(table_loc)
                continue

            if config.check_referenced_columns and fk.column:
                if fk.table not in column_index:
                    column_index[fk.table] = {
                        c.name for c in target.columns or () if c.name
                    }
                if fk.column not in column_index[fk.table]:
                    yield dangling_reference(
                        "DANGLING_FOREIGN_KEY_COLUMN",
                        f"foreign key references column '{fk.column}' which "
                        f"does not exist in table '{fk.table}'",
                        column_loc,
                        ctx,
                    ).within(table_loc)

            for action_field, action in (
                ("on_delete", fk.on_delete),
                ("on_update", fk.on_update),
            ):
                if action is not None and action.upper() not in config.referential_actions:
                    yield invalid_value(
                        "INVALID_REFERENTIAL_ACTION",
                        f"invalid {action_field} action '{action}': must be "
                        f"one of: {', '.join(config.referential_actions)}",
                        column_loc,
                        {**ctx, action_field: action},
                    ).within(table_loc)


def _build_table_index(tables: Iterable[TableDocument]) -> Dict[str, TableDocument]:
    index: Dict[str, TableDocument] = {}
    for table in tables:
        if table.name and table.name not in index:
            index[table.name] = table
    return index


def validate_foreign_keys(
    tables: Sequence[TableDocument],
    config: Optional[ValidatorConfig] = None,
) -> None:
    """
    Cross-reference pass on its own: every foreign key must name a table in
    ``tables`` and use a known referential action.

    Raises:
        SchemaValidationError: the first dangling reference or bad action.
    """
    table_index: Dict[str, TableDocument] = _build_table_index(tables)
    for error in _iter_foreign_key_errors(tables, table_index, _resolve(config)):
        raise error


# ---------------------------------------------------------------------------
# Generation-order pass
# ---------------------------------------------------------------------------


def _iter_generation_order_errors(
    order: Sequence[str],
    table_names: Iterable[str],
) -> ErrorStream:
    """
    Scan the order once: unknown names and repeats fail on the spot, then
    any table never mentioned fails.  Dependency order is not checked.
    """
    known: List[str] = list(table_names)
    known_set: Set[str] = set(known)
    seen: Set[str] = set()

    for position, name in enumerate(order):
        location: Location = Location(_GENERATION_ORDER, position, name or None)
        if name not in known_set:
            yield dangling_reference(
                "UNKNOWN_GENERATION_ORDER_TABLE",
                f"generation order references table '{name}' which does not "
                f"exist in schema",
                location,
                {"table": name},
            )
        elif name in seen:
            yield duplicate(
                "DUPLICATE_GENERATION_ORDER_ENTRY",
                f"table '{name}' appears more than once in generation order",
                location,
                {"table": name},
            )
        seen.add(name)

    for name in known:
        if name not in seen:
            yield incomplete(
                "INCOMPLETE_GENERATION_ORDER",
                f"table '{name}' is missing from generation order",
                Location(_GENERATION_ORDER),
                {"table": name},
            )


def validate_generation_order(
    order: Optional[Sequence[str]],
    table_names: Iterable[str],
) -> None:
    """
    Confirm ``order`` is a non-empty permutation of ``table_names``.

    Raises:
        SchemaValidationError: empty order, unknown table, repeated entry,
            or a table left out.
    """
    if not order:
        raise missing_field(
            "MISSING_GENERATION_ORDER", "generation_order", Location(_SCHEMA)
        )
    for error in _iter_generation_order_errors(order, table_names):
        raise error


# ---------------------------------------------------------------------------
# Relationship annotations
# ---------------------------------------------------------------------------


def _iter_relationship_errors(
    relationships: Sequence[RelationshipDocument],
) -> ErrorStream:
    for position, rel in enumerate(relationships):
        location: Location = Location(_RELATIONSHIP, position)
        for field_name in ("from_table", "from_column", "to_table", "to_column"):
            if not getattr(rel, field_name):
                yield missing_field("INVALID_RELATIONSHIP", field_name, location)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def iter_errors(
    document: SchemaDocument,
    config: Optional[ValidatorConfig] = None,
) -> ErrorStream:
    """
    Yield every defect in ``document`` in the fixed traversal order.
    Lazily evaluated: consuming only the first item does only the work
    needed to find it.
    """
    cfg: ValidatorConfig = _resolve(config)
    tables: List[TableDocument] = list(document.tables or ())

    yield from _iter_top_level_errors(document, cfg)

    table_index: Dict[str, TableDocument] = {}
    for position, table in enumerate(tables):
        yield from _iter_table_errors(table, position, cfg)
        if not table.name:
            continue
        if table.name in table_index:
            yield duplicate(
                "DUPLICATE_TABLE_NAME",
                f"table name '{table.name}' is already defined",
                Location(_TABLE, position, table.name),
                {"table": table.name},
            )
        else:
            table_index[table.name] = table

    yield from _iter_foreign_key_errors(tables, table_index, cfg)

    if document.generation_order:
        yield from _iter_generation_order_errors(document.generation_order, table_index)

    yield from _iter_relationship_errors(document.relationships or ())


def validate_document(
    document: SchemaDocument,
    config: Optional[ValidatorConfig] = None,
) -> Schema:
    """
    **Master validation entry point.**

    Returns:
        The fully validated, immutable ``Schema``.

    Raises:
        SchemaValidationError: the first defect in traversal order.  No
            partial schema is ever returned.
    """
    for error in iter_errors(document, config):
        logger.debug("Schema rejected [%s]: %s", error.code, error.message)
        raise error

    schema: Schema = Schema.model_validate(document.model_dump(exclude_unset=True))
    logger.debug(
        "Schema '%s' accepted: %d table(s), %d column(s).",
        schema.name,
        schema.table_count,
        schema.total_columns,
    )
    return schema


def collect_errors(
    document: SchemaDocument,
    config: Optional[ValidatorConfig] = None,
) -> ValidationResult:
    """
    Collecting variant of ``validate_document``: walk the whole document and
    return every defect instead of stopping at the first.
    """
    result: ValidationResult = ValidationResult(iter_errors(document, config))
    logger.debug("Collected validation result: %s", result.summary())
    return result


__all__: List[str] = [
    "validate_column",
    "validate_table",
    "validate_foreign_keys",
    "validate_generation_order",
    "iter_errors",
    "validate_document",
    "collect_errors",
]
