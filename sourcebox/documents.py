"""
SourceBox - Candidate Document Shapes
======================================
Pydantic V2 models describing the *wire vocabulary* of a schema document.
The structural decoder validates raw JSON / YAML against these models and
nothing else:

- Unknown fields anywhere in the document are rejected (``extra="forbid"``),
  which catches typos and stale-format documents immediately.
- Field types are strict (``StrictStr``, ``StrictInt``, ``StrictBool``):
  ``"100"`` is not a record count and ``1`` is not a flag.
- ``generator_params`` holds JSON values only; YAML dates and timestamps
  are rejected.
- Every field is optional and defaults to ``None``.  Required fields are
  checked later by ``sourcebox.validators`` so their errors can carry full
  positional context; ``None`` always means "absent", never a placeholder.

A document that decodes successfully is only a *candidate*: it becomes a
``sourcebox.models.Schema`` once the validators accept it.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, JsonValue, StrictBool, StrictInt, StrictStr

_DOCUMENT_CONFIG: ConfigDict = ConfigDict(
    extra="forbid",
    frozen=True,
)


class ForeignKeyDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    table: Optional[StrictStr] = None
    column: Optional[StrictStr] = None
    on_delete: Optional[StrictStr] = None
    on_update: Optional[StrictStr] = None


class ColumnDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    name: Optional[StrictStr] = None
    type: Optional[StrictStr] = None
    nullable: Optional[StrictBool] = None
    primary_key: Optional[StrictBool] = None
    auto_increment: Optional[StrictBool] = None
    default: Optional[StrictStr] = None
    unique: Optional[StrictBool] = None
    description: Optional[StrictStr] = None
    generator: Optional[StrictStr] = None
    generator_params: Optional[Dict[StrictStr, JsonValue]] = None
    foreign_key: Optional[ForeignKeyDocument] = None


class IndexDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    name: Optional[StrictStr] = None
    columns: Optional[List[StrictStr]] = None
    type: Optional[StrictStr] = None
    unique: Optional[StrictBool] = None


class TableDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    record_count: Optional[StrictInt] = None
    columns: Optional[List[ColumnDocument]] = None
    indexes: Optional[List[IndexDocument]] = None


class MetadataDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    industry: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None
    total_records: Optional[StrictInt] = None
    complexity_tier: Optional[StrictInt] = None


class RelationshipDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    from_table: Optional[StrictStr] = None
    from_column: Optional[StrictStr] = None
    to_table: Optional[StrictStr] = None
    to_column: Optional[StrictStr] = None
    relationship_type: Optional[StrictStr] = None
    description: Optional[StrictStr] = None


class ValidationRuleDocument(BaseModel):
    model_config = _DOCUMENT_CONFIG

    rule: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    severity: Optional[StrictStr] = None


class SchemaDocument(BaseModel):
    """Top-level candidate document, exactly as decoded."""

    model_config = _DOCUMENT_CONFIG

    schema_version: Optional[StrictStr] = None
    name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    author: Optional[StrictStr] = None
    version: Optional[StrictStr] = None
    database_type: Optional[List[StrictStr]] = None
    metadata: Optional[MetadataDocument] = None
    tables: Optional[List[TableDocument]] = None
    relationships: Optional[List[RelationshipDocument]] = None
    generation_order: Optional[List[StrictStr]] = None
    validation_rules: Optional[List[ValidationRuleDocument]] = None


__all__: List[str] = [
    "ForeignKeyDocument",
    "ColumnDocument",
    "IndexDocument",
    "TableDocument",
    "MetadataDocument",
    "RelationshipDocument",
    "ValidationRuleDocument",
    "SchemaDocument",
]
