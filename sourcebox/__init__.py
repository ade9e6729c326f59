"""
SourceBox - Schema Loader & Validator
======================================

Loads declarative database schema documents (JSON/YAML) and validates them
before any test data is generated.  A document either becomes an immutable
``Schema`` or is rejected with exactly one located, human-readable error.

Pipeline overview::

    ┌─────────────┐    ┌──────────────┐    ┌─────────────────┐
    │ raw bytes / │───▶│  Structural  │───▶│Entity validators│
    │  file path  │    │   Decoder    │    │ (validators.py) │
    │ (loader.py) │    │ (decoder.py) │    └────────┬────────┘
    └─────────────┘    └──────┬───────┘             │
                              │          ┌──────────┼──────────┐
                              ▼          ▼          ▼          ▼
                        ┌───────────┐ ┌───────┐ ┌────────┐ ┌────────┐
                        │ documents │ │catalog│ │ models │ │ errors │
                        └───────────┘ └───────┘ └────────┘ └────────┘

Usage::

    # As a library
    from sourcebox import load_schema
    schema = load_schema("schema.json")

    # From the command line
    python -m sourcebox validate schema.json --verbose

Public API:
    - load_schema / parse_schema   - file and stream entry points
    - validate_document            - validate an already decoded document
    - load_document / parse_document - decode only, for collect_errors
    - collect_errors               - report every defect instead of the first
    - Schema, Table, Column        - validated model types
    - SchemaError and subclasses   - everything the loader raises
"""

from __future__ import annotations

__version__: str = "0.3.0"
__author__: str = "SourceBox Team"
__license__: str = "MIT"

from sourcebox.catalog import DEFAULT_CATALOG, TypeCatalog, TypeFamily, validate_type
from sourcebox.decoder import SUPPORTED_FORMATS, decode_document
from sourcebox.documents import SchemaDocument
from sourcebox.errors import (
    ErrorKind,
    Location,
    SchemaDecodeError,
    SchemaError,
    SchemaValidationError,
    ValidationResult,
)
from sourcebox.loader import (
    bundled_schemas,
    dump_schema,
    load_bundled_schema,
    load_document,
    load_schema,
    parse_document,
    parse_schema,
    parse_schema_text,
)
from sourcebox.models import (
    DEFAULT_CONFIG,
    Column,
    DatabaseKind,
    ForeignKey,
    Index,
    ReferentialAction,
    Relationship,
    Schema,
    SchemaMetadata,
    Table,
    ValidationRule,
    ValidatorConfig,
)
from sourcebox.validators import (
    collect_errors,
    iter_errors,
    validate_column,
    validate_document,
    validate_foreign_keys,
    validate_generation_order,
    validate_table,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Entry points
    "load_schema",
    "parse_schema",
    "parse_schema_text",
    "load_document",
    "parse_document",
    "dump_schema",
    "bundled_schemas",
    "load_bundled_schema",
    "decode_document",
    "SUPPORTED_FORMATS",
    # Type catalog
    "TypeFamily",
    "TypeCatalog",
    "DEFAULT_CATALOG",
    "validate_type",
    # Models
    "SchemaDocument",
    "Schema",
    "SchemaMetadata",
    "Table",
    "Column",
    "ForeignKey",
    "Index",
    "Relationship",
    "ValidationRule",
    "DatabaseKind",
    "ReferentialAction",
    "ValidatorConfig",
    "DEFAULT_CONFIG",
    # Validation
    "validate_column",
    "validate_table",
    "validate_foreign_keys",
    "validate_generation_order",
    "validate_document",
    "iter_errors",
    "collect_errors",
    # Errors
    "ErrorKind",
    "Location",
    "SchemaError",
    "SchemaDecodeError",
    "SchemaValidationError",
    "ValidationResult",
]
