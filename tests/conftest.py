"""
tests/conftest.py
Shared fixtures for the sourcebox test suite.

Schema fixtures are plain dicts; each test gets a fresh deep copy so it can
mutate freely.  Real file I/O happens inside pytest's tmp_path.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Callable, Dict

import pytest
import yaml

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
BUNDLED_DIR: pathlib.Path = ROOT_DIR / "sourcebox" / "schemas"


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------

_MINIMAL: Dict[str, Any] = {
    "name": "minimal",
    "database_type": ["mysql"],
    "tables": [
        {
            "name": "users",
            "record_count": 10,
            "columns": [
                {"name": "id", "type": "int", "primary_key": True, "auto_increment": True},
            ],
        }
    ],
    "generation_order": ["users"],
}

_LENDING: Dict[str, Any] = {
    "schema_version": "1.0",
    "name": "lending",
    "description": "Borrowers and their loans",
    "author": "tests",
    "version": "1.0.0",
    "database_type": ["mysql", "postgres"],
    "metadata": {
        "industry": "fintech",
        "tags": ["loans"],
        "total_records": 300,
    },
    "tables": [
        {
            "name": "borrowers",
            "record_count": 100,
            "columns": [
                {"name": "id", "type": "bigint", "primary_key": True, "auto_increment": True},
                {"name": "email", "type": "varchar(255)", "unique": True, "generator": "email"},
                {
                    "name": "credit_score",
                    "type": "int",
                    "generator": "int_range",
                    "generator_params": {"min": 300, "max": 850},
                },
            ],
        },
        {
            "name": "loans",
            "record_count": 200,
            "columns": [
                {"name": "id", "type": "bigint", "primary_key": True, "auto_increment": True},
                {
                    "name": "borrower_id",
                    "type": "bigint",
                    "foreign_key": {
                        "table": "borrowers",
                        "column": "id",
                        "on_delete": "CASCADE",
                    },
                },
                {"name": "amount", "type": "decimal(12,2)"},
            ],
        },
    ],
    "relationships": [
        {
            "from_table": "loans",
            "from_column": "borrower_id",
            "to_table": "borrowers",
            "to_column": "id",
            "relationship_type": "many_to_one",
        }
    ],
    "generation_order": ["borrowers", "loans"],
}


@pytest.fixture()
def minimal_schema_dict() -> Dict[str, Any]:
    """Smallest valid schema: one table with one integer primary key."""
    return copy.deepcopy(_MINIMAL)


@pytest.fixture()
def lending_schema_dict() -> Dict[str, Any]:
    """Two related tables, every optional section filled in."""
    return copy.deepcopy(_LENDING)


@pytest.fixture()
def fintech_schema_path() -> pathlib.Path:
    path = BUNDLED_DIR / "fintech-loans.json"
    assert path.exists(), f"Bundled schema not found at {path}."
    return path


# ---------------------------------------------------------------------------
# File writers
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_json(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Return a function that writes a dict (or raw text) to a JSON file."""

    def _write(data: Any, name: str = "schema.json") -> pathlib.Path:
        path = tmp_path / name
        text = data if isinstance(data, str) else json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def write_yaml(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Return a function that writes a dict (or raw text) to a YAML file."""

    def _write(data: Any, name: str = "schema.yaml") -> pathlib.Path:
        path = tmp_path / name
        if isinstance(data, str):
            text = data
        else:
            text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
