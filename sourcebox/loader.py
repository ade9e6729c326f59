"""
SourceBox - Schema Loader Entry Points
=======================================
The public way in: bytes, text, a stream or a file path go through the
structural decoder and then the validators, and come back as an immutable
``Schema`` or as exactly one ``SchemaError``.

Usage::

    from sourcebox import load_schema

    schema = load_schema("schemas/fintech-loans.json")
    for name in schema.generation_order:
        table = schema.get_table(name)
        ...

The module also re-serializes accepted schemas (``dump_schema``) and
exposes the example schemas that ship inside the package.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO, List, Optional, Tuple, Union

import yaml

from sourcebox.decoder import JSON, YAML, RawInput, decode_document, normalize_format
from sourcebox.documents import SchemaDocument
from sourcebox.models import Schema, ValidatorConfig
from sourcebox.utils import Timer
from sourcebox.validators import validate_document

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox.loader")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BUNDLED_SCHEMA_DIR: Path = Path(__file__).resolve().parent / "schemas"

_SUFFIX_FORMATS = {".json": JSON, ".yaml": YAML, ".yml": YAML}

PathLike = Union[str, Path]


def format_for_path(path: PathLike) -> Optional[str]:
    """Format implied by a file suffix, or ``None`` when it must be detected."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower())


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _stream_label(stream: IO, source: Optional[str]) -> Optional[str]:
    label = source if source is not None else getattr(stream, "name", None)
    return str(label) if label is not None else None


def parse_document(
    stream: IO,
    fmt: Optional[str] = None,
    source: Optional[str] = None,
) -> SchemaDocument:
    """
    Read ``stream`` to the end and decode it without validating.  Used by
    callers that want every defect (``collect_errors``) rather than the first.
    """
    label: Optional[str] = _stream_label(stream, source)
    data: RawInput = stream.read()
    return decode_document(data, fmt, label)


def parse_schema(
    stream: IO,
    fmt: Optional[str] = None,
    config: Optional[ValidatorConfig] = None,
    source: Optional[str] = None,
) -> Schema:
    """
    Read ``stream`` to the end, decode it and validate it.

    Args:
        stream: Binary or text stream; read exactly once.
        fmt: ``"json"``, ``"yaml"`` or ``None`` to detect from content.
        config: Validator settings (defaults when ``None``).
        source: Label for messages; defaults to the stream's ``name``.

    Returns:
        The validated ``Schema``.

    Raises:
        SchemaDecodeError: The document is not well-formed.
        SchemaValidationError: The first semantic defect found.
    """
    label: Optional[str] = _stream_label(stream, source)

    with Timer(f"load {label or '<stream>'}"):
        document: SchemaDocument = parse_document(stream, fmt, label)
        schema: Schema = validate_document(document, config)

    logger.info(
        "Loaded schema '%s' from %s: %d table(s), %d record(s).",
        schema.name,
        label or "<stream>",
        schema.table_count,
        schema.total_records,
    )
    return schema


def parse_schema_text(
    text: RawInput,
    fmt: Optional[str] = None,
    config: Optional[ValidatorConfig] = None,
    source: Optional[str] = None,
) -> Schema:
    """Decode and validate an in-memory document (``str`` or ``bytes``)."""
    document: SchemaDocument = decode_document(text, fmt, source)
    return validate_document(document, config)


def _checked_file(path: PathLike) -> Path:
    file_path: Path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Schema file not found: {file_path}")
    if file_path.is_dir():
        raise IsADirectoryError(f"Schema path is a directory: {file_path}")
    return file_path


def load_document(path: PathLike, fmt: Optional[str] = None) -> SchemaDocument:
    """Decode a schema file without validating it (see ``load_schema``)."""
    file_path: Path = _checked_file(path)
    resolved: Optional[str] = normalize_format(fmt) if fmt else format_for_path(file_path)
    with file_path.open("rb") as handle:
        return parse_document(handle, resolved, source=str(file_path))


def load_schema(
    path: PathLike,
    fmt: Optional[str] = None,
    config: Optional[ValidatorConfig] = None,
) -> Schema:
    """
    Load a schema file.  The format comes from ``fmt``, else from the file
    suffix (``.json``, ``.yaml``, ``.yml``), else from the content.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        IsADirectoryError: ``path`` is a directory.
        SchemaDecodeError / SchemaValidationError: see ``parse_schema``.
    """
    file_path: Path = _checked_file(path)
    resolved: Optional[str] = normalize_format(fmt) if fmt else format_for_path(file_path)
    logger.debug("Opening %s (format: %s).", file_path, resolved or "auto")

    with file_path.open("rb") as handle:
        return parse_schema(handle, resolved, config, source=str(file_path))


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def dump_schema(schema: Schema, fmt: str = JSON) -> str:
    """
    Serialize an accepted schema in the document vocabulary.  Fields the
    original document left out stay out, so loading the output yields an
    equal ``Schema``.
    """
    resolved: str = normalize_format(fmt)
    document = schema.to_document()
    if resolved == YAML:
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Bundled example schemas
# ---------------------------------------------------------------------------


def bundled_schemas() -> List[Tuple[str, Path]]:
    """``(name, path)`` for every schema shipped in ``sourcebox/schemas``, sorted by name."""
    if not BUNDLED_SCHEMA_DIR.is_dir():
        return []
    return sorted(
        (p.stem, p)
        for p in BUNDLED_SCHEMA_DIR.iterdir()
        if p.is_file() and format_for_path(p) is not None
    )


def load_bundled_schema(name: str, config: Optional[ValidatorConfig] = None) -> Schema:
    """
    Load a bundled schema by name (``fintech-loans``, ...).

    Raises:
        LookupError: No bundled schema has that name.
    """
    for bundled_name, path in bundled_schemas():
        if bundled_name == name:
            return load_schema(path, config=config)
    available: str = ", ".join(n for n, _ in bundled_schemas()) or "none"
    raise LookupError(f"Unknown bundled schema '{name}'. Available: {available}.")


__all__: List[str] = [
    "BUNDLED_SCHEMA_DIR",
    "format_for_path",
    "parse_document",
    "parse_schema",
    "parse_schema_text",
    "load_document",
    "load_schema",
    "dump_schema",
    "bundled_schemas",
    "load_bundled_schema",
]
