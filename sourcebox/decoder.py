"""
SourceBox - Structural Decoder
===============================
Turns raw bytes (or text) into a ``SchemaDocument`` candidate.

Decoding is strict: malformed syntax, a field outside the declared
vocabulary, or a field of the wrong type all raise ``SchemaDecodeError``.
Missing required fields are *not* a decode failure; they are left as
``None`` for the semantic validators, which can report them with full
positional context.

Two formats share one vocabulary:

- JSON, parsed directly by pydantic-core (line / column reported).
- YAML, parsed by PyYAML ``safe_load`` and then validated against the
  same models (line / column reported from the YAML problem mark).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from sourcebox.documents import SchemaDocument
from sourcebox.errors import SchemaDecodeError
from sourcebox.utils import format_field_path

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox.decoder")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JSON: str = "json"
YAML: str = "yaml"
SUPPORTED_FORMATS: Tuple[str, ...] = (JSON, YAML)

_FORMAT_ALIASES: Dict[str, str] = {"json": JSON, "yaml": YAML, "yml": YAML}

_JSON_POSITION_RE: re.Pattern[str] = re.compile(r"\s*at line (\d+) column (\d+)\s*$")

RawInput = Union[bytes, str]


# ---------------------------------------------------------------------------
# Format handling
# ---------------------------------------------------------------------------


def normalize_format(fmt: str) -> str:
    """Map a user-supplied format name (``json``, ``yaml``, ``yml``) to its canonical form."""
    canonical: Optional[str] = _FORMAT_ALIASES.get(fmt.strip().lower())
    if canonical is None:
        raise ValueError(
            f"Unsupported document format '{fmt}'. "
            f"Expected one of: {', '.join(SUPPORTED_FORMATS)}."
        )
    return canonical


def detect_format(data: RawInput) -> str:
    """
    Guess the format of ``data``: JSON when the first non-blank character
    opens an object or array (or the input is blank), YAML otherwise.
    """
    head: RawInput = data.lstrip()[:1]
    if isinstance(head, bytes):
        head = head.decode("ascii", errors="replace")
    if head in ("", "{", "["):
        return JSON
    return YAML


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------


def _translate_validation_error(
    exc: PydanticValidationError, fmt: str, source: Optional[str]
) -> SchemaDecodeError:
    """Reduce a pydantic error report to a single decode failure."""
    details: List[Dict[str, Any]] = list(exc.errors(include_url=False))
    first: Dict[str, Any] = details[0]
    err_type: str = first["type"]
    loc: Tuple[Union[str, int], ...] = tuple(first.get("loc", ()))
    path: str = format_field_path(loc)
    line: Optional[int] = None
    column: Optional[int] = None

    if err_type == "json_invalid":
        raw_reason: str = str(first.get("ctx", {}).get("error") or first["msg"])
        match = _JSON_POSITION_RE.search(raw_reason)
        if match:
            line, column = int(match.group(1)), int(match.group(2))
            raw_reason = raw_reason[: match.start()]
        reason: str = f"malformed JSON: {raw_reason}"
    elif err_type == "extra_forbidden":
        reason = f"unknown field '{path}'"
    elif not loc:
        reason = f"expected an object at the top level ({first['msg']})"
    else:
        reason = f"field '{path}': {first['msg']}"

    if len(details) > 1:
        logger.debug(
            "Decoder reported %d problem(s); surfacing the first: %s",
            len(details),
            reason,
        )

    return SchemaDecodeError(
        reason,
        fmt=fmt,
        source=source,
        field_path=path or None,
        line=line,
        column=column,
    )


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def _decode_json(data: RawInput, source: Optional[str]) -> SchemaDocument:
    try:
        return SchemaDocument.model_validate_json(data)
    except PydanticValidationError as exc:
        raise _translate_validation_error(exc, JSON, source) from exc


def _decode_yaml(data: RawInput, source: Optional[str]) -> SchemaDocument:
    try:
        raw: Any = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        problem: str = getattr(exc, "problem", None) or str(exc)
        raise SchemaDecodeError(
            f"malformed YAML: {problem}",
            fmt=YAML,
            source=source,
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
        ) from exc

    if not isinstance(raw, dict):
        raise SchemaDecodeError(
            f"expected a mapping at the top level, got {type(raw).__name__}",
            fmt=YAML,
            source=source,
        )

    try:
        return SchemaDocument.model_validate(raw)
    except PydanticValidationError as exc:
        raise _translate_validation_error(exc, YAML, source) from exc


def decode_document(
    data: RawInput,
    fmt: Optional[str] = None,
    source: Optional[str] = None,
) -> SchemaDocument:
    """
    Decode one schema document.

    Args:
        data: The complete document as bytes or text.
        fmt: ``"json"``, ``"yaml"`` (``"yml"``), or ``None`` to detect.
        source: Label for error messages (file path, ``<stdin>``, ...).

    Returns:
        The candidate ``SchemaDocument``.

    Raises:
        SchemaDecodeError: malformed syntax, unknown field, wrong field type.
        ValueError: ``fmt`` names an unsupported format.
    """
    resolved: str = normalize_format(fmt) if fmt else detect_format(data)
    logger.debug(
        "Decoding %s document from %s (%d bytes).",
        resolved.upper(),
        source or "<memory>",
        len(data),
    )
    if resolved == JSON:
        return _decode_json(data, source)
    return _decode_yaml(data, source)


__all__: List[str] = [
    "JSON",
    "YAML",
    "SUPPORTED_FORMATS",
    "normalize_format",
    "detect_format",
    "decode_document",
]
