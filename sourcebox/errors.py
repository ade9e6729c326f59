"""
SourceBox - Error Taxonomy & Located Error Formatting
=======================================================
Every failure the loader reports is a ``SchemaError``.  Decode failures
(malformed syntax, unknown fields, wrong field types) are
``SchemaDecodeError``; semantic failures found by the validators are
``SchemaValidationError``.

A ``SchemaValidationError`` carries a *detail* (the rule that was violated)
plus a chain of ``Location`` objects, outermost first.  Validators build the
error at the innermost level and the levels above wrap it with
``within()``, which prepends their own location without touching the
underlying kind, code, or detail::

    table 1 (loans): column 2 (borrower_id): foreign key references table
    'borrowerz' which does not exist in schema

``ValidationResult`` is the ordered container used by the collecting
validation mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


class ErrorKind(str, Enum):
    """The six kinds of failure a schema document can produce."""

    DECODE = "decode"
    MISSING_FIELD = "missing_field"
    INVALID_VALUE = "invalid_value"
    DUPLICATE = "duplicate"
    DANGLING_REFERENCE = "dangling_reference"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class Location:
    """Positional context for an error: entity kind, array index, name."""

    entity: str
    index: Optional[int] = None
    name: Optional[str] = None

    def __str__(self) -> str:
        text: str = self.entity
        if self.index is not None:
            text = f"{text} {self.index}"
        if self.name:
            text = f"{text} ({self.name})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {"entity": self.entity, "index": self.index, "name": self.name}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SchemaError(Exception):
    """Base class for everything the schema loader raises."""

    kind: ErrorKind = ErrorKind.DECODE

    @property
    def message(self) -> str:
        return str(self)


class SchemaDecodeError(SchemaError):
    """
    The input is not well-formed structured data, or it contains a field
    outside the declared vocabulary, or a field has the wrong type.
    """

    kind = ErrorKind.DECODE

    def __init__(
        self,
        reason: str,
        *,
        fmt: Optional[str] = None,
        source: Optional[str] = None,
        field_path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.reason: str = reason
        self.fmt: Optional[str] = fmt
        self.source: Optional[str] = source
        self.field_path: Optional[str] = field_path
        self.line: Optional[int] = line
        self.column: Optional[int] = column
        super().__init__(self._render())

    def _render(self) -> str:
        prefix: str = f"failed to decode {self.fmt.upper()}" if self.fmt else "failed to decode"
        if self.source:
            prefix = f"{prefix} from {self.source}"
        text: str = f"{prefix}: {self.reason}"
        if self.line is not None:
            position: str = f"line {self.line}"
            if self.column is not None:
                position = f"{position}, column {self.column}"
            text = f"{text} ({position})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": str(self),
            "format": self.fmt,
            "source": self.source,
            "field": self.field_path,
            "line": self.line,
            "column": self.column,
        }


class SchemaValidationError(SchemaError):
    """A single located semantic defect in a decoded schema document."""

    def __init__(
        self,
        kind: ErrorKind,
        code: str,
        detail: str,
        locations: Iterable[Location] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.kind: ErrorKind = kind
        self.code: str = code
        self.detail: str = detail
        self.locations: Tuple[Location, ...] = tuple(locations)
        self.context: Dict[str, Any] = dict(context or {})
        super().__init__(self.message)

    @property
    def message(self) -> str:
        parts: List[str] = [str(loc) for loc in self.locations]
        parts.append(self.detail)
        return ": ".join(parts)

    def within(self, location: Location) -> "SchemaValidationError":
        """Return a copy of this error with ``location`` as its outermost context."""
        return SchemaValidationError(
            self.kind,
            self.code,
            self.detail,
            (location,) + self.locations,
            self.context,
        )

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"[{self.kind.value}] {self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
            "locations": [loc.to_dict() for loc in self.locations],
            "context": self.context,
        }


# ---------------------------------------------------------------------------
# Constructors used by the validators
# ---------------------------------------------------------------------------


def missing_field(
    code: str,
    field_name: str,
    location: Optional[Location] = None,
    context: Optional[Dict[str, Any]] = None,
) -> SchemaValidationError:
    return SchemaValidationError(
        ErrorKind.MISSING_FIELD,
        code,
        f"missing required field '{field_name}'",
        (location,) if location else (),
        {"field": field_name, **(context or {})},
    )


def invalid_value(
    code: str,
    detail: str,
    location: Optional[Location] = None,
    context: Optional[Dict[str, Any]] = None,
) -> SchemaValidationError:
    return SchemaValidationError(
        ErrorKind.INVALID_VALUE, code, detail, (location,) if location else (), context
    )


def duplicate(
    code: str,
    detail: str,
    location: Optional[Location] = None,
    context: Optional[Dict[str, Any]] = None,
) -> SchemaValidationError:
    return SchemaValidationError(
        ErrorKind.DUPLICATE, code, detail, (location,) if location else (), context
    )


def dangling_reference(
    code: str,
    detail: str,
    location: Optional[Location] = None,
    context: Optional[Dict[str, Any]] = None,
) -> SchemaValidationError:
    return SchemaValidationError(
        ErrorKind.DANGLING_REFERENCE, code, detail, (location,) if location else (), context
    )


def incomplete(
    code: str,
    detail: str,
    location: Optional[Location] = None,
    context: Optional[Dict[str, Any]] = None,
) -> SchemaValidationError:
    return SchemaValidationError(
        ErrorKind.INCOMPLETE, code, detail, (location,) if location else (), context
    )


# ---------------------------------------------------------------------------
# Validation result container (collecting mode)
# ---------------------------------------------------------------------------


class ValidationResult:
    """
    Accumulates ``SchemaValidationError`` instances in traversal order.

    Only the collecting validation mode produces one of these; the default
    fail-fast mode raises the first error directly.
    """

    __slots__ = ("_items",)

    def __init__(self, errors: Iterable[SchemaValidationError] = ()) -> None:
        self._items: List[SchemaValidationError] = list(errors)

    # -- Mutation -----------------------------------------------------------

    def add(self, error: SchemaValidationError) -> None:
        self._items.append(error)

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[SchemaValidationError]:
        return list(self._items)

    @property
    def first(self) -> Optional[SchemaValidationError]:
        return self._items[0] if self._items else None

    @property
    def error_count(self) -> int:
        return len(self._items)

    @property
    def has_errors(self) -> bool:
        return bool(self._items)

    @property
    def is_valid(self) -> bool:
        return not self._items

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def by_kind(self, kind: ErrorKind) -> List[SchemaValidationError]:
        return [e for e in self._items if e.kind is kind]

    def raise_first(self) -> None:
        """Raise the first collected error, if any."""
        if self._items:
            raise self._items[0]

    def summary(self) -> str:
        return f"Validation: {self.error_count} error(s)."

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SchemaValidationError]:
        return iter(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            lines.append(f"  [{item.code}] {item.message}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "error_count": self.error_count,
            "errors": [e.to_dict() for e in self._items],
        }


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ErrorKind",
    "Location",
    "SchemaError",
    "SchemaDecodeError",
    "SchemaValidationError",
    "ValidationResult",
    "missing_field",
    "invalid_value",
    "duplicate",
    "dangling_reference",
    "incomplete",
]
