"""
SourceBox - Command-Line Interface
===================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Validate a schema file (fail-fast: first defect only)
    python -m sourcebox validate schemas/fintech-loans.json

    # Read from standard input, report every defect
    cat schema.yaml | python -m sourcebox validate - --format yaml --all

    # Restrict accepted databases and check referenced columns too
    python -m sourcebox validate schema.json --database-kind postgres \\
        --check-fk-columns

    # Bundled schemas and the type catalog
    python -m sourcebox ls
    python -m sourcebox list-types

Exit codes:
    0 - success
    1 - validation error
    2 - decode error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, NoReturn, Optional, Sequence

if TYPE_CHECKING:
    from sourcebox.models import Schema

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_DECODE_ERROR: int = 2
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the sourcebox logger.

    Args:
        verbosity: -1 = disabled, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("sourcebox")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False
    root_logger.disabled = verbosity < 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from sourcebox import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="sourcebox",
        description=(
            "SourceBox - schema loader and validator.\n\n"
            "Checks declarative table schemas (JSON/YAML) before any "
            "test data is generated from them."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s validate schema.json\n"
            "  %(prog)s validate - --format yaml --all < schema.yaml\n"
            "  %(prog)s list-schemas\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SourceBox v{__version__}",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress log output.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # --- validate ---
    validate = subparsers.add_parser(
        "validate",
        help="Validate a schema file.",
        description="Decode and validate a schema document.",
    )
    validate.add_argument(
        "path",
        metavar="PATH",
        help="Schema file (JSON or YAML), or '-' to read standard input.",
    )
    validate.add_argument(
        "--format",
        dest="fmt",
        choices=["json", "yaml", "yml"],
        default=None,
        help="Document format (default: from the file suffix, else detected).",
    )
    validate.add_argument(
        "--all",
        dest="collect_all",
        action="store_true",
        default=False,
        help="Report every defect instead of stopping at the first.",
    )

    config_group = validate.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--database-kind",
        dest="database_kinds",
        action="append",
        default=None,
        metavar="KIND",
        help="Accepted database_type value (repeatable; default: mysql, postgres).",
    )
    config_group.add_argument(
        "--check-fk-columns",
        action="store_true",
        default=False,
        help="Require foreign keys to name an existing column as well as table.",
    )

    # --- list-schemas ---
    subparsers.add_parser(
        "list-schemas",
        aliases=["ls"],
        help="List the bundled example schemas.",
    )

    # --- list-types ---
    subparsers.add_parser(
        "list-types",
        help="Show the recognized column data types.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a ``ValidatorConfig`` override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.database_kinds:
        overrides["database_kinds"] = tuple(args.database_kinds)

    if args.check_fk_columns:
        overrides["check_referenced_columns"] = True

    return overrides


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


def _print_schema_report(schema: "Schema", label: str, elapsed: float) -> None:
    print(f"\n{'='*50}")
    print("  Schema Validation Report")
    print(f"{'='*50}")
    print(f"  Source:   {label}")
    print(f"  Schema:   {schema.name}")
    print(f"  Tables:   {schema.table_count}")
    print(f"  Columns:  {schema.total_columns}")
    print(f"  Records:  {schema.total_records}")
    print(f"  Order:    {' → '.join(schema.generation_order)}")
    print(f"  Time:     {elapsed:.3f}s")
    print("\n  ✅ Schema is valid.")
    print(f"{'='*50}\n")


def _run_validate(args: argparse.Namespace) -> int:
    """
    Decode and validate one document.

    Returns the appropriate exit code.
    """
    from sourcebox.errors import SchemaDecodeError, SchemaValidationError
    from sourcebox.loader import load_document, load_schema, parse_document, parse_schema
    from sourcebox.models import ValidatorConfig
    from sourcebox.utils import Timer, plural
    from sourcebox.validators import collect_errors, validate_document

    try:
        config: ValidatorConfig = ValidatorConfig(**_build_config_overrides(args))
    except ValueError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    from_stdin: bool = args.path == "-"
    label: str = "<stdin>" if from_stdin else str(Path(args.path))
    logger.info("Validating %s", label)

    with Timer("validate") as t:
        try:
            if not args.collect_all:
                if from_stdin:
                    schema = parse_schema(sys.stdin.buffer, args.fmt, config, source=label)
                else:
                    schema = load_schema(args.path, args.fmt, config)
            else:
                if from_stdin:
                    document = parse_document(sys.stdin.buffer, args.fmt, source=label)
                else:
                    document = load_document(args.path, args.fmt)
                result = collect_errors(document, config)
                if not result.is_valid:
                    print(
                        f"error: {plural(result.error_count, 'defect')} in {label}",
                        file=sys.stderr,
                    )
                    for err in result:
                        print(f"  ✗ {err.message}", file=sys.stderr)
                    return EXIT_VALIDATION_ERROR
                schema = validate_document(document, config)
        except OSError as exc:
            logger.error("Cannot read schema file: %s", exc)
            print(f"error: cannot read {label}: {exc}", file=sys.stderr)
            return EXIT_INPUT_ERROR
        except SchemaDecodeError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            return EXIT_DECODE_ERROR
        except SchemaValidationError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            return EXIT_VALIDATION_ERROR

    _print_schema_report(schema, label, t.elapsed)
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# list-schemas / list-types
# ---------------------------------------------------------------------------


def _run_list_schemas() -> int:
    from sourcebox.errors import SchemaError
    from sourcebox.loader import bundled_schemas, load_schema

    entries = bundled_schemas()
    print("Available schemas:\n")
    for name, path in entries:
        try:
            schema = load_schema(path)
        except SchemaError as exc:
            logger.error("Bundled schema %s is invalid: %s", name, exc)
            print(f"  - {name:<22} (invalid: {exc})")
            continue
        industry: str = (
            schema.metadata.industry if schema.metadata and schema.metadata.industry else "-"
        )
        print(
            f"  - {name:<22} {industry:<12} "
            f"{schema.table_count} tables, {schema.total_records} records"
        )
    if not entries:
        print("  (none)")
    print("\nValidate one with: sourcebox validate <path>")
    return EXIT_SUCCESS


def _run_list_types() -> int:
    from sourcebox.catalog import DEFAULT_CATALOG

    print(f"Recognized column types (catalog v{DEFAULT_CATALOG.version}):\n")
    for family, keywords in DEFAULT_CATALOG.families:
        print(f"  {family.value:<12} {', '.join(keywords)}")
    print("\nParameterized spellings such as varchar(255) or decimal(10,2) are accepted.")
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    if args.command == "validate":
        exit_code: int = _run_validate(args)
    elif args.command in ("list-schemas", "ls"):
        exit_code = _run_list_schemas()
    else:
        exit_code = _run_list_types()

    logger.debug("Command '%s' finished with exit code %d.", args.command, exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_DECODE_ERROR",
    "EXIT_INPUT_ERROR",
]
