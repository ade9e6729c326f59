"""
SourceBox - Module entry point.

Allows running the validator directly via::

    python -m sourcebox validate schema.json

This module simply delegates to the CLI entry point defined in ``sourcebox.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from sourcebox.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
