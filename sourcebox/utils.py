"""
SourceBox - Utility Functions & Helpers
========================================
Small helpers shared by the decoder, the loader and the CLI.
No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sourcebox.utils")


# ---------------------------------------------------------------------------
# Field paths
# ---------------------------------------------------------------------------


def format_field_path(loc: Sequence[Union[str, int]]) -> str:
    """
    Render a pydantic error location as a document path.

    >>> format_field_path(("tables", 0, "columns", 1, "colour"))
    'tables[0].columns[1].colour'
    """
    text: str = ""
    for part in loc:
        if isinstance(part, int):
            text += f"[{part}]"
        elif text:
            text += f".{part}"
        else:
            text = str(part)
    return text


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling load / validation steps.

    Usage:
        with Timer("validation") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "format_field_path",
    "plural",
    "Timer",
]
