"""Source positions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """A position in a source file.

    Ordering is by filename, then line, then column, which is the order
    diagnostics are reported in.

    Attributes:
        filename: Absolute path of the file (relative once diagnostics are rendered)
        line: 1-indexed line
        column: 1-indexed byte column
    """

    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


NO_POS = Position("", 0, 0)
