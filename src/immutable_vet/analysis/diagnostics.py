"""Violation records, collection and final ordering."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable

from ..exceptions import PathError
from ..model.position import Position


@dataclass(frozen=True)
class Violation:
    """A place where the code does not follow the immutability convention.

    Attributes:
        pos: Where the violation was found
        message: What is wrong
    """

    pos: Position
    message: str

    @property
    def file(self) -> str:
        return self.pos.filename

    @property
    def line(self) -> int:
        return self.pos.line

    @property
    def column(self) -> int:
        return self.pos.column

    def sort_key(self) -> tuple[str, int, int]:
        return (self.pos.filename, self.pos.line, self.pos.column)

    def __str__(self) -> str:
        return f"{self.pos.filename}:{self.pos.line}:{self.pos.column}: {self.message}"


@dataclass
class DiagnosticCollector:
    """Accumulates violations; reporting one never stops the analysis."""

    violations: list[Violation] = field(default_factory=list)

    def errorf(self, pos: Position, message: str) -> None:
        self.violations.append(Violation(pos, message))

    def extend(self, violations: Iterable[Violation]) -> None:
        self.violations.extend(violations)

    def __len__(self) -> int:
        return len(self.violations)


def relativize(violation: Violation, wd: Path) -> Violation:
    """Rewrite the violation's path relative to ``wd``.

    Raises:
        PathError: If no relative path exists (e.g. another drive)
    """
    filename = violation.pos.filename
    if not filename:
        return violation
    try:
        rel = os.path.relpath(filename, wd)
    except ValueError as e:
        raise PathError(filename, wd, str(e))
    return replace(violation, pos=replace(violation.pos, filename=rel))


def finalize(violations: Iterable[Violation], wd: Path) -> list[Violation]:
    """Relative paths, ordered by file, then line, then column."""
    result = [relativize(v, wd) for v in violations]
    result.sort(key=Violation.sort_key)
    return result
