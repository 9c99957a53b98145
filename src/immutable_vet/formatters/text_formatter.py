"""Plain ``path:line:column: message`` lines, the format editors and CI logs expect."""

from typing import List

from rich.console import Console

from ..analysis.diagnostics import Violation
from .base import BaseFormatter


class TextFormatter(BaseFormatter):
    """One line per violation on stderr."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True, highlight=False, soft_wrap=True)

    def render(self, violations: List[Violation]) -> None:
        for line in self._lines(violations):
            self.console.print(line, markup=False)

    def format(self, violations: List[Violation]) -> str:
        return "\n".join(self._lines(violations))

    @staticmethod
    def _lines(violations: List[Violation]) -> List[str]:
        return [str(v) for v in violations]
