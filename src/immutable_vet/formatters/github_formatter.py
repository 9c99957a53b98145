"""GitHub Actions formatter."""

from typing import List

from ..analysis.diagnostics import Violation
from .base import BaseFormatter


class GithubFormatter(BaseFormatter):
    """Output GitHub Actions ``::error`` annotations, one per violation."""

    def render(self, violations: List[Violation]) -> None:
        print(self.format(violations))

    def format(self, violations: List[Violation]) -> str:
        lines: list[str] = []
        for v in violations:
            if v.file:
                lines.append(
                    f"::error file={v.file},line={v.line},col={v.column}::{_escape(v.message)}"
                )
            else:
                lines.append(f"::error::{_escape(v.message)}")
        return "\n".join(lines)


def _escape(message: str) -> str:
    # Workflow command data must not contain raw newlines or percent signs
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
