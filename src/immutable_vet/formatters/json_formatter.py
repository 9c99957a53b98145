"""JSON formatter for immutable-vet."""

import json
from typing import List

from ..analysis.diagnostics import Violation
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render violations as a JSON array of {file, line, column, message}."""

    def render(self, violations: List[Violation]) -> None:
        print(self.format(violations))

    def format(self, violations: List[Violation]) -> str:
        data = [
            {"file": v.file, "line": v.line, "column": v.column, "message": v.message}
            for v in violations
        ]
        return json.dumps(data, indent=2)
