"""Base formatter interface for rendering violations."""

from abc import ABC, abstractmethod
from typing import List

from ..analysis.diagnostics import Violation


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, violations: List[Violation]) -> None:
        """Write the violations to stderr/stdout as appropriate."""

    @abstractmethod
    def format(self, violations: List[Violation]) -> str:
        """Return formatted string representation of violations."""
