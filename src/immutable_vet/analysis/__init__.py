"""Immutability analysis: classifier, template registry, rule engine and driver."""

from .classifier import TypeClassifier
from .context import AnalysisContext
from .diagnostics import DiagnosticCollector, Violation, finalize
from .engine import vet, vet_packages
from .interfaces import check_interfaces, implements
from .registry import TemplateRegistry
from .verdict import Verdict
from .walker import RuleEngine

__all__ = [
    "AnalysisContext",
    "DiagnosticCollector",
    "RuleEngine",
    "TemplateRegistry",
    "TypeClassifier",
    "Verdict",
    "Violation",
    "check_interfaces",
    "finalize",
    "implements",
    "vet",
    "vet_packages",
]
