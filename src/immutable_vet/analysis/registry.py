"""Template registry: the immutable template types declared by a package."""

from __future__ import annotations

from typing import Iterator

from ..frontend.markers import MarkerRecognizer
from ..logging_config import get_logger
from ..model.info import Package
from ..model.syntax import TypeSpec, inspect
from ..model.types import Named, ResolvedType, Struct, deref
from .classifier import TypeClassifier
from .diagnostics import DiagnosticCollector

logger = get_logger(__name__)


class TemplateRegistry:
    """Templates of the package being vetted.

    ``scan`` must complete before the package is walked: the walker and the
    leakage check consult ``is_template``.
    """

    def __init__(self, classifier: TypeClassifier, markers: MarkerRecognizer):
        self.classifier = classifier
        self.markers = markers
        self.templates: dict[ResolvedType, str] = {}

    def scan(self, package: Package, diagnostics: DiagnosticCollector) -> None:
        """Record every template and check the fields of template structs."""
        for spec in self._type_specs(package):
            name = self.markers.template_name(spec)
            if name is None:
                continue

            t = package.info.defs.get(spec)
            if t is None:
                logger.warning(f"no type recorded for template {spec.name.name}")
                continue

            self.templates[t] = name
            logger.debug(f"template {t} declares immutable type {name}")

            st = t.underlying if isinstance(t, Named) else None
            if not isinstance(st, Struct):
                continue

            for f in st.fields:
                if not self.classifier.is_immutable(f.type):
                    diagnostics.errorf(
                        f.pos or spec.pos,
                        f"immutable struct field must be immutable type; {f.type} is not",
                    )

    def is_template(self, t: ResolvedType) -> bool:
        return deref(t) in self.templates

    @staticmethod
    def _type_specs(package: Package) -> Iterator[TypeSpec]:
        for f in package.files:
            for node in inspect(f):
                if isinstance(node, TypeSpec):
                    yield node
