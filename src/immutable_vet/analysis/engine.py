"""Vet driver: package specs in, ordered violations out."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..config import DEFAULT_CONFIG, VetConfig
from ..frontend.markers import MarkerRecognizer, SourceMarkers
from ..frontend.packages import expand_specs, load_target
from ..logging_config import get_logger
from ..model.info import Package
from .classifier import TypeClassifier
from .context import AnalysisContext
from .diagnostics import DiagnosticCollector, Violation, finalize
from .interfaces import check_interfaces
from .registry import TemplateRegistry
from .walker import RuleEngine

logger = get_logger(__name__)


def vet(
    wd: Path,
    specs: Sequence[str],
    config: Optional[VetConfig] = None,
    markers: Optional[MarkerRecognizer] = None,
) -> list[Violation]:
    """Vet every package the specs name.

    Args:
        wd: Working directory; specs and reported paths are relative to it
        specs: Package specs as given on the command line
        config: Conventions and loading options (defaults if omitted)
        markers: Marker recognizer (reads comments from disk if omitted)

    Returns:
        Violations ordered by file, line and column; empty when clean

    Raises:
        ToolFault: If a package cannot be resolved, loaded or analyzed
    """
    config = config or DEFAULT_CONFIG
    groups = []
    for target in expand_specs(specs, wd):
        logger.info(f"loading {target.spec} ({target.path})")
        groups.append(load_target(target, config, wd))
    return vet_packages(wd, groups, config, markers)


def vet_packages(
    wd: Path,
    groups: Iterable[Sequence[Package]],
    config: Optional[VetConfig] = None,
    markers: Optional[MarkerRecognizer] = None,
) -> list[Violation]:
    """Vet already loaded packages.

    Each group holds the packages of one directory; they share one set of
    skip-marked files. The interface check runs once every group is done.
    """
    config = config or DEFAULT_CONFIG
    markers = markers or SourceMarkers(config)

    context = AnalysisContext.create(config)
    classifier = TypeClassifier(context)
    diagnostics = DiagnosticCollector()

    for packages in groups:
        skip_files: set[str] = set()
        for package in packages:
            before = len(diagnostics)

            registry = TemplateRegistry(classifier, markers)
            registry.scan(package, diagnostics)
            RuleEngine(package, classifier, registry, markers, diagnostics, skip_files).run()

            logger.info(
                f"{package.import_path} ({package.name}): {len(package.files)} files, "
                f"{len(registry.templates)} templates, {len(diagnostics) - before} violations"
            )

    diagnostics.extend(
        check_interfaces(
            classifier, context.tracked_interfaces.values(), context.seen_named.values()
        )
    )
    return finalize(diagnostics.violations, wd)
