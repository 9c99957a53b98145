"""Package spec resolution and loading.

A spec on the command line names one of:

    a facts document        ``pkg/facts.json``, read as is
    a package directory     ``./shapes``, facts come from the exporter or
                            the directory's facts file
    a directory tree        ``./...`` or ``shapes/...``, every directory
                            below holding Go sources

Specs are resolved against the working directory.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..config import VetConfig
from ..exceptions import PackageResolutionError, TypeCheckError
from ..logging_config import get_logger
from ..model.info import Package
from .facts import parse_facts, read_facts_file

logger = get_logger(__name__)

RECURSIVE_SUFFIX = "..."
SKIPPED_DIRS = frozenset({"vendor", "testdata"})


@dataclass(frozen=True)
class PackageTarget:
    """A resolved spec.

    Attributes:
        spec: The spec as given
        path: Package directory or facts document
    """

    spec: str
    path: Path

    @property
    def is_facts_file(self) -> bool:
        return self.path.suffix == ".json"

    @property
    def directory(self) -> Path:
        return self.path.parent if self.is_facts_file else self.path


def expand_specs(specs: Iterable[str], wd: Path) -> list[PackageTarget]:
    """Resolve specs to targets, expanding ``...`` patterns.

    Targets keep the order of the specs; a directory reached twice is
    loaded once.

    Raises:
        PackageResolutionError: If a spec names nothing loadable
    """
    targets: list[PackageTarget] = []
    seen: set[Path] = set()

    for spec in specs:
        for target in _resolve(spec, wd):
            if target.path in seen:
                continue
            seen.add(target.path)
            targets.append(target)

    return targets


def _resolve(spec: str, wd: Path) -> list[PackageTarget]:
    if spec == RECURSIVE_SUFFIX or spec.endswith("/" + RECURSIVE_SUFFIX):
        root = (wd / spec[: -len(RECURSIVE_SUFFIX)].rstrip("/")).resolve()
        if not root.is_dir():
            raise PackageResolutionError(spec, wd, f"{root} is not a directory")
        dirs = list(_go_package_dirs(root))
        if not dirs:
            raise PackageResolutionError(spec, wd, "matched no packages")
        logger.debug(f"{spec} expands to {len(dirs)} package directories")
        return [PackageTarget(spec, d) for d in dirs]

    path = (wd / spec).resolve()
    if path.suffix == ".json":
        if not path.is_file():
            raise PackageResolutionError(spec, wd, f"{path} does not exist")
        return [PackageTarget(spec, path)]

    if not path.is_dir():
        raise PackageResolutionError(spec, wd, f"cannot find package directory {path}")
    return [PackageTarget(spec, path)]


def _go_package_dirs(root: Path) -> Iterable[Path]:
    """Directories at or below ``root`` holding ``.go`` files, in lexical order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not _skip_dir(d))
        if any(f.endswith(".go") for f in filenames):
            yield Path(dirpath)


def _skip_dir(name: str) -> bool:
    return name in SKIPPED_DIRS or name.startswith(".") or name.startswith("_")


def load_target(target: PackageTarget, config: VetConfig, wd: Path) -> list[Package]:
    """Load the packages of one target.

    Raises:
        PackageResolutionError: If the directory has no facts and no
            exporter is configured
        TypeCheckError: If the exporter fails
        FactsError: If the facts document is malformed
    """
    if target.is_facts_file:
        return read_facts_file(target.path)

    if config.exporter:
        text = run_exporter(target.path, config)
        return parse_facts(text, f"{config.exporter[0]} {target.path}", default_dir=str(target.path))

    facts = target.path / config.facts_filename
    if not facts.is_file():
        raise PackageResolutionError(
            target.spec,
            wd,
            f"no {config.facts_filename} in {target.path} and no exporter configured",
        )
    return read_facts_file(facts)


def run_exporter(directory: Path, config: VetConfig) -> str:
    """Run the configured exporter for ``directory`` and return its output.

    Raises:
        TypeCheckError: If the command cannot run, times out or fails
    """
    cmd = [arg.replace("{dir}", str(directory)) for arg in config.exporter]
    logger.debug(f"running exporter: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=config.exporter_timeout_seconds,
            cwd=directory,
        )
    except subprocess.TimeoutExpired:
        raise TypeCheckError(
            str(directory), f"exporter timed out after {config.exporter_timeout_seconds}s"
        )
    except (FileNotFoundError, OSError) as e:
        raise TypeCheckError(str(directory), f"cannot run {cmd[0]}: {e}")

    if result.returncode != 0:
        reason = result.stderr.strip() or f"exit status {result.returncode}"
        raise TypeCheckError(str(directory), reason)

    return result.stdout
