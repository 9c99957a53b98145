"""Tool faults: conditions under which a package cannot be analyzed at all.

A tool fault is never a lint violation. Violations are accumulated and
reported together; a tool fault aborts the whole invocation.
"""

from pathlib import Path
from typing import Optional

from .base import ImmutableVetError


class ToolFault(ImmutableVetError):
    """Base class for errors that stop the analysis."""

    pass


class PackageResolutionError(ToolFault):
    """Raised when a package spec cannot be resolved to a package directory."""

    def __init__(self, spec: str, wd: Path, reason: str):
        super().__init__(
            f"unable to import {spec} relative to {wd}",
            details={"spec": spec, "wd": str(wd), "reason": reason},
        )
        self.spec = spec
        self.wd = wd
        self.reason = reason


class TypeCheckError(ToolFault):
    """Raised when the external exporter fails to type check a package."""

    def __init__(self, package: str, reason: str):
        super().__init__(
            f"type checking failed for {package}",
            details={"package": package, "reason": reason},
        )
        self.package = package
        self.reason = reason


class FactsError(ToolFault):
    """Raised when a package facts document is malformed."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"invalid package facts in {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


class UnsupportedTypeError(ToolFault):
    """Raised when the classifier meets a type shape it cannot reason about."""

    def __init__(self, kind: str, type_string: str):
        super().__init__(f"unable to handle type {kind} {type_string}")
        self.kind = kind
        self.type_string = type_string


class FileAccessError(ToolFault):
    """Raised when a source file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class PathError(ToolFault):
    """Raised when a diagnostic path cannot be made relative to the working directory."""

    def __init__(self, path: str, wd: Path, reason: Optional[str] = None):
        details = {"path": path, "wd": str(wd)}
        if reason:
            details["reason"] = reason
        super().__init__("relative path error", details=details)
        self.path = path
        self.wd = wd
