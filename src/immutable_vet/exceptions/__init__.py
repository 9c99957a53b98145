"""Exception hierarchy for immutable-vet."""

from .analysis import (
    FactsError,
    FileAccessError,
    PackageResolutionError,
    PathError,
    ToolFault,
    TypeCheckError,
    UnsupportedTypeError,
)
from .base import ImmutableVetError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError

__all__ = [
    "ImmutableVetError",
    "ToolFault",
    "PackageResolutionError",
    "TypeCheckError",
    "FactsError",
    "UnsupportedTypeError",
    "FileAccessError",
    "PathError",
    "ConfigurationError",
    "InvalidConfigError",
    "ConfigFileError",
]
