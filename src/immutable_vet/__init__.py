"""
immutable-vet - static checks for the immutableGen immutability convention

Go code that simulates immutable lists, maps and structs through generated
wrapper types is only safe while nobody bypasses the wrappers. The vetter
walks type-checked packages and reports every place that does: direct
construction, value storage, raw field access, template leakage, misuse of
the once-only Range() handle, mutable template fields and mutable
implementations of tracked interfaces.
"""

__version__ = "0.1.0"

from .analysis import Verdict, Violation, vet, vet_packages
from .config import VetConfig, load_config

__all__ = [
    "vet",  # Main entry point
    "vet_packages",  # Already loaded packages
    "Violation",
    "Verdict",
    "VetConfig",
    "load_config",
]
