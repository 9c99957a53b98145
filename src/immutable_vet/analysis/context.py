"""Analysis context shared by every package of one invocation.

The context owns the state that outlives a single package:

    type_cache          type string -> Pending | Resolved, memoized verdicts
    tracked_interfaces  type string -> interface reached while classifying types
    seen_named          type string -> named type reached while classifying types

The sets are keyed by type string, like the cache: each facts document
decodes its own type objects, so one Go type can arrive as several objects.
Both sets are only ever added to while packages are walked and are read
once, by the cross-package interface check, after the last package. A new
context is created per ``vet()`` call so the analyzer can run repeatedly
inside one process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from ..config import VetConfig
from ..model.types import Interface, Named
from .verdict import Verdict


@dataclass(frozen=True)
class Pending:
    """A named type whose verdict is being computed.

    Attributes:
        depth: Depth of the type on the classifier's pending stack
    """

    depth: int


@dataclass(frozen=True)
class Resolved:
    verdict: Verdict


CacheEntry = Union[Pending, Resolved]


@dataclass
class AnalysisContext:
    config: VetConfig
    type_cache: dict[str, CacheEntry] = field(default_factory=dict)
    tracked_interfaces: dict[str, Interface] = field(default_factory=dict)
    seen_named: dict[str, Named] = field(default_factory=dict)

    @classmethod
    def create(cls, config: VetConfig) -> AnalysisContext:
        """New context with the configured allowlist pre-seeded as immutable."""
        ctx = cls(config=config)
        for type_string in config.immutable_types:
            ctx.type_cache[type_string] = Resolved(Verdict.IMMUTABLE)
        return ctx

    def track_interface(self, iface: Interface) -> None:
        self.tracked_interfaces.setdefault(str(iface), iface)

    def see_named(self, named: Named) -> None:
        self.seen_named.setdefault(str(named), named)
