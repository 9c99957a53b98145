"""Cross-package interface check.

An interface reached while classifying a type (typically the type of a field
of an immutable template) is an immutability contract: whatever value the
field holds must itself be immutable. Once every package has been walked,
each named type seen during the run that satisfies a tracked interface,
by value or through its pointer, must classify as immutable.
"""

from __future__ import annotations

from typing import Iterable

from ..logging_config import get_logger
from ..model.position import NO_POS
from ..model.types import Interface, Method, Named, Pointer, ResolvedType
from .classifier import TypeClassifier
from .diagnostics import Violation

logger = get_logger(__name__)


def method_set(t: ResolvedType) -> set[tuple[str, str]]:
    """Method set of ``t`` as (name, signature) pairs.

    A named type has its value-receiver methods (all methods of its
    underlying interface when it names one); a pointer to a named type
    has every method of that type.
    """
    if isinstance(t, Pointer):
        if isinstance(t.elem, Named):
            return {m.key for m in t.elem.methods}
        return set()
    if isinstance(t, Named):
        if isinstance(t.underlying, Interface):
            return {m.key for m in t.underlying.methods}
        return {m.key for m in t.methods if not m.pointer_receiver}
    if isinstance(t, Interface):
        return {m.key for m in t.methods}
    return set()


def implements(t: ResolvedType, iface: Interface) -> bool:
    """True if ``t`` has every method of ``iface`` with an identical signature."""
    required: Iterable[Method] = iface.methods
    have = method_set(t)
    return all(m.key in have for m in required)


def check_interfaces(
    classifier: TypeClassifier,
    interfaces: Iterable[Interface],
    named_types: Iterable[Named],
) -> list[Violation]:
    """Violations for seen named types that implement a tracked interface but are mutable.

    Classifying a type can reach further interfaces and named types; the
    inputs are snapshotted so that the check runs over what the walks
    collected. Inputs are deduplicated by type string.
    """
    interfaces = list({str(i): i for i in interfaces}.values())
    named_types = list({str(n): n for n in named_types}.values())
    logger.debug(
        f"checking {len(named_types)} named types against {len(interfaces)} tracked interfaces"
    )

    violations: list[Violation] = []
    for iface in interfaces:
        for named in named_types:
            if isinstance(named.underlying, Interface):
                continue
            pos = named.pos or NO_POS

            if implements(named, iface) and not classifier.is_immutable(named):
                violations.append(
                    Violation(pos, f"type {named} which implements {iface} is not immutable")
                )
                continue

            ptr = Pointer(named)
            if implements(ptr, iface) and not classifier.is_immutable(ptr):
                violations.append(
                    Violation(pos, f"type {ptr} which implements {iface} is not immutable")
                )
    return violations
