"""Type classifier: resolved type -> immutability verdict.

Rules:
    basic          immutable
    interface      immutable (the interface becomes tracked, see interfaces.py)
    slice, map     not immutable
    signature      not immutable
    pointer        template verdict if it points to a generated immutable
                   type, otherwise not immutable
    struct         immutable iff every field is immutable
    named          verdict of the underlying type
    anything else  UnsupportedTypeError

Named types are memoized in two phases. Before recursing into the underlying
type the name is recorded as Pending; a Pending name met again during that
recursion is immutable. This is the intended tie-break for self-referential
types and is what guarantees termination.

A NOT_IMMUTABLE verdict never depends on that tie-break and is stored at
once. An IMMUTABLE verdict that relied on the pending entry of an enclosing
name is not stored: the entry is dropped and the type is derived again on
its next lookup, when the enclosing name has been resolved. Stored verdicts
are therefore the same whichever type of a cycle is classified first.
"""

from __future__ import annotations

import sys
from typing import Optional

from ..exceptions import UnsupportedTypeError
from ..logging_config import get_logger
from ..model.types import (
    Basic,
    Interface,
    Map,
    Named,
    Pointer,
    ResolvedType,
    Signature,
    Slice,
    Struct,
    underlying,
)
from .context import AnalysisContext, Pending, Resolved
from .verdict import Verdict

logger = get_logger(__name__)

# Depth reported by a verdict that relied on no pending name
_NO_PENDING = sys.maxsize


class TypeClassifier:
    """Classifies types against the context's shared cache."""

    def __init__(self, context: AnalysisContext):
        self.context = context
        self.config = context.config
        self._depth = 0

    def classify(self, t: ResolvedType) -> Verdict:
        verdict, _ = self._classify(t)
        return verdict

    def is_immutable(self, t: ResolvedType) -> bool:
        return self.classify(t).is_immutable

    def immutable_kind(self, t: Optional[ResolvedType]) -> Optional[Verdict]:
        """Template verdict of ``t`` if it is a pointer to a generated immutable type.

        A generated type is a named struct whose pointer method set has all
        the marker methods and which embeds its template in the template
        field; the template's underlying shape gives the flavor.
        """
        if not isinstance(t, Pointer) or not isinstance(t.elem, Named):
            return None

        named = t.elem
        st = named.underlying
        if not isinstance(st, Struct):
            return None

        if any(named.method(m) is None for m in self.config.marker_methods):
            return None

        tmpl = st.field_named(self.config.template_field)
        if tmpl is None:
            return None

        shape = underlying(tmpl.type)
        if isinstance(shape, Slice):
            return Verdict.TEMPLATE_LIST
        if isinstance(shape, Map):
            return Verdict.TEMPLATE_MAP
        if isinstance(shape, Struct):
            return Verdict.TEMPLATE_STRUCT
        return None

    def is_list_or_map(self, t: Optional[ResolvedType]) -> bool:
        kind = self.immutable_kind(t)
        return kind is not None and kind.is_list_or_map

    def _classify(self, t: ResolvedType) -> tuple[Verdict, int]:
        """Verdict of ``t`` and the lowest pending depth it relied on."""
        key = str(t)
        entry = self.context.type_cache.get(key)
        if isinstance(entry, Resolved):
            return entry.verdict, _NO_PENDING
        if isinstance(entry, Pending):
            return Verdict.IMMUTABLE, entry.depth

        if isinstance(t, Named):
            return self._classify_named(t, key)
        if isinstance(t, (Basic, Interface)):
            if isinstance(t, Interface):
                self.context.track_interface(t)
            return Verdict.IMMUTABLE, _NO_PENDING
        if isinstance(t, (Map, Slice, Signature)):
            return Verdict.NOT_IMMUTABLE, _NO_PENDING
        if isinstance(t, Pointer):
            return self.immutable_kind(t) or Verdict.NOT_IMMUTABLE, _NO_PENDING
        if isinstance(t, Struct):
            lowest = _NO_PENDING
            for f in t.fields:
                verdict, low = self._classify(f.type)
                if not verdict.is_immutable:
                    return Verdict.NOT_IMMUTABLE, _NO_PENDING
                lowest = min(lowest, low)
            return Verdict.IMMUTABLE, lowest

        raise UnsupportedTypeError(t.kind.value, key)

    def _classify_named(self, t: Named, key: str) -> tuple[Verdict, int]:
        self.context.see_named(t)
        if t.underlying is None:
            raise UnsupportedTypeError("named type without underlying type", key)

        depth = self._depth
        self.context.type_cache[key] = Pending(depth)
        self._depth += 1
        try:
            verdict, low = self._classify(t.underlying)
        except UnsupportedTypeError:
            del self.context.type_cache[key]
            raise
        finally:
            self._depth -= 1

        if verdict is Verdict.NOT_IMMUTABLE or low >= depth:
            self.context.type_cache[key] = Resolved(verdict)
            logger.debug(f"classified {key}: {verdict.value}")
            return verdict, _NO_PENDING

        # Relied on an enclosing pending name: re-derive on next lookup
        del self.context.type_cache[key]
        return verdict, low
