"""Syntax, type and type-checker models consumed by the analysis."""

from .info import ExprMode, Package, Selection, SelectionKind, TypeAndValue, TypeInfo
from .position import NO_POS, Position
from .syntax import NodeKind
from .types import ResolvedType, TypeKind

__all__ = [
    "ExprMode",
    "NO_POS",
    "NodeKind",
    "Package",
    "Position",
    "ResolvedType",
    "Selection",
    "SelectionKind",
    "TypeAndValue",
    "TypeInfo",
    "TypeKind",
]
