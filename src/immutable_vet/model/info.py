"""Type checker results for one package.

Mirrors what a type checker records while checking a package:

    types       expression node -> TypeAndValue (its type, and whether the
                expression denotes a type or a value)
    selections  selector node   -> Selection (field or method, receiver type)
    defs        type spec node  -> declared type
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .syntax import File, Node, SelectorExpr, TypeSpec
from .types import ResolvedType


class ExprMode(Enum):
    """What an expression denotes."""

    TYPE = "type"
    VALUE = "value"
    CONSTANT = "constant"
    VARIABLE = "variable"
    BUILTIN = "builtin"
    NOVALUE = "novalue"


class SelectionKind(Enum):
    FIELD_VAL = "field"
    METHOD_VAL = "method"
    METHOD_EXPR = "method_expr"


@dataclass(frozen=True)
class TypeAndValue:
    type: ResolvedType
    mode: ExprMode = ExprMode.VALUE

    @property
    def is_type(self) -> bool:
        return self.mode is ExprMode.TYPE


@dataclass(frozen=True)
class Selection:
    """A resolved ``x.f`` selection.

    Attributes:
        kind: Field value, method value or method expression
        recv: Type of ``x``
        name: Name of the selected field or method
    """

    kind: SelectionKind
    recv: ResolvedType
    name: str

    @property
    def is_field(self) -> bool:
        return self.kind is SelectionKind.FIELD_VAL

    @property
    def is_method_value(self) -> bool:
        return self.kind is SelectionKind.METHOD_VAL


@dataclass
class TypeInfo:
    types: dict[Node, TypeAndValue] = field(default_factory=dict)
    selections: dict[SelectorExpr, Selection] = field(default_factory=dict)
    defs: dict[TypeSpec, ResolvedType] = field(default_factory=dict)

    def type_of(self, node: Node | None) -> ResolvedType | None:
        """Type recorded for ``node``, None when the node is absent or untyped."""
        if node is None:
            return None
        tv = self.types.get(node)
        return tv.type if tv is not None else None


@dataclass
class Package:
    """One type-checked compilation unit.

    Attributes:
        import_path: Import path of the package
        name: Package clause name
        dir: Directory holding the sources
        files: Parsed files in the order the type checker saw them
        info: Type checker results
    """

    import_path: str
    name: str
    dir: str
    files: list[File] = field(default_factory=list)
    info: TypeInfo = field(default_factory=TypeInfo)
