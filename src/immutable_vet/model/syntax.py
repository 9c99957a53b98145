"""Syntax tree model.

The node kinds form a closed set (``NodeKind``). Only the kinds the rules
inspect get their own class; every other construct of the source language
(function declarations, blocks, assignments, star expressions, literals, ...)
is an ``Other`` node that only contributes children to the traversal.

Nodes compare and hash by identity so they can key the type checker's
per-expression tables, the same way the checker keys them by node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, Iterator, Optional

from .position import Position


class NodeKind(Enum):
    """Closed set of syntax node kinds."""

    FILE = "File"
    TYPE_SPEC = "TypeSpec"
    VALUE_SPEC = "ValueSpec"
    FIELD = "Field"
    ARRAY_TYPE = "ArrayType"
    MAP_TYPE = "MapType"
    UNARY_EXPR = "UnaryExpr"
    COMPOSITE_LIT = "CompositeLit"
    SELECTOR_EXPR = "SelectorExpr"
    RANGE_STMT = "RangeStmt"
    CALL_EXPR = "CallExpr"
    IDENT = "Ident"
    OTHER = "Other"


@dataclass(eq=False)
class Node:
    """Base class of all syntax nodes.

    Attributes:
        pos: Position of the first character of the node
    """

    kind: ClassVar[NodeKind]

    pos: Position

    def children(self) -> Iterator[Node]:
        """Direct children in source order."""
        return iter(())


def _present(*nodes: Optional[Node]) -> Iterator[Node]:
    for n in nodes:
        if n is not None:
            yield n


@dataclass(eq=False)
class Ident(Node):
    kind: ClassVar[NodeKind] = NodeKind.IDENT

    name: str = ""


@dataclass(eq=False)
class File(Node):
    """A source file.

    Attributes:
        path: Absolute path of the file
        package: Package clause name
        decls: Top-level declarations
    """

    kind: ClassVar[NodeKind] = NodeKind.FILE

    path: str = ""
    package: str = ""
    decls: list[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        return iter(self.decls)


@dataclass(eq=False)
class TypeSpec(Node):
    """``type Name Type`` (or an alias when ``is_alias`` is set)."""

    kind: ClassVar[NodeKind] = NodeKind.TYPE_SPEC

    name: Ident = None  # type: ignore[assignment]
    type: Node = None  # type: ignore[assignment]
    is_alias: bool = False

    def children(self) -> Iterator[Node]:
        return _present(self.name, self.type)


@dataclass(eq=False)
class ValueSpec(Node):
    """``var``/``const`` spec; ``type`` is None when the type is inferred."""

    kind: ClassVar[NodeKind] = NodeKind.VALUE_SPEC

    names: list[Ident] = field(default_factory=list)
    type: Optional[Node] = None
    values: list[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield from self.names
        yield from _present(self.type)
        yield from self.values


@dataclass(eq=False)
class Field(Node):
    """A struct field, interface method, parameter, result or receiver."""

    kind: ClassVar[NodeKind] = NodeKind.FIELD

    names: list[Ident] = field(default_factory=list)
    type: Node = None  # type: ignore[assignment]

    def children(self) -> Iterator[Node]:
        yield from self.names
        yield from _present(self.type)


@dataclass(eq=False)
class ArrayType(Node):
    """``[]Elt`` (length None) or ``[N]Elt``."""

    kind: ClassVar[NodeKind] = NodeKind.ARRAY_TYPE

    elt: Node = None  # type: ignore[assignment]
    length: Optional[Node] = None

    def children(self) -> Iterator[Node]:
        return _present(self.length, self.elt)


@dataclass(eq=False)
class MapType(Node):
    kind: ClassVar[NodeKind] = NodeKind.MAP_TYPE

    key: Node = None  # type: ignore[assignment]
    value: Node = None  # type: ignore[assignment]

    def children(self) -> Iterator[Node]:
        return _present(self.key, self.value)


@dataclass(eq=False)
class UnaryExpr(Node):
    kind: ClassVar[NodeKind] = NodeKind.UNARY_EXPR

    op: str = ""
    x: Node = None  # type: ignore[assignment]

    def children(self) -> Iterator[Node]:
        return _present(self.x)


@dataclass(eq=False)
class CompositeLit(Node):
    """``Type{elts}``; ``type`` is None when elided inside an outer literal."""

    kind: ClassVar[NodeKind] = NodeKind.COMPOSITE_LIT

    type: Optional[Node] = None
    elts: list[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield from _present(self.type)
        yield from self.elts


@dataclass(eq=False)
class SelectorExpr(Node):
    """``X.Sel``; ``pos`` is the position of X."""

    kind: ClassVar[NodeKind] = NodeKind.SELECTOR_EXPR

    x: Node = None  # type: ignore[assignment]
    sel: Ident = None  # type: ignore[assignment]

    def children(self) -> Iterator[Node]:
        return _present(self.x, self.sel)


@dataclass(eq=False)
class RangeStmt(Node):
    """``for key, value := range X { body }``."""

    kind: ClassVar[NodeKind] = NodeKind.RANGE_STMT

    key: Optional[Node] = None
    value: Optional[Node] = None
    x: Node = None  # type: ignore[assignment]
    body: list[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        yield from _present(self.key, self.value, self.x)
        yield from self.body


@dataclass(eq=False)
class CallExpr(Node):
    """``Fun(args)``; ``has_ellipsis`` marks a spread final argument (``f(xs...)``)."""

    kind: ClassVar[NodeKind] = NodeKind.CALL_EXPR

    fun: Node = None  # type: ignore[assignment]
    args: list[Node] = field(default_factory=list)
    has_ellipsis: bool = False

    def children(self) -> Iterator[Node]:
        yield from _present(self.fun)
        yield from self.args


@dataclass(eq=False)
class Other(Node):
    """Any construct the rules do not inspect directly.

    Attributes:
        name: Syntax kind as reported by the parser (e.g. "FuncDecl", "StarExpr")
        nodes: Children in source order
    """

    kind: ClassVar[NodeKind] = NodeKind.OTHER

    name: str = ""
    nodes: list[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        return iter(self.nodes)


def walk(visit: Callable[[Node], bool], node: Node) -> None:
    """Depth-first, parent-before-children traversal.

    ``visit`` returns False to skip the children of a node.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if not visit(current):
            continue
        stack.extend(reversed(list(current.children())))


def inspect(node: Node) -> Iterator[Node]:
    """Every node below and including ``node``, in traversal order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.children())))
