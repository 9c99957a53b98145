"""Resolved type model.

Types are produced by the external type checker and decoded from the
package facts document. They are used as classification keys and for
structural inspection only:

    Named      -> underlying type, declared methods
    Struct     -> ordered fields with types and positions
    Pointer    -> pointee
    Slice/Map  -> element / key and value
    Interface  -> method set

Type objects compare by identity, like the checker's own type handles; the
Go-style type string returned by ``str()`` is what the classifier memoizes on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional

from .position import Position


class TypeKind(Enum):
    """Every type shape the type checker can hand us."""

    BASIC = "basic"
    NAMED = "named"
    POINTER = "pointer"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    CHAN = "chan"
    STRUCT = "struct"
    INTERFACE = "interface"
    SIGNATURE = "signature"


@dataclass(frozen=True)
class Method:
    """A method of a named type or interface.

    Attributes:
        name: Method name
        signature: Signature string without receiver, e.g. "func(i int) bool"
        pointer_receiver: True if declared on the pointer receiver
    """

    name: str
    signature: str
    pointer_receiver: bool = False

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the method for structural interface satisfaction."""
        return (self.name, self.signature)


@dataclass(eq=False)
class ResolvedType:
    """Base class of all resolved types."""

    kind: ClassVar[TypeKind]

    def __str__(self) -> str:  # pragma: no cover - every subclass overrides
        raise NotImplementedError


@dataclass(eq=False)
class Basic(ResolvedType):
    """A predeclared basic type (int, string, bool, ...)."""

    kind: ClassVar[TypeKind] = TypeKind.BASIC

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class Named(ResolvedType):
    """A declared type.

    Attributes:
        pkg: Import path of the declaring package ("" for universe types like error)
        name: Type name
        underlying: Underlying type, linked after decoding so cycles are possible
        pos: Position of the type name in its declaration
        methods: Full method set, value and pointer receivers
    """

    kind: ClassVar[TypeKind] = TypeKind.NAMED

    pkg: str
    name: str
    underlying: Optional[ResolvedType] = None
    pos: Optional[Position] = None
    methods: list[Method] = field(default_factory=list)

    def __str__(self) -> str:
        if self.pkg:
            return f"{self.pkg}.{self.name}"
        return self.name

    def method(self, name: str) -> Optional[Method]:
        for m in self.methods:
            if m.name == name:
                return m
        return None


@dataclass(eq=False)
class Pointer(ResolvedType):
    kind: ClassVar[TypeKind] = TypeKind.POINTER

    elem: ResolvedType

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(eq=False)
class Slice(ResolvedType):
    kind: ClassVar[TypeKind] = TypeKind.SLICE

    elem: ResolvedType

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass(eq=False)
class Array(ResolvedType):
    kind: ClassVar[TypeKind] = TypeKind.ARRAY

    elem: ResolvedType
    length: int

    def __str__(self) -> str:
        return f"[{self.length}]{self.elem}"


@dataclass(eq=False)
class Map(ResolvedType):
    kind: ClassVar[TypeKind] = TypeKind.MAP

    key: ResolvedType
    elem: ResolvedType

    def __str__(self) -> str:
        return f"map[{self.key}]{self.elem}"


@dataclass(eq=False)
class Chan(ResolvedType):
    """A channel type; direction is "both", "send" or "recv"."""

    kind: ClassVar[TypeKind] = TypeKind.CHAN

    elem: ResolvedType
    direction: str = "both"

    def __str__(self) -> str:
        if self.direction == "send":
            return f"chan<- {self.elem}"
        if self.direction == "recv":
            return f"<-chan {self.elem}"
        return f"chan {self.elem}"


@dataclass(eq=False)
class Var:
    """A struct field.

    Attributes:
        name: Field name (the type name for embedded fields)
        type: Field type
        pos: Position of the field in its declaration
        embedded: True for an embedded field
    """

    name: str
    type: ResolvedType
    pos: Optional[Position] = None
    embedded: bool = False


@dataclass(eq=False)
class Struct(ResolvedType):
    kind: ClassVar[TypeKind] = TypeKind.STRUCT

    fields: list[Var] = field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        for f in self.fields:
            parts.append(str(f.type) if f.embedded else f"{f.name} {f.type}")
        return "struct{" + "; ".join(parts) + "}"

    def field_named(self, name: str) -> Optional[Var]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(eq=False)
class Interface(ResolvedType):
    """An interface type with its complete (embedded interfaces expanded) method set."""

    kind: ClassVar[TypeKind] = TypeKind.INTERFACE

    methods: list[Method] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [m.name + m.signature.removeprefix("func") for m in self.methods]
        return "interface{" + "; ".join(parts) + "}"


@dataclass(eq=False)
class Signature(ResolvedType):
    """A function type, kept as its rendered signature."""

    kind: ClassVar[TypeKind] = TypeKind.SIGNATURE

    text: str = "func()"

    def __str__(self) -> str:
        return self.text


def deref(t: ResolvedType) -> ResolvedType:
    """Strip every level of pointer indirection."""
    while isinstance(t, Pointer):
        t = t.elem
    return t


def underlying(t: ResolvedType) -> Optional[ResolvedType]:
    """Underlying type of ``t``; unlinked named types yield None."""
    while isinstance(t, Named):
        if t.underlying is None:
            return None
        t = t.underlying
    return t
