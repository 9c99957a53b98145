"""Shared test fixtures for immutable-vet tests.

Packages are built in memory with ``GoBuilder``: it hands out types, syntax
nodes and the type checker tables for them, the same shapes the facts
loader produces.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

import pytest

from immutable_vet.analysis import AnalysisContext, TypeClassifier
from immutable_vet.config import DEFAULT_CONFIG, VetConfig
from immutable_vet.model.info import (
    ExprMode,
    Package,
    Selection,
    SelectionKind,
    TypeAndValue,
    TypeInfo,
)
from immutable_vet.model.position import Position
from immutable_vet.model.syntax import (
    CallExpr,
    CompositeLit,
    Field,
    File,
    Ident,
    Node,
    Other,
    RangeStmt,
    SelectorExpr,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)
from immutable_vet.model.types import (
    Basic,
    Map,
    Method,
    Named,
    ResolvedType,
    Slice,
    Struct,
    Var,
)

PKG = "example.com/shapes"
SRC = "/src/shapes"


class StubMarkers:
    """Marker recognizer answering from fixed sets instead of file contents."""

    def __init__(self, skip: Iterable[str] = (), generated: Iterable[str] = ()):
        self.skip = set(skip)
        self.generated = set(generated)

    def template_name(self, spec: TypeSpec) -> Optional[str]:
        name = spec.name.name
        prefix = DEFAULT_CONFIG.template_prefix
        return name[len(prefix):] if name.startswith(prefix) else None

    def is_skip_file(self, path: str) -> bool:
        return path in self.skip

    def is_generated(self, path: str) -> bool:
        return path in self.generated


class GoBuilder:
    """Builds the types, syntax and type info of one package."""

    def __init__(self, pkg: str = PKG, src: str = SRC):
        self.pkg = pkg
        self.src = src
        self.info = TypeInfo()
        self.filename = f"{src}/shapes.go"
        self._line = 1

    # -- positions --

    def pos(self, line: Optional[int] = None, column: int = 2) -> Position:
        if line is None:
            self._line += 1
            line = self._line
        return Position(self.filename, line, column)

    def in_file(self, name: str) -> "GoBuilder":
        """Switch the file later nodes are positioned in."""
        self.filename = f"{self.src}/{name}"
        self._line = 1
        return self

    # -- types --

    def basic(self, name: str = "int") -> Basic:
        return Basic(name)

    def named(
        self,
        name: str,
        underlying: Optional[ResolvedType] = None,
        methods: Iterable[Method] = (),
        line: Optional[int] = None,
    ) -> Named:
        return Named(
            pkg=self.pkg,
            name=name,
            underlying=underlying,
            pos=self.pos(line, column=6),
            methods=list(methods),
        )

    def struct(self, **fields: ResolvedType) -> Struct:
        return Struct([Var(name, t, pos=self.pos(column=2)) for name, t in fields.items()])

    def generated(self, name: str, template_underlying: ResolvedType) -> tuple[Named, Named]:
        """An immutableGen wrapper and its template; returns (wrapper, template)."""
        template = self.named(f"_Imm_{name}", template_underlying)
        methods = [
            Method(m, "func()", pointer_receiver=True) for m in DEFAULT_CONFIG.marker_methods
        ]
        methods.append(Method("Len", "func() int", pointer_receiver=True))
        if isinstance(template_underlying, (Slice, Map)):
            methods.append(Method("Range", "func() []int", pointer_receiver=True))
            methods.append(Method("Append", "func(values ...int)", pointer_receiver=True))
        wrapper = self.named(
            name,
            Struct([Var(DEFAULT_CONFIG.template_field, template)]),
            methods=methods,
        )
        return wrapper, template

    # -- syntax --

    def ident(
        self, name: str, t: Optional[ResolvedType] = None, mode: ExprMode = ExprMode.VALUE
    ) -> Ident:
        node = Ident(self.pos(), name=name)
        if t is not None:
            self.info.types[node] = TypeAndValue(t, mode)
        return node

    def type_expr(self, t: ResolvedType) -> Ident:
        """An identifier denoting the type ``t``."""
        return self.ident(str(t).rsplit(".", 1)[-1], t, ExprMode.TYPE)

    def type_spec(self, name: str, declared: ResolvedType, type_node: Node) -> TypeSpec:
        spec = TypeSpec(self.pos(), name=Ident(self.pos(), name=name), type=type_node)
        self.info.defs[spec] = declared
        return spec

    def var(self, name: str, t: ResolvedType) -> ValueSpec:
        return ValueSpec(self.pos(), names=[Ident(self.pos(), name=name)], type=self.type_expr(t))

    def field(self, name: str, t: ResolvedType) -> Field:
        return Field(self.pos(), names=[Ident(self.pos(), name=name)], type=self.type_expr(t))

    def composite(self, t: ResolvedType) -> CompositeLit:
        lit = CompositeLit(self.pos(), type=self.type_expr(t))
        self.info.types[lit] = TypeAndValue(t)
        return lit

    def address_of(self, lit: CompositeLit) -> UnaryExpr:
        return UnaryExpr(lit.pos, op="&", x=lit)

    def select(
        self, x: Node, name: str, recv: ResolvedType, kind: SelectionKind = SelectionKind.FIELD_VAL
    ) -> SelectorExpr:
        node = SelectorExpr(x.pos, x=x, sel=Ident(self.pos(x.pos.line, x.pos.column + 2), name=name))
        self.info.selections[node] = Selection(kind, recv, name)
        return node

    def method_call(
        self, recv_name: str, recv: ResolvedType, method: str, *args: Node, spread: bool = False
    ) -> CallExpr:
        x = self.ident(recv_name, recv)
        fun = self.select(x, method, recv, SelectionKind.METHOD_VAL)
        return CallExpr(x.pos, fun=fun, args=list(args), has_ellipsis=spread)

    def range_call(self, recv_name: str, recv: ResolvedType) -> CallExpr:
        return self.method_call(recv_name, recv, "Range")

    def append_call(self, target: Node, arg: Node, spread: bool = True) -> CallExpr:
        fun = Ident(self.pos(target.pos.line, 2), name="append")
        self.info.types[fun] = TypeAndValue(Basic("append"), ExprMode.BUILTIN)
        return CallExpr(fun.pos, fun=fun, args=[target, arg], has_ellipsis=spread)

    def range_stmt(self, x: Node, *body: Node) -> RangeStmt:
        return RangeStmt(self.pos(), x=x, body=list(body))

    def func(self, *body: Node) -> Other:
        return Other(self.pos(), name="FuncDecl", nodes=list(body))

    def file(self, *decls: Node) -> File:
        return File(Position(self.filename, 1, 1), path=self.filename, package="shapes", decls=list(decls))

    def package(self, *files: File) -> Package:
        return Package(import_path=self.pkg, name="shapes", dir=self.src, files=list(files), info=self.info)


@pytest.fixture
def go():
    """Builder for one in-memory package."""
    return GoBuilder()


@pytest.fixture
def config():
    return VetConfig()


@pytest.fixture
def context(config):
    return AnalysisContext.create(config)


@pytest.fixture
def classifier(context):
    return TypeClassifier(context)


@pytest.fixture
def markers():
    return StubMarkers()


@pytest.fixture
def make_go():
    """Factory for builders of further packages: ``make_go("example.com/other", "/src/other")``."""
    return GoBuilder


# -- an on-disk package: Go sources plus the facts document for them --

SHAPES_SOURCES = {
    "list.go": """package shapes

type _Imm_MyList []int
""",
    "gen_list_immutableGen.go": """// Code generated by immutableGen. DO NOT EDIT.

package shapes

type MyList struct {
\t__tmpl _Imm_MyList
}
""",
    "use.go": """package shapes

var l MyList

func total(p *MyList) int {
\tr := p.Range()
\tn := 0
\tfor _, v := range p.Range() {
\t\tn += v
\t}
\treturn n + len(r) + len(p.__tmpl)
}
""",
    "skip.go": """//immutableVet:skipFile

package shapes

func peek(p *MyList) int {
\treturn len(p.__tmpl)
}
""",
}

SHAPES_VIOLATIONS = [
    "shapes/use.go:3:5: type should be *example.com/shapes.MyList",
    "shapes/use.go:6:9: Range() of immutable type must appear in a range statement "
    "or be spread as the second argument to append",
    "shapes/use.go:11:26: should not access field __tmpl of immutable type "
    "*example.com/shapes.MyList",
]


def _ident(name: str, line: int, column: int, **extra: Any) -> dict[str, Any]:
    return {"kind": "Ident", "name": name, "pos": [line, column], **extra}


def _range_call(line: int, column: int) -> dict[str, Any]:
    return {
        "kind": "CallExpr",
        "pos": [line, column],
        "fun": {
            "kind": "SelectorExpr",
            "pos": [line, column],
            "x": _ident("p", line, column, tv={"type": "ptr", "mode": "variable"}),
            "sel": _ident("Range", line, column + 2),
            "selection": {"kind": "method", "recv": "ptr", "name": "Range"},
        },
    }


def _field_access(line: int, column: int) -> dict[str, Any]:
    return {
        "kind": "SelectorExpr",
        "pos": [line, column],
        "x": _ident("p", line, column, tv={"type": "ptr", "mode": "variable"}),
        "sel": _ident("__tmpl", line, column + 2),
        "selection": {"kind": "field", "recv": "ptr", "name": "__tmpl"},
    }


def shapes_facts(with_dir: Optional[str] = None) -> dict[str, Any]:
    """Facts document for SHAPES_SOURCES."""
    marker_methods = [
        {"name": m, "signature": "func() *MyList", "pointer": True}
        for m in DEFAULT_CONFIG.marker_methods
    ]
    types = {
        "int": {"kind": "basic", "name": "int"},
        "ints": {"kind": "slice", "elem": "int"},
        "tmpl": {
            "kind": "named",
            "pkg": PKG,
            "name": "_Imm_MyList",
            "underlying": "ints",
            "pos": {"file": "list.go", "line": 3, "column": 6},
        },
        "wrapper": {
            "kind": "struct",
            "fields": [
                {
                    "name": "__tmpl",
                    "type": "tmpl",
                    "pos": {"file": "gen_list_immutableGen.go", "line": 6, "column": 2},
                }
            ],
        },
        "list": {
            "kind": "named",
            "pkg": PKG,
            "name": "MyList",
            "underlying": "wrapper",
            "pos": {"file": "gen_list_immutableGen.go", "line": 5, "column": 6},
            "methods": marker_methods
            + [
                {"name": "Len", "signature": "func() int", "pointer": True},
                {"name": "Range", "signature": "func() []int", "pointer": True},
                {"name": "Append", "signature": "func(values ...int) *MyList", "pointer": True},
            ],
        },
        "ptr": {"kind": "pointer", "elem": "list"},
    }
    files = [
        {
            "kind": "File",
            "path": "list.go",
            "decls": [
                {
                    "kind": "TypeSpec",
                    "pos": [3, 6],
                    "name": _ident("_Imm_MyList", 3, 6),
                    "type": {"kind": "ArrayType", "pos": [3, 18], "elt": _ident("int", 3, 20)},
                    "def": "tmpl",
                }
            ],
        },
        {
            "kind": "File",
            "path": "gen_list_immutableGen.go",
            "decls": [
                {
                    "kind": "TypeSpec",
                    "pos": [5, 6],
                    "name": _ident("MyList", 5, 6),
                    "type": {
                        "kind": "StructType",
                        "pos": [5, 13],
                        "children": [
                            {
                                "kind": "Field",
                                "pos": [6, 2],
                                "names": [_ident("__tmpl", 6, 2)],
                                "type": _ident("_Imm_MyList", 6, 9, tv={"type": "tmpl", "mode": "type"}),
                            }
                        ],
                    },
                    "def": "list",
                }
            ],
        },
        {
            "kind": "File",
            "path": "use.go",
            "decls": [
                {
                    "kind": "ValueSpec",
                    "pos": [3, 5],
                    "names": [_ident("l", 3, 5)],
                    "type": _ident("MyList", 3, 7, tv={"type": "list", "mode": "type"}),
                },
                {
                    "kind": "FuncDecl",
                    "pos": [5, 1],
                    "children": [
                        {"kind": "AssignStmt", "pos": [6, 2], "children": [_ident("r", 6, 2), _range_call(6, 7)]},
                        {"kind": "RangeStmt", "pos": [8, 2], "x": _range_call(8, 20), "body": []},
                        {"kind": "ReturnStmt", "pos": [11, 2], "children": [_field_access(11, 26)]},
                    ],
                },
            ],
        },
        {
            "kind": "File",
            "path": "skip.go",
            "decls": [
                {
                    "kind": "FuncDecl",
                    "pos": [5, 1],
                    "children": [
                        {"kind": "ReturnStmt", "pos": [6, 2], "children": [_field_access(6, 13)]},
                    ],
                }
            ],
        },
    ]
    doc: dict[str, Any] = {
        "import_path": PKG,
        "packages": [{"name": "shapes", "types": types, "files": files}],
    }
    if with_dir is not None:
        doc["dir"] = with_dir
    return doc


@pytest.fixture
def shapes_project(tmp_path) -> Path:
    """``<tmp>/shapes``: Go sources and the facts file the loader looks for."""
    pkg_dir = tmp_path / "shapes"
    pkg_dir.mkdir()
    for name, text in SHAPES_SOURCES.items():
        (pkg_dir / name).write_text(text)
    (pkg_dir / DEFAULT_CONFIG.facts_filename).write_text(json.dumps(shapes_facts()))
    return pkg_dir


@pytest.fixture
def shapes_violations() -> list[str]:
    return list(SHAPES_VIOLATIONS)
