"""Package facts documents.

The type checker is an external collaborator. It hands over each package it
checked as a JSON document:

    {
      "import_path": "example.com/shapes",
      "dir": "/src/shapes",
      "packages": [{
        "name": "shapes",
        "types": {"t1": {"kind": "named", "pkg": "example.com/shapes", ...}, ...},
        "files": [{"kind": "File", "path": "shapes.go", "decls": [...]}, ...]
      }]
    }

``types`` is a table of type shapes referenced by id, so recursive types are
expressible. ``files`` holds the syntax trees; expression nodes carry their
resolved type under ``tv`` and selector nodes their ``selection``; type
specs carry the declared type under ``def``. Node positions are ``[line,
column]`` pairs within the enclosing file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from ..exceptions import FactsError
from ..logging_config import get_logger
from ..model.info import ExprMode, Package, Selection, SelectionKind, TypeAndValue, TypeInfo
from ..model.position import Position
from ..model.syntax import (
    ArrayType,
    CallExpr,
    CompositeLit,
    Field,
    File,
    Ident,
    MapType,
    Node,
    Other,
    RangeStmt,
    SelectorExpr,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)
from ..model.types import (
    Array,
    Basic,
    Chan,
    Interface,
    Map,
    Method,
    Named,
    Pointer,
    ResolvedType,
    Signature,
    Slice,
    Struct,
    Var,
)

logger = get_logger(__name__)


def read_facts_file(path: Path) -> list[Package]:
    """Decode the facts document stored at ``path``."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FactsError(str(path), f"cannot read: {e}")
    return parse_facts(text, str(path), default_dir=str(path.parent))


def parse_facts(text: str, source: str, default_dir: Optional[str] = None) -> list[Package]:
    """Decode a facts document given as JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FactsError(source, f"not valid JSON: {e}")
    return decode_facts(data, source, default_dir=default_dir)


def decode_facts(data: Any, source: str, default_dir: Optional[str] = None) -> list[Package]:
    """Decode an already parsed facts document into packages."""
    if not isinstance(data, dict):
        raise FactsError(source, "document must be a JSON object")

    try:
        import_path = data["import_path"]
        pkg_dir = data.get("dir") or default_dir or os.getcwd()
        packages = [
            _PackageDecoder(source, import_path, pkg_dir, raw).decode()
            for raw in data["packages"]
        ]
    except FactsError:
        raise
    except (KeyError, TypeError, ValueError, IndexError) as e:
        raise FactsError(source, f"{e.__class__.__name__}: {e}")

    logger.debug(f"{source}: decoded {len(packages)} package(s) for {import_path}")
    return packages


class _PackageDecoder:
    """Decodes one entry of the ``packages`` list."""

    def __init__(self, source: str, import_path: str, pkg_dir: str, raw: dict[str, Any]):
        self.source = source
        self.import_path = import_path
        self.dir = pkg_dir
        self.raw = raw
        self.raw_types: dict[str, Any] = raw.get("types", {})
        self.types: dict[str, ResolvedType] = {}
        self.info = TypeInfo()
        self.filename = ""

    def decode(self) -> Package:
        files = [self._file(f) for f in self.raw.get("files", [])]
        return Package(
            import_path=self.import_path,
            name=self.raw["name"],
            dir=self.dir,
            files=files,
            info=self.info,
        )

    # -- types --

    def type(self, type_id: str) -> ResolvedType:
        if type_id in self.types:
            return self.types[type_id]
        if type_id not in self.raw_types:
            raise FactsError(self.source, f"unknown type id {type_id!r}")

        raw = self.raw_types[type_id]
        kind = raw["kind"]

        # Composite types are registered before their parts are decoded so
        # that recursive references resolve to the same object.
        if kind == "named":
            named = Named(
                pkg=raw.get("pkg", ""),
                name=raw["name"],
                pos=self._type_pos(raw.get("pos")),
                methods=[self._method(m) for m in raw.get("methods", [])],
            )
            self.types[type_id] = named
            named.underlying = self.type(raw["underlying"])
            return named
        if kind == "struct":
            st = Struct()
            self.types[type_id] = st
            st.fields = [self._var(f) for f in raw.get("fields", [])]
            return st
        if kind == "interface":
            iface = Interface(methods=[self._method(m) for m in raw.get("methods", [])])
            self.types[type_id] = iface
            return iface

        t: ResolvedType
        if kind == "basic":
            t = Basic(raw["name"])
        elif kind == "pointer":
            t = Pointer(self.type(raw["elem"]))
        elif kind == "slice":
            t = Slice(self.type(raw["elem"]))
        elif kind == "array":
            t = Array(self.type(raw["elem"]), int(raw["len"]))
        elif kind == "map":
            t = Map(self.type(raw["key"]), self.type(raw["elem"]))
        elif kind == "chan":
            t = Chan(self.type(raw["elem"]), raw.get("dir", "both"))
        elif kind == "signature":
            t = Signature(raw.get("repr", "func()"))
        else:
            raise FactsError(self.source, f"unknown type kind {kind!r} for {type_id!r}")
        self.types[type_id] = t
        return t

    def _method(self, raw: dict[str, Any]) -> Method:
        return Method(
            name=raw["name"],
            signature=raw.get("signature", "func()"),
            pointer_receiver=bool(raw.get("pointer", False)),
        )

    def _var(self, raw: dict[str, Any]) -> Var:
        return Var(
            name=raw["name"],
            type=self.type(raw["type"]),
            pos=self._type_pos(raw.get("pos")),
            embedded=bool(raw.get("embedded", False)),
        )

    def _type_pos(self, raw: Optional[dict[str, Any]]) -> Optional[Position]:
        if not raw:
            return None
        return Position(self._abs(raw["file"]), int(raw["line"]), int(raw["column"]))

    def _abs(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.normpath(os.path.join(self.dir, path))

    # -- syntax --

    def _file(self, raw: dict[str, Any]) -> File:
        if raw.get("kind", "File") != "File":
            raise FactsError(self.source, f"expected a File node, got {raw.get('kind')!r}")
        self.filename = self._abs(raw["path"])
        return File(
            pos=self._pos(raw),
            path=self.filename,
            package=raw.get("package", self.raw["name"]),
            decls=self._nodes(raw.get("decls")),
        )

    def _pos(self, raw: dict[str, Any]) -> Position:
        line, column = raw.get("pos", (1, 1))
        return Position(self.filename, int(line), int(column))

    def _nodes(self, raw: Optional[list[Any]]) -> list[Node]:
        return [self.node(r) for r in raw or []]

    def _opt(self, raw: Optional[dict[str, Any]]) -> Optional[Node]:
        return self.node(raw) if raw else None

    def _ident(self, raw: dict[str, Any]) -> Ident:
        node = self.node(raw)
        if not isinstance(node, Ident):
            raise FactsError(self.source, f"expected an Ident at {node.pos}")
        return node

    def node(self, raw: dict[str, Any]) -> Node:
        kind = raw["kind"]
        pos = self._pos(raw)

        node: Node
        if kind == "Ident":
            node = Ident(pos, name=raw["name"])
        elif kind == "TypeSpec":
            node = TypeSpec(
                pos,
                name=self._ident(raw["name"]),
                type=self.node(raw["type"]),
                is_alias=bool(raw.get("alias", False)),
            )
            if "def" in raw:
                self.info.defs[node] = self.type(raw["def"])
        elif kind == "ValueSpec":
            node = ValueSpec(
                pos,
                names=[self._ident(n) for n in raw.get("names", [])],
                type=self._opt(raw.get("type")),
                values=self._nodes(raw.get("values")),
            )
        elif kind == "Field":
            node = Field(
                pos,
                names=[self._ident(n) for n in raw.get("names", [])],
                type=self.node(raw["type"]),
            )
        elif kind == "ArrayType":
            node = ArrayType(pos, elt=self.node(raw["elt"]), length=self._opt(raw.get("len")))
        elif kind == "MapType":
            node = MapType(pos, key=self.node(raw["key"]), value=self.node(raw["value"]))
        elif kind == "UnaryExpr":
            node = UnaryExpr(pos, op=raw["op"], x=self.node(raw["x"]))
        elif kind == "CompositeLit":
            node = CompositeLit(pos, type=self._opt(raw.get("type")), elts=self._nodes(raw.get("elts")))
        elif kind == "SelectorExpr":
            node = SelectorExpr(pos, x=self.node(raw["x"]), sel=self._ident(raw["sel"]))
            if "selection" in raw:
                self.info.selections[node] = self._selection(raw["selection"])
        elif kind == "RangeStmt":
            node = RangeStmt(
                pos,
                key=self._opt(raw.get("key")),
                value=self._opt(raw.get("value")),
                x=self.node(raw["x"]),
                body=self._nodes(raw.get("body")),
            )
        elif kind == "CallExpr":
            node = CallExpr(
                pos,
                fun=self.node(raw["fun"]),
                args=self._nodes(raw.get("args")),
                has_ellipsis=bool(raw.get("ellipsis", False)),
            )
        elif kind == "File":
            raise FactsError(self.source, f"nested File node at {pos}")
        else:
            node = Other(pos, name=kind, nodes=self._nodes(raw.get("children")))

        if "tv" in raw:
            tv = raw["tv"]
            self.info.types[node] = TypeAndValue(
                type=self.type(tv["type"]), mode=ExprMode(tv.get("mode", "value"))
            )
        return node

    def _selection(self, raw: dict[str, Any]) -> Selection:
        return Selection(
            kind=SelectionKind(raw["kind"]),
            recv=self.type(raw["recv"]),
            name=raw["name"],
        )
