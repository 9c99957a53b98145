"""Rule engine: one walk over every file of a package.

Rules checked while walking:

    pointer form       a declared type whose pointer is a generated immutable
                       type must be written as the pointer
    construction       &T{...} of a generated immutable type
    composite literal  T{...} of a generated immutable type
    field access       x.f where x is a generated immutable type, unless the
                       file carries the skip-file marker
    once-only Range    x.Range() on an immutable list or map must be the
                       subject of a range statement or be spread into append
                       or into the receiver's Append method

and once the walk is over:

    template leakage   a template type used outside generated files
    unconsumed Range   Range() handles no sanctioned pattern consumed

Parents are visited before their children, so the range statement or append
call that consumes a Range() handle is always seen before the handle itself,
and a &T{...} expression before its literal.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..config import VetConfig
from ..frontend.markers import MarkerRecognizer
from ..logging_config import get_logger
from ..model.info import ExprMode, Package, Selection
from ..model.syntax import (
    ArrayType,
    CallExpr,
    CompositeLit,
    Field,
    File,
    Ident,
    MapType,
    Node,
    NodeKind,
    RangeStmt,
    SelectorExpr,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
    walk,
)
from ..model.types import Pointer, ResolvedType
from .classifier import TypeClassifier
from .diagnostics import DiagnosticCollector
from .registry import TemplateRegistry
from .verdict import Verdict

logger = get_logger(__name__)

RANGE_MESSAGE = (
    "Range() of immutable type must appear in a range statement or be spread "
    "as the second argument to append"
)


class RuleEngine:
    """Walks one package and reports every rule violation it finds.

    Attributes:
        skip_files: Files carrying the skip-file marker; shared by the
            packages of one vetted directory
        ranges: Range() identifier -> whether a sanctioned pattern consumed it
        handled_literals: Literals already reported by the construction rule
    """

    def __init__(
        self,
        package: Package,
        classifier: TypeClassifier,
        registry: TemplateRegistry,
        markers: MarkerRecognizer,
        diagnostics: DiagnosticCollector,
        skip_files: Optional[set[str]] = None,
    ):
        self.package = package
        self.info = package.info
        self.classifier = classifier
        self.config: VetConfig = classifier.config
        self.registry = registry
        self.markers = markers
        self.diagnostics = diagnostics
        self.skip_files = skip_files if skip_files is not None else set()
        self.ranges: dict[Ident, bool] = {}
        self.handled_literals: set[CompositeLit] = set()
        self._file: Optional[File] = None

        self._handlers: dict[NodeKind, Callable[..., None]] = {
            NodeKind.FILE: self._visit_file,
            NodeKind.TYPE_SPEC: self._visit_type_spec,
            NodeKind.VALUE_SPEC: self._visit_value_spec,
            NodeKind.FIELD: self._visit_field,
            NodeKind.ARRAY_TYPE: self._visit_array_type,
            NodeKind.MAP_TYPE: self._visit_map_type,
            NodeKind.UNARY_EXPR: self._visit_unary_expr,
            NodeKind.COMPOSITE_LIT: self._visit_composite_lit,
            NodeKind.SELECTOR_EXPR: self._visit_selector_expr,
            NodeKind.RANGE_STMT: self._visit_range_stmt,
            NodeKind.CALL_EXPR: self._visit_call_expr,
            NodeKind.IDENT: _no_rule,
            NodeKind.OTHER: _no_rule,
        }
        missing = [k.value for k in NodeKind if k not in self._handlers]
        if missing:
            raise TypeError(f"RuleEngine has no handler for node kinds: {', '.join(missing)}")

    def run(self) -> None:
        for f in self.package.files:
            walk(self._visit, f)
        self._check_template_leakage()
        self._check_ranges()

    def _visit(self, node: Node) -> bool:
        self._handlers[node.kind](node)
        return True

    # -- per node kind --

    def _visit_file(self, node: File) -> None:
        self._file = node
        if self.markers.is_skip_file(node.path):
            logger.debug(f"{node.path} opts out of field access checks")
            self.skip_files.add(node.path)

    def _visit_type_spec(self, node: TypeSpec) -> None:
        self._ensure_pointer_type(node, node.type)

    def _visit_value_spec(self, node: ValueSpec) -> None:
        self._ensure_pointer_type(node, node.type)

    def _visit_field(self, node: Field) -> None:
        self._ensure_pointer_type(node, node.type)

    def _visit_array_type(self, node: ArrayType) -> None:
        self._ensure_pointer_type(node, node.elt)

    def _visit_map_type(self, node: MapType) -> None:
        self._ensure_pointer_type(node, node.key)
        self._ensure_pointer_type(node, node.value)

    def _visit_unary_expr(self, node: UnaryExpr) -> None:
        if node.op != "&" or not isinstance(node.x, CompositeLit):
            return
        lit = node.x
        if self._pointer_kind(self.info.type_of(lit.type)) is None:
            return
        self.diagnostics.errorf(node.pos, "construct using new() or generated constructors")
        self.handled_literals.add(lit)

    def _visit_composite_lit(self, node: CompositeLit) -> None:
        if node in self.handled_literals:
            return
        self._ensure_pointer_type(node, node.type)

    def _visit_selector_expr(self, node: SelectorExpr) -> None:
        sel = self.info.selections.get(node)
        if sel is None:
            # a qualified identifier (pkg.Name), not a field or method selection
            return

        if sel.is_field:
            self._check_field_access(node, sel)
            return

        if node.sel.name == self.config.range_method and self.classifier.is_list_or_map(sel.recv):
            self.ranges.setdefault(node.sel, False)

    def _visit_range_stmt(self, node: RangeStmt) -> None:
        ident = self._range_handle(node.x)
        if ident is not None:
            self.ranges[ident] = True

    def _visit_call_expr(self, node: CallExpr) -> None:
        fun = node.fun
        if isinstance(fun, Ident):
            if fun.name != self.config.append_builtin or len(node.args) != 2:
                return
            tv = self.info.types.get(fun)
            if tv is not None and tv.mode is not ExprMode.BUILTIN:
                return
            if not node.has_ellipsis:
                return
            ident = self._range_handle(node.args[1])
            if ident is not None:
                self.ranges[ident] = True
            return

        if isinstance(fun, SelectorExpr):
            sel = self.info.selections.get(fun)
            if sel is None or not sel.is_method_value:
                return
            if fun.sel.name != self.config.append_method:
                return
            if not self.classifier.is_list_or_map(sel.recv):
                return
            if len(node.args) != 1 or not node.has_ellipsis:
                return
            ident = self._range_handle(node.args[0])
            if ident is not None:
                self.ranges[ident] = True

    # -- helpers --

    def _pointer_kind(self, t: Optional[ResolvedType]) -> Optional[Verdict]:
        """Template verdict of ``*t``, None if ``*t`` is not a generated immutable type."""
        if t is None:
            return None
        return self.classifier.immutable_kind(Pointer(t))

    def _ensure_pointer_type(self, node: Node, typ: Optional[Node]) -> None:
        t = self.info.type_of(typ)
        if t is None or self._pointer_kind(t) is None:
            return
        self.diagnostics.errorf(node.pos, f"type should be {Pointer(t)}")

    def _check_field_access(self, node: SelectorExpr, sel: Selection) -> None:
        recv = sel.recv
        kind = self.classifier.immutable_kind(recv) or self._pointer_kind(recv)
        if kind is None:
            return
        if self._file is not None and self._file.path in self.skip_files:
            return
        self.diagnostics.errorf(
            node.x.pos, f"should not access field {sel.name} of immutable type {recv}"
        )

    def _range_handle(self, expr: Optional[Node]) -> Optional[Ident]:
        """The Range identifier if ``expr`` is ``x.Range()`` on an immutable list or map."""
        if not isinstance(expr, CallExpr) or not isinstance(expr.fun, SelectorExpr):
            return None
        se = expr.fun
        sel = self.info.selections.get(se)
        if sel is None or not sel.is_method_value:
            return None
        if se.sel.name != self.config.range_method:
            return None
        if not self.classifier.is_list_or_map(sel.recv):
            return None
        return se.sel

    # -- after the walk --

    def _check_template_leakage(self) -> None:
        for node, tv in self.info.types.items():
            if not tv.is_type or not self.registry.is_template(tv.type):
                continue
            if self.markers.is_generated(node.pos.filename):
                continue
            self.diagnostics.errorf(node.pos, f"template type {tv.type} should never get used")

    def _check_ranges(self) -> None:
        for ident, consumed in self.ranges.items():
            if not consumed:
                self.diagnostics.errorf(ident.pos, RANGE_MESSAGE)


def _no_rule(node: Node) -> None:
    pass
