"""Tests for analysis/classifier.py - verdicts, memoization and cycles."""

import random

import pytest

from immutable_vet.analysis import AnalysisContext, TypeClassifier, Verdict
from immutable_vet.analysis.context import Pending, Resolved
from immutable_vet.config import VetConfig
from immutable_vet.exceptions import ToolFault, UnsupportedTypeError
from immutable_vet.model.types import (
    Array,
    Basic,
    Chan,
    Interface,
    Map,
    Method,
    Named,
    Pointer,
    Signature,
    Slice,
    Struct,
    Var,
)


class TestBasicRules:
    """One rule per type shape."""

    def test_basic_is_immutable(self, classifier):
        assert classifier.classify(Basic("string")) is Verdict.IMMUTABLE

    def test_slice_and_map_are_not(self, classifier):
        assert classifier.classify(Slice(Basic("int"))) is Verdict.NOT_IMMUTABLE
        assert classifier.classify(Map(Basic("string"), Basic("int"))) is Verdict.NOT_IMMUTABLE

    def test_signature_is_not(self, classifier):
        assert classifier.classify(Signature("func()")) is Verdict.NOT_IMMUTABLE

    def test_plain_pointer_is_not(self, classifier, go):
        point = go.named("Point", go.struct(x=Basic("int")))
        assert classifier.classify(Pointer(point)) is Verdict.NOT_IMMUTABLE

    def test_interface_is_immutable_and_tracked(self, classifier, context):
        shape = Interface([Method("Area", "func() float64")])
        assert classifier.classify(shape) is Verdict.IMMUTABLE
        assert context.tracked_interfaces[str(shape)] is shape

    def test_empty_interface_is_tracked(self, classifier, context):
        any_ = Interface()
        classifier.classify(any_)
        assert "interface{}" in context.tracked_interfaces

    def test_named_takes_underlying_verdict(self, classifier, go):
        ints = go.named("Ints", Slice(Basic("int")))
        celsius = go.named("Celsius", Basic("float64"))
        assert classifier.classify(ints) is Verdict.NOT_IMMUTABLE
        assert classifier.classify(celsius) is Verdict.IMMUTABLE

    def test_named_is_seen(self, classifier, context, go):
        celsius = go.named("Celsius", Basic("float64"))
        classifier.classify(celsius)
        assert context.seen_named[str(celsius)] is celsius

    def test_allowlist_preseeded(self, classifier):
        time_ = Named("time", "Time", underlying=Struct([Var("wall", Slice(Basic("uint64")))]))
        assert classifier.classify(time_) is Verdict.IMMUTABLE
        assert classifier.classify(Pointer(time_)) is Verdict.IMMUTABLE

    def test_allowlist_from_config(self, go):
        context = AnalysisContext.create(VetConfig(immutable_types=["example.com/shapes.Blob"]))
        blob = go.named("Blob", Slice(Basic("byte")))
        assert TypeClassifier(context).classify(blob) is Verdict.IMMUTABLE


class TestStructRule:
    def test_all_fields_immutable(self, classifier, go):
        st = go.struct(x=Basic("int"), name=Basic("string"))
        assert classifier.classify(st) is Verdict.IMMUTABLE

    def test_one_mutable_field(self, classifier, go):
        st = go.struct(x=Basic("int"), tags=Slice(Basic("string")))
        assert classifier.classify(st) is Verdict.NOT_IMMUTABLE

    def test_empty_struct(self, classifier):
        assert classifier.classify(Struct()) is Verdict.IMMUTABLE

    def test_nested_named_struct(self, classifier, go):
        inner = go.named("Inner", go.struct(tags=Map(Basic("string"), Basic("int"))))
        outer = go.named("Outer", go.struct(inner=inner))
        assert classifier.classify(outer) is Verdict.NOT_IMMUTABLE


class TestGeneratedTypes:
    """Pointers to immutableGen wrappers carry a template verdict."""

    def test_list(self, classifier, go):
        wrapper, _ = go.generated("MyList", Slice(Basic("int")))
        assert classifier.classify(Pointer(wrapper)) is Verdict.TEMPLATE_LIST
        assert classifier.is_list_or_map(Pointer(wrapper))

    def test_map(self, classifier, go):
        wrapper, _ = go.generated("MyMap", Map(Basic("string"), Basic("int")))
        assert classifier.classify(Pointer(wrapper)) is Verdict.TEMPLATE_MAP

    def test_struct(self, classifier, go):
        wrapper, _ = go.generated("MyStruct", go.struct(name=Basic("string")))
        assert classifier.classify(Pointer(wrapper)) is Verdict.TEMPLATE_STRUCT
        assert not classifier.is_list_or_map(Pointer(wrapper))

    def test_value_form_is_not_a_generated_type(self, classifier, go):
        wrapper, _ = go.generated("MyList", Slice(Basic("int")))
        assert classifier.immutable_kind(wrapper) is None

    def test_missing_marker_method(self, classifier, go):
        wrapper, _ = go.generated("MyList", Slice(Basic("int")))
        wrapper.methods = [m for m in wrapper.methods if m.name != "AsImmutable"]
        assert classifier.immutable_kind(Pointer(wrapper)) is None

    def test_missing_template_field(self, classifier, go):
        wrapper, _ = go.generated("MyList", Slice(Basic("int")))
        wrapper.underlying = Struct([Var("theList", Slice(Basic("int")))])
        assert classifier.immutable_kind(Pointer(wrapper)) is None

    def test_struct_holding_generated_pointer(self, classifier, go):
        wrapper, _ = go.generated("MyList", Slice(Basic("int")))
        holder = go.named("Holder", go.struct(items=Pointer(wrapper)))
        assert classifier.classify(holder) is Verdict.IMMUTABLE


class TestToolFaults:
    def test_array_is_unsupported(self, classifier):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            classifier.classify(Array(Basic("int"), 3))
        assert "unable to handle type" in str(exc_info.value)
        assert isinstance(exc_info.value, ToolFault)

    def test_chan_is_unsupported(self, classifier):
        with pytest.raises(UnsupportedTypeError):
            classifier.classify(Chan(Basic("int")))

    def test_fault_inside_named_leaves_no_pending_entry(self, classifier, context, go):
        grid = go.named("Grid", go.struct(cells=Array(Basic("int"), 9)))
        with pytest.raises(UnsupportedTypeError):
            classifier.classify(grid)
        assert not any(isinstance(e, Pending) for e in context.type_cache.values())


class TestCycles:
    """Self-referential types terminate; pending names resolve as immutable."""

    def test_direct_self_reference(self, classifier, go):
        node = go.named("Node")
        node.underlying = Struct([Var("value", Basic("int")), Var("next", node)])
        assert classifier.classify(node) is Verdict.IMMUTABLE

    def test_self_reference_through_pointer(self, classifier, go):
        node = go.named("Node")
        node.underlying = Struct([Var("value", Basic("int")), Var("next", Pointer(node))])
        assert classifier.classify(node) is Verdict.NOT_IMMUTABLE

    def test_mutual_recursion_with_mutable_member(self, classifier, go):
        a = go.named("A")
        b = go.named("B")
        a.underlying = Struct([Var("b", b), Var("tags", Slice(Basic("string")))])
        b.underlying = Struct([Var("a", a)])

        assert classifier.classify(b) is Verdict.NOT_IMMUTABLE
        assert classifier.classify(a) is Verdict.NOT_IMMUTABLE

    def test_verdict_independent_of_entry_point(self, go):
        a = go.named("A")
        b = go.named("B")
        a.underlying = Struct([Var("b", b), Var("tags", Slice(Basic("string")))])
        b.underlying = Struct([Var("a", a)])

        a_first = TypeClassifier(AnalysisContext.create(VetConfig()))
        from_a = (a_first.classify(a), a_first.classify(b))

        b_first = TypeClassifier(AnalysisContext.create(VetConfig()))
        from_b = tuple(reversed((b_first.classify(b), b_first.classify(a))))

        assert from_a == from_b == (Verdict.NOT_IMMUTABLE, Verdict.NOT_IMMUTABLE)

    def test_nothing_left_pending(self, classifier, context, go):
        a = go.named("A")
        b = go.named("B")
        a.underlying = Struct([Var("b", b)])
        b.underlying = Struct([Var("a", a)])
        classifier.classify(a)
        assert all(isinstance(e, Resolved) for e in context.type_cache.values())


def _random_graph(rng, size):
    """Named struct types whose fields point at basics, containers or each other."""
    types = [Named("example.com/g", f"T{i}") for i in range(size)]
    for t in types:
        fields = []
        for j in range(rng.randint(0, 4)):
            roll = rng.random()
            if roll < 0.45:
                ft = rng.choice(types)
            elif roll < 0.55:
                ft = Pointer(rng.choice(types))
            elif roll < 0.65:
                ft = Slice(Basic("int"))
            elif roll < 0.7:
                ft = Struct([Var("inner", rng.choice(types))])
            else:
                ft = Basic("int")
            fields.append(Var(f"f{j}", ft))
        t.underlying = Struct(fields)
    return types


def _expected(types):
    """Greatest fixed point: immutable unless a mutable leaf is reachable."""

    def direct_deps(t):
        deps, bad = [], False
        stack = [f.type for f in t.underlying.fields]
        while stack:
            ft = stack.pop()
            if isinstance(ft, Named):
                deps.append(ft)
            elif isinstance(ft, Struct):
                stack.extend(f.type for f in ft.fields)
            elif not isinstance(ft, Basic):
                bad = True
        return deps, bad

    info = {t: direct_deps(t) for t in types}
    mutable = {t for t, (_, bad) in info.items() if bad}
    changed = True
    while changed:
        changed = False
        for t, (deps, _) in info.items():
            if t not in mutable and any(d in mutable for d in deps):
                mutable.add(t)
                changed = True
    return {t: t not in mutable for t in types}


class TestRandomFieldGraphs:
    """Struct law over random cyclic field graphs."""

    @pytest.mark.parametrize("seed", range(25))
    def test_matches_fixed_point_in_any_order(self, seed):
        rng = random.Random(seed)
        types = _random_graph(rng, rng.randint(1, 8))
        expected = _expected(types)

        for _ in range(3):
            order = types[:]
            rng.shuffle(order)
            classifier = TypeClassifier(AnalysisContext.create(VetConfig()))
            got = {t: classifier.is_immutable(t) for t in order}
            assert got == expected

    @pytest.mark.parametrize("seed", range(10))
    def test_idempotent(self, seed):
        rng = random.Random(1000 + seed)
        types = _random_graph(rng, 6)
        classifier = TypeClassifier(AnalysisContext.create(VetConfig()))

        first = [classifier.classify(t) for t in types]
        snapshot = dict(classifier.context.type_cache)
        second = [classifier.classify(t) for t in types]

        assert first == second
        assert classifier.context.type_cache == snapshot
