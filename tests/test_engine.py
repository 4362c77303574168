"""
Decode propagation engine (decoding/engine.py, decoding/base.py).

Tests traversal order, requirement injection, hooks, container passing,
failure semantics, cycle guard and naming conventions.
"""

import logging
from types import MappingProxyType

import pytest

from ripple.decoding import (
    CAMEL,
    Decodable,
    DecodeEngine,
    DecodeField,
    Propagator,
    decode,
    propagate,
)
from ripple.faults import (
    CyclicGraphFault,
    MissingParameterGetterFault,
    MissingRequirementGetterFault,
    NotDecodableFault,
    UndeclaredFieldsFault,
)

from sample_models import (
    Branch,
    CamelChild,
    CamelParent,
    Comment,
    Doubler,
    Feed,
    Leaf,
    NeedsFoo,
    NeedsFooWithoutParameter,
    NeedsFooWithoutSetter,
    Recorder,
)


# ============================================================================
# Basic traversal
# ============================================================================

class TestTraversal:

    def test_null_fields_visit_nothing(self, engine, container, journal):
        root = Recorder(journal, label="root", children=None)
        engine.decode(root, container)
        assert journal == [("decode", "root")]

    def test_null_child_field_is_noop(self, engine, container):
        parent = Doubler(child=None)
        engine.decode(parent, container)
        assert parent.journal == []

    def test_sequence_visited_in_order(self, engine, container, journal):
        kids = [Recorder(journal, label=name) for name in ("a", "b", "c")]
        root = Recorder(journal, label="root", children=kids)
        engine.decode(root, container)
        assert journal == [("decode", "root"), ("decode", "a"), ("decode", "b"), ("decode", "c")]

    def test_depth_first(self, engine, container, journal):
        a = Recorder(journal, label="a", children=[Recorder(journal, label="a1")])
        b = Recorder(journal, label="b")
        root = Recorder(journal, label="root", children=[a, b])
        engine.decode(root, container)
        assert [label for _, label in journal] == ["root", "a", "a1", "b"]

    def test_fields_visited_in_declaration_order(self, engine, container, journal):
        class Pair(Decodable):
            second = DecodeField()
            first = DecodeField()

        pair = Pair(
            first=Recorder(journal, label="first"),
            second=Recorder(journal, label="second"),
        )
        engine.decode(pair, container)
        assert journal == [("decode", "second"), ("decode", "first")]

    def test_mapping_values_are_children(self, engine, container, journal):
        root = Recorder(journal, label="root", children={
            "x": Recorder(journal, label="x"),
            "y": Recorder(journal, label="y"),
        })
        engine.decode(root, container)
        assert journal == [("decode", "root"), ("decode", "x"), ("decode", "y")]

    def test_scalars_and_plain_objects_skipped(self, engine, container, journal):
        root = Recorder(journal, label="root", children=["text", 42, object(), None, b"raw"])
        engine.decode(root, container)
        assert journal == [("decode", "root")]

    def test_classes_are_not_children(self, engine, container, journal):
        root = Recorder(journal, label="root", children=[Recorder])
        engine.decode(root, container)
        assert journal == [("decode", "root")]

    def test_shared_child_visited_per_reference(self, engine, container, journal):
        shared = Recorder(journal, label="shared")
        root = Recorder(journal, label="root", children=[shared, shared])
        engine.decode(root, container)
        assert journal.count(("decode", "shared")) == 2

    def test_child_receives_empty_requirements_without_provider(self, engine, container, journal):
        child = Recorder(journal, label="child")
        engine.decode(Recorder(journal, children=[child]), container)
        assert child.received == [{}]

    def test_field_named_requirements_is_data(self, engine, container, journal):
        class Order(Decodable):
            requirements = DecodeField(default_factory=list)

        child = Order(requirements=["sku-1", "sku-2"])
        engine.decode(Recorder(journal, label="root", children=[child]), container)
        assert child.requirements == ["sku-1", "sku-2"]
        assert journal == [("decode", "root")]

    def test_dataclass_graph(self, engine, container):
        branch = Branch(name="b", leaves=[Leaf(1), Leaf(2)])
        engine.decode(branch, container)
        assert branch.decoded
        assert all(leaf.decoded for leaf in branch.leaves)


# ============================================================================
# Requirement injection
# ============================================================================

class TestRequirementInjection:

    def test_setter_runs_before_child_decode(self, engine, container, journal):
        child = NeedsFoo(journal, label="child")
        parent = Doubler(journal, child=child)
        engine.decode(parent, container)

        assert journal == [("get_foo", 5), ("set_foo", 10), ("decode", "child")]
        assert child.foo == 10
        assert child.received == [{"foo": 10}]

    def test_missing_setter_is_not_fatal(self, engine, container, journal):
        child = NeedsFooWithoutSetter(journal, label="child")
        engine.decode(Doubler(journal, child=child), container)

        assert child.received == [{"foo": 10}]
        assert "foo" not in vars(child)

    def test_requirements_are_fresh_per_child(self, engine, container, journal):
        first = NeedsFoo(journal, label="first")
        second = NeedsFoo(journal, label="second")
        root = Doubler(journal, child=[first, second])
        engine.decode(root, container)

        assert first.received == [{"foo": 10}]
        assert second.received == [{"foo": 10}]
        assert first.received[0] is not second.received[0]

    def test_feed_example(self, container):
        feed = Feed(comments=[Comment(media_id="17"), Comment(media_id="18")])
        decode(feed, container)
        assert [c.thread_url for c in feed.comments] == [
            "https://api.example.com/media/17/comments",
            "https://api.example.com/media/18/comments",
        ]

    def test_root_requirements_forwarded(self, engine, container, journal):
        root = Recorder(journal, label="root")
        engine.decode(root, container, {"token": "abc"})
        assert root.received == [{"token": "abc"}]

    def test_override_consumes_requirements(self, engine, container):
        class Scaled(Decodable):
            factor = DecodeField(default=1)

            def requirements(self):
                return ["foo(bar)"]

            def get_bar(self):
                return 5

            def on_decode(self, container, requirements=None):
                self.factor = requirements["foo"]
                super().on_decode(container, requirements)

        child = Scaled()
        engine.decode(Doubler(child=child), container)
        assert child.factor == 10

    def test_requirement_source_delegation(self, engine, container, journal):
        class Knowledge:
            def get_foo(self, x):
                return x + 100

        class Delegating(Decodable):
            child = DecodeField()

            def requirement_source(self):
                return Knowledge()

        child = NeedsFoo(journal, label="child")
        engine.decode(Delegating(child=child), container)
        assert child.foo == 105


# ============================================================================
# Hooks
# ============================================================================

class TestFieldHooks:

    def test_hook_runs_once_before_children(self, engine, container, journal):
        class Hooked(Decodable):
            child = DecodeField()

            def on_decode_child(self):
                journal.append(("hook", "child"))

        grandchild = Recorder(journal, label="grandchild")
        kids = [Recorder(journal, label="c1", children=[grandchild]), Recorder(journal, label="c2")]
        engine.decode(Hooked(child=kids), container)

        assert journal == [
            ("hook", "child"),
            ("decode", "c1"),
            ("decode", "grandchild"),
            ("decode", "c2"),
        ]

    def test_hook_runs_for_null_field(self, engine, container, journal):
        class Hooked(Decodable):
            child = DecodeField()

            def on_decode_child(self):
                journal.append(("hook", "child"))

        engine.decode(Hooked(), container)
        assert journal == [("hook", "child")]

    def test_hook_can_fill_a_later_field(self, engine, container, journal):
        class Lazy(Decodable):
            raw = DecodeField(default_factory=list)
            derived = DecodeField()

            def on_decode_raw(self):
                self.derived = [Recorder(journal, label=str(item)) for item in self.raw]

        engine.decode(Lazy(raw=[1, 2]), container)
        assert journal == [("decode", "1"), ("decode", "2")]

    def test_hooks_per_propagate_call(self, engine, container):
        class Counter(Decodable):
            child = DecodeField()
            calls = 0

            def on_decode_child(self):
                self.calls += 1

        node = Counter()
        engine.decode(node, container)
        engine.decode(node, container)
        assert node.calls == 2


# ============================================================================
# Container passing
# ============================================================================

class TestContainer:

    def test_same_container_reaches_grandchild(self, engine, container, journal):
        grandchild = Recorder(journal, label="g")
        child = Recorder(journal, label="c", children=[grandchild])
        root = Recorder(journal, label="r", children=[child])
        engine.decode(root, container)

        assert root.containers[0] is container
        assert child.containers[0] is container
        assert grandchild.containers[0] is container

    def test_plain_dict_wrapped_once(self, engine, journal):
        payload = {"status": "ok"}
        grandchild = Recorder(journal, label="g")
        root = Recorder(journal, label="r", children=[Recorder(journal, label="c", children=[grandchild])])
        engine.decode(root, payload)

        seen = root.containers[0]
        assert isinstance(seen, MappingProxyType)
        assert grandchild.containers[0] is seen
        assert seen["status"] == "ok"

    def test_container_is_read_only(self, engine, journal):
        root = Recorder(journal, label="r")
        engine.decode(root, {"status": "ok"})
        with pytest.raises(TypeError):
            root.containers[0]["status"] = "changed"


# ============================================================================
# Failure semantics
# ============================================================================

class TestFailures:

    def test_missing_parent_getter_aborts(self, engine, container, journal):
        grandchild = Recorder(journal, label="grandchild")
        child = NeedsFoo(journal, label="child", children=[grandchild])
        root = Recorder(journal, label="root", children=[child])

        with pytest.raises(MissingRequirementGetterFault) as exc_info:
            engine.decode(root, container)

        assert exc_info.value.name == "foo"
        assert journal == [("decode", "root")]

    def test_missing_parameter_getter(self, engine, container, journal):
        child = NeedsFooWithoutParameter(journal, label="child")
        with pytest.raises(MissingParameterGetterFault) as exc_info:
            engine.decode(Doubler(journal, child=child), container)

        assert exc_info.value.name == "bar"
        assert journal == []

    def test_later_siblings_not_visited_after_fault(self, engine, container, journal):
        bad = NeedsFooWithoutParameter(journal, label="bad")
        after = Recorder(journal, label="after")
        with pytest.raises(MissingParameterGetterFault):
            engine.decode(Doubler(journal, child=[bad, after]), container)
        assert ("decode", "after") not in journal

    def test_child_exceptions_propagate_unchanged(self, engine, container):
        class Exploding(Decodable):
            def on_decode(self, container, requirements=None):
                raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            engine.decode(Doubler(child=Exploding()), container)

    def test_root_must_be_decodable(self, engine, container):
        with pytest.raises(NotDecodableFault):
            engine.decode(object(), container)
        with pytest.raises(NotDecodableFault):
            engine.decode(Recorder, container)

    def test_undeclared_fields(self, engine, container):
        class Plain:
            def on_decode(self, container, requirements=None):
                propagate(self, container)

        with pytest.raises(UndeclaredFieldsFault) as exc_info:
            engine.decode(Doubler(child=Plain()), container)
        assert exc_info.value.type_name.endswith("Plain")

    def test_fault_logged_at_severity(self, engine, container, caplog):
        with caplog.at_level(logging.DEBUG, logger="ripple.decoding"):
            with pytest.raises(MissingRequirementGetterFault):
                engine.decode(Recorder(children=[NeedsFoo()]), container)

        records = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(records) == 1
        assert "MISSING_REQUIREMENT_GETTER" in records[0].getMessage()


# ============================================================================
# Cycle guard
# ============================================================================

class TestCycles:

    def test_cycle_detected(self, engine, container, journal):
        a = Recorder(journal, label="a")
        b = Recorder(journal, label="b", children=[a])
        a.children = [b]

        with pytest.raises(CyclicGraphFault) as exc_info:
            engine.decode(a, container)

        assert exc_info.value.path == ["Recorder", "Recorder", "Recorder"]
        assert journal == [("decode", "a"), ("decode", "b"), ("decode", "a")]

    def test_self_reference(self, engine, container, journal):
        a = Recorder(journal, label="a")
        a.children = [a]
        with pytest.raises(CyclicGraphFault):
            engine.decode(a, container)

    def test_guard_disabled_recurses(self, container, journal):
        a = Recorder(journal, label="a")
        a.children = [a]
        with pytest.raises(RecursionError):
            DecodeEngine(detect_cycles=False).decode(a, container)

    def test_path_reset_after_decode(self, engine, container, journal):
        a = Recorder(journal, label="a")
        engine.decode(a, container)
        engine.decode(a, container)
        assert journal == [("decode", "a"), ("decode", "a")]


# ============================================================================
# Engine settings
# ============================================================================

class TestEngineSettings:

    def test_camel_naming(self, container):
        child = CamelChild()
        parent = CamelParent(child=child)
        DecodeEngine(naming="camel").decode(parent, container)

        assert child.foo == 10
        assert parent.hooked == 1

    def test_camel_accessors_ignored_by_snake_engine(self, engine, container):
        with pytest.raises(MissingRequirementGetterFault):
            engine.decode(CamelParent(child=CamelChild()), container)

    def test_engine_from_config(self, container):
        from ripple.config import RippleConfig

        engine = DecodeEngine(RippleConfig(naming="camel", detect_cycles=False))
        assert engine.propagator.convention is CAMEL
        assert engine.propagator.detect_cycles is False

    def test_pinned_propagator(self, engine, container):
        class PinnedParent(CamelParent):
            propagator = Propagator(CAMEL)

        child = CamelChild()
        engine.decode(PinnedParent(child=child), container)
        assert child.foo == 10

    def test_custom_iterable(self, container, journal):
        class FirstOnly(Propagator):
            def iterable(self, value):
                children = list(super().iterable(value))
                return children[:1]

        kids = [Recorder(journal, label="a"), Recorder(journal, label="b")]
        root = Recorder(journal, label="root", children=kids)
        DecodeEngine(propagator=FirstOnly()).decode(root, container)
        assert journal == [("decode", "root"), ("decode", "a")]

    def test_returns_root(self, engine, container):
        root = Recorder()
        assert engine.decode(root, container) is root
