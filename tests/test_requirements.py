"""
Requirement parsing and resolution (decoding/requirements.py).
"""

import pytest

from ripple.decoding import CAMEL, RequirementResolver, RequirementSpec, parse_requirement
from ripple.faults import (
    FaultDomain,
    MalformedRequirementFault,
    MissingParameterGetterFault,
    MissingRequirementGetterFault,
    Severity,
)

from sample_models import CamelChild, CamelParent, Doubler, NeedsFoo, NeedsFooWithoutParameter


# ============================================================================
# Parsing
# ============================================================================

class TestParseRequirement:

    def test_bare_name(self):
        spec = parse_requirement("foo")
        assert spec.name == "foo"
        assert spec.parameters == ()

    def test_single_parameter(self):
        assert parse_requirement("foo(bar)") == RequirementSpec("foo", ("bar",))

    def test_multiple_parameters_keep_order(self):
        assert parse_requirement("url(b, a ,c)").parameters == ("b", "a", "c")

    def test_empty_parentheses(self):
        assert parse_requirement("foo()") == RequirementSpec("foo")

    def test_surrounding_whitespace(self):
        assert parse_requirement("  foo ( bar )  ") == RequirementSpec("foo", ("bar",))

    def test_camel_case_names(self):
        spec = parse_requirement("threadUrl(mediaId)")
        assert spec.name == "threadUrl"
        assert spec.parameters == ("mediaId",)

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "foo(",
        "foo(bar",
        "foo)",
        "foo(bar)baz",
        "foo(a,,b)",
        "foo(a,)",
        "foo(a(b))",
        "foo(a-b)",
        "1foo",
        "foo bar",
        "(bar)",
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedRequirementFault) as exc_info:
            parse_requirement(raw)
        assert exc_info.value.spec == raw

    @pytest.mark.parametrize("raw", [None, 42, ["foo"]])
    def test_non_string(self, raw):
        with pytest.raises(MalformedRequirementFault):
            parse_requirement(raw)

    def test_fault_shape(self):
        with pytest.raises(MalformedRequirementFault) as exc_info:
            parse_requirement("foo(")
        fault = exc_info.value
        assert fault.code == "MALFORMED_REQUIREMENT"
        assert fault.domain == FaultDomain.DECODE
        assert fault.severity == Severity.FATAL
        assert fault.retryable is False

    def test_spec_passthrough(self):
        spec = RequirementSpec("foo", ("bar",))
        assert parse_requirement(spec) is spec
        assert RequirementSpec.parse("foo(bar)") == spec

    def test_canonical_str(self):
        assert str(parse_requirement("foo( a , b )")) == "foo(a,b)"
        assert str(parse_requirement("foo()")) == "foo"

    def test_parse_is_cached(self):
        assert parse_requirement("cached(x)") is parse_requirement("cached(x)")


# ============================================================================
# Resolution
# ============================================================================

class TestRequirementResolver:

    def test_resolve(self):
        resolver = RequirementResolver()
        assert resolver.resolve(Doubler(), NeedsFoo(), "foo(bar)") == ("foo", 10)

    def test_resolve_without_parameters(self):
        class Source:
            def get_token(self):
                return "t0k"

        assert RequirementResolver().resolve(Source(), object(), "token") == ("token", "t0k")

    def test_parameters_positional_in_declared_order(self):
        class Source:
            def get_full(self, first, second):
                return f"{first}-{second}"

        class Subject:
            def get_a(self):
                return "x"

            def get_b(self):
                return "y"

        resolver = RequirementResolver()
        assert resolver.resolve(Source(), Subject(), "full(b, a)") == ("full", "y-x")

    def test_resolve_all_rejects_non_method_requirements(self):
        class Subject:
            requirements = ["foo(bar)"]

        with pytest.raises(MalformedRequirementFault, match="not a method"):
            RequirementResolver().resolve_all(Doubler(), Subject())

    def test_missing_requirement_getter(self):
        with pytest.raises(MissingRequirementGetterFault) as exc_info:
            RequirementResolver().resolve(object(), NeedsFoo(), "foo(bar)")
        fault = exc_info.value
        assert fault.name == "foo"
        assert fault.code == "MISSING_REQUIREMENT_GETTER"
        assert fault.metadata["name"] == "foo"

    def test_missing_parameter_getter_before_deriving(self):
        parent = Doubler()
        with pytest.raises(MissingParameterGetterFault) as exc_info:
            RequirementResolver().resolve(parent, NeedsFooWithoutParameter(), "foo(bar)")
        assert exc_info.value.name == "bar"
        assert parent.journal == []

    def test_static_and_class_getters(self):
        class Source:
            @staticmethod
            def get_static():
                return "s"

            @classmethod
            def get_klass(cls):
                return cls.__name__

        resolver = RequirementResolver()
        assert resolver.resolve(Source(), object(), "static") == ("static", "s")
        assert resolver.resolve(Source(), object(), "klass") == ("klass", "Source")

    def test_camel_convention(self):
        resolver = RequirementResolver(CAMEL)
        assert resolver.resolve(CamelParent(), CamelChild(), "foo(bar)") == ("foo", 10)

    def test_resolve_all(self):
        assert RequirementResolver().resolve_all(Doubler(), NeedsFoo()) == {"foo": 10}

    def test_resolve_all_later_name_wins(self):
        class Source:
            def get_foo(self, x=1):
                return x * 2

        class Subject:
            def requirements(self):
                return ["foo(bar)", "foo"]

            def get_bar(self):
                return 5

        assert RequirementResolver().resolve_all(Source(), Subject()) == {"foo": 2}

    def test_resolve_all_accepts_parsed_specs(self):
        class Subject(NeedsFoo):
            def requirements(self):
                return [RequirementSpec("foo", ("bar",))]

        assert RequirementResolver().resolve_all(Doubler(), Subject()) == {"foo": 10}

    def test_resolve_all_rejects_string(self):
        class Subject:
            def requirements(self):
                return "foo(bar)"

        with pytest.raises(MalformedRequirementFault):
            RequirementResolver().resolve_all(Doubler(), Subject())

    def test_resolve_all_rejects_malformed_entry(self):
        class Subject:
            def requirements(self):
                return ["foo(bar"]

        with pytest.raises(MalformedRequirementFault):
            RequirementResolver().resolve_all(Doubler(), Subject())
