"""Tests for TypeClassifier — reference/value verdicts over JavaScript expressions."""

from __future__ import annotations

import pytest
from tree_sitter_language_pack import get_parser

from fillguard.api import classify_expression
from fillguard.classifier import TypeClassifier, Verdict
from fillguard.config import FillOptions
from fillguard.scope import Binding, BindingResolver, ScopeResolver
from fillguard.tracing import RecordingTracer
from fillguard import constants

NO_FUNCTIONS = {"canFillWithFunction": False}
NO_REGEXPS = {"canFillWithRegexp": False}

ALL_OPTION_COMBINATIONS = [
    FillOptions(can_fill_with_function=f, can_fill_with_regexp=r)
    for f in (True, False)
    for r in (True, False)
]


def _parse_js(source: str):
    parser = get_parser("javascript")
    return parser.parse(source.encode("utf-8"))


def _last_expression(tree):
    statements = [
        c for c in tree.root_node.named_children if c.type == "expression_statement"
    ]
    return statements[-1].named_children[0]


class FailingResolver(BindingResolver):
    """Resolver that always raises, standing in for a broken collaborator."""

    def resolve_identifier(self, node) -> Binding | None:
        raise RuntimeError("scope walk failed")


class TestValueTypes:
    @pytest.mark.parametrize(
        "source",
        ["42", "10n", "'foo'", '"bar"', "true", "false", "null", "undefined", "3.14"],
    )
    def test_primitive_literals(self, source):
        assert classify_expression(source) == Verdict.value_type()

    @pytest.mark.parametrize(
        "source",
        ["``", "`${10}`", "`hi ${x}`", "`${{}} and ${[]}`", "const o = {}; `${o}`"],
    )
    def test_template_literals_ignore_interpolations(self, source):
        assert not classify_expression(source).is_reference_type

    @pytest.mark.parametrize("source", ["-1", "!x", "typeof x", "1 + 2", "a * b", "i++"])
    def test_primitive_operations(self, source):
        assert not classify_expression(source).is_reference_type

    def test_symbol_call(self):
        assert not classify_expression("Symbol('foo')").is_reference_type

    def test_unresolved_global_identifier(self):
        assert not classify_expression("someGlobal").is_reference_type


class TestReferenceTypes:
    def test_object_literal(self):
        assert classify_expression("({})") == Verdict.reference("Object")

    def test_array_literal(self):
        assert classify_expression("[]") == Verdict.reference("Array")

    def test_new_map(self):
        assert classify_expression("new Map()") == Verdict.reference("new Map()")

    def test_new_without_arguments(self):
        assert classify_expression("new Set") == Verdict.reference("new Set()")

    def test_new_member_path_callee(self):
        assert classify_expression("new A.B()") == Verdict.reference("new A.B()")

    def test_new_anonymous_class(self):
        assert classify_expression("new class {}") == Verdict.reference("new class()")

    def test_class_expression(self):
        assert classify_expression("(class {})").is_reference_type

    def test_arbitrary_call(self):
        verdict = classify_expression("Array()")
        assert verdict.is_reference_type
        assert verdict.type_label == ""

    def test_subscript_of_call(self):
        assert classify_expression("createError('no', 'yes')[0]").is_reference_type

    def test_parenthesized_object(self):
        assert classify_expression("((({ a: 1 })))") == Verdict.reference("Object")


class TestOptions:
    def test_regex_literal_allowed_by_default(self):
        assert not classify_expression("/abc/").is_reference_type

    def test_regex_literal_rejected(self):
        assert classify_expression("/abc/", NO_REGEXPS) == Verdict.reference("RegExp")

    def test_regexp_construction_allowed_by_default(self):
        assert not classify_expression("new RegExp('abc')").is_reference_type

    def test_regexp_construction_rejected(self):
        verdict = classify_expression("new RegExp('abc')", NO_REGEXPS)
        assert verdict == Verdict.reference("new RegExp()")

    def test_regexp_call_form_follows_option(self):
        assert not classify_expression("RegExp('abc')").is_reference_type
        assert classify_expression("RegExp('abc')", NO_REGEXPS).is_reference_type

    def test_shadowed_regexp_is_plain_construction(self):
        verdict = classify_expression("class RegExp {}; new RegExp('x')")
        assert verdict == Verdict.reference("new RegExp()")

    @pytest.mark.parametrize(
        "source", ["() => {}", "() => 1", "(function () {})", "(function* gen() {})"]
    )
    def test_functions_allowed_by_default(self, source):
        assert not classify_expression(source).is_reference_type

    @pytest.mark.parametrize(
        "source", ["() => {}", "() => { return {} }", "(function () {})"]
    )
    def test_functions_rejected(self, source):
        assert classify_expression(source, NO_FUNCTIONS) == Verdict.reference("Function")

    def test_options_accept_field_names(self):
        verdict = classify_expression("/x/", {"can_fill_with_regexp": False})
        assert verdict.is_reference_type

    @pytest.mark.parametrize(
        "source",
        ["42", "`t`", "({})", "[]", "new Map()", "Array()", "const p = {}; p", "let q = []; q"],
    )
    def test_options_do_not_affect_ungoverned_shapes(self, source):
        verdicts = {classify_expression(source, opts) for opts in ALL_OPTION_COMBINATIONS}
        assert len(verdicts) == 1


class TestIdentifierResolution:
    def test_fixed_binding_to_object(self):
        assert classify_expression("const p = {}; p") == Verdict.reference("Object")

    def test_fixed_binding_to_value_matches_initializer(self):
        assert classify_expression("const n = 42; n") == classify_expression("42")

    def test_fixed_binding_to_construction(self):
        verdict = classify_expression("const map = new Map(); map")
        assert verdict == Verdict.reference("new Map()")

    @pytest.mark.parametrize("keyword", ["let", "var"])
    def test_reassignable_binding_is_value(self, keyword):
        assert not classify_expression(f"{keyword} p = {{}}; p").is_reference_type

    def test_reassigned_let_is_value(self):
        assert not classify_expression("let a = []\na = 2\na").is_reference_type

    def test_class_declaration_gets_variable_label(self):
        verdict = classify_expression("class BarClass {}; BarClass")
        assert verdict == Verdict.reference("variable (BarClass)")

    def test_unlabelled_initializer_gets_variable_label(self):
        verdict = classify_expression("const x = Array(); x")
        assert verdict == Verdict.reference("variable (x)")

    def test_function_declaration_follows_function_option(self):
        source = "function foo() {}; foo"
        assert not classify_expression(source).is_reference_type
        assert classify_expression(source, NO_FUNCTIONS) == Verdict.reference("Function")

    def test_regex_binding_follows_regexp_option(self):
        source = "const p = /pattern/; p"
        assert not classify_expression(source).is_reference_type
        assert classify_expression(source, NO_REGEXPS) == Verdict.reference("RegExp")

    def test_chained_fixed_bindings(self):
        verdict = classify_expression("const a = []; const b = a; const c = b; c")
        assert verdict == Verdict.reference("Array")

    def test_destructured_binding_is_value(self):
        assert not classify_expression("const { a } = { a: {} }; a").is_reference_type

    def test_anonymous_class_instance_binding(self):
        verdict = classify_expression("const cls = new class {}; cls")
        assert verdict == Verdict.reference("new class()")


class TestConditionals:
    def test_ternary_with_reference_branch(self):
        assert classify_expression("c ? 1 : {}") == Verdict.reference("Object")

    def test_ternary_with_value_branches(self):
        assert not classify_expression("c ? 1 : 'x'").is_reference_type

    def test_nullish_fallback_to_array(self):
        assert classify_expression("x ?? []") == Verdict.reference("Array")

    def test_logical_or_of_values(self):
        assert not classify_expression("a || 0").is_reference_type


class TestFailSafe:
    def test_absent_node_is_value(self):
        tree = _parse_js("")
        classifier = TypeClassifier(ScopeResolver(tree))
        assert classifier.classify(None) == Verdict.value_type()

    def test_self_referencing_binding(self):
        tracer = RecordingTracer()
        verdict = classify_expression("const a = a; a", tracer=tracer)
        assert not verdict.is_reference_type
        assert constants.EVENT_CYCLE_DETECTED in tracer.kinds()

    def test_mutual_cycle(self):
        tracer = RecordingTracer()
        verdict = classify_expression("const a = b; const b = a; a", tracer=tracer)
        assert not verdict.is_reference_type
        assert constants.EVENT_CYCLE_DETECTED in tracer.kinds()

    def test_depth_limit(self):
        tree = _parse_js("const a = {}; const b = a; const c = b; c")
        tracer = RecordingTracer()
        classifier = TypeClassifier(ScopeResolver(tree), tracer=tracer, max_depth=2)
        verdict = classifier.classify(_last_expression(tree))
        assert verdict == Verdict.value_type()
        assert constants.EVENT_DEPTH_EXCEEDED in tracer.kinds()

    def test_resolver_fault_treated_as_unresolved(self):
        tree = _parse_js("const p = {}; p")
        tracer = RecordingTracer()
        classifier = TypeClassifier(FailingResolver(), tracer=tracer)
        verdict = classifier.classify(_last_expression(tree))
        assert verdict == Verdict.value_type()
        assert tracer.kinds() == [
            constants.EVENT_RESOLVER_FAULT,
            constants.EVENT_UNRESOLVED_IDENTIFIER,
        ]

    def test_resolver_fault_during_symbol_check(self):
        tree = _parse_js("Symbol('x')")
        classifier = TypeClassifier(FailingResolver())
        assert not classifier.classify(_last_expression(tree)).is_reference_type

    def test_shadowed_symbol_is_traced(self):
        tracer = RecordingTracer()
        verdict = classify_expression(
            "const Symbol = () => ({}); Symbol('x')", tracer=tracer
        )
        assert not verdict.is_reference_type
        assert constants.EVENT_SYMBOL_SHADOWED in tracer.kinds()

    def test_reassignable_binding_is_traced(self):
        tracer = RecordingTracer()
        classify_expression("let p = {}; p", tracer=tracer)
        assert tracer.kinds() == [constants.EVENT_REASSIGNABLE_BINDING]


class TestPurity:
    def test_classify_is_idempotent(self):
        tree = _parse_js("const m = new Map(); m")
        classifier = TypeClassifier(ScopeResolver(tree))
        node = _last_expression(tree)
        assert classifier.classify(node) == classifier.classify(node)

    def test_options_are_not_mutated(self):
        options = FillOptions(can_fill_with_regexp=False)
        tree = _parse_js("/x/")
        classifier = TypeClassifier(ScopeResolver(tree), options)
        classifier.classify(_last_expression(tree))
        assert classifier.options == FillOptions(can_fill_with_regexp=False)


class TestLongChains:
    def test_long_logical_chain_of_values(self):
        source = " || ".join(f"x{i}" for i in range(600))
        assert not classify_expression(source).is_reference_type

    def test_long_logical_chain_ending_in_object(self):
        source = " || ".join(f"x{i}" for i in range(600)) + " || {}"
        assert classify_expression(source) == Verdict.reference("Object")

    def test_long_nested_ternary(self):
        source = "c ? 1 : " * 600 + "[]"
        assert classify_expression(source) == Verdict.reference("Array")

    def test_mixed_parenthesized_chain(self):
        source = "a ?? (b && (c ? 1 : (d || new Map())))"
        assert classify_expression(source) == Verdict.reference("new Map()")
