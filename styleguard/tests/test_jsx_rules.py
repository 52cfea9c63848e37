"""
Tests for the JSX rules.
"""

import pytest

from node_factory import (K, arrow, attr, boolean, call, ident, jsx, jsx_expr, lint, member, node, number,
                          obj, prop, source_unit, string)
from styleguard.engine.errors import ConfigurationError
from styleguard.engine.profiles import RuleProfile
from styleguard.engine.registry import get_default_registry
from styleguard.engine.resolver import resolve_ruleset
from styleguard.engine.traversal import TraversalEngine


def mapped(method, param_names, key_value, receiver="items"):
    """`items.<method>((...params) => <li key={...} />)`"""
    element = jsx("li", attr("key", jsx_expr(key_value)))
    return call(member(receiver, method), arrow(param_names, element))


class TestNoArrayIndexKey:
    """Index parameters of list callbacks used as keys."""

    rule = "jsx.no_array_index_key"

    def test_index_as_key(self):
        violations = lint(self.rule, mapped("map", ["item", "index"], ident("index")))
        assert len(violations) == 1
        assert violations[0].meta["index"] == "index"

    def test_index_inside_template(self):
        template = node(K.TEMPLATE_LITERAL, node(K.TEMPLATE_SUBSTITUTION, ident("i")), text="`row-${i}`")
        assert len(lint(self.rule, mapped("map", ["item", "i"], template))) == 1

    def test_stable_id_is_fine(self):
        assert lint(self.rule, mapped("map", ["item", "i"], member("item", "id"))) == ()

    def test_property_named_like_the_index(self):
        assert lint(self.rule, mapped("map", ["item", "index"], member("item", "index"))) == ()

    def test_reduce_index_is_the_third_parameter(self):
        assert len(lint(self.rule, mapped("reduce", ["acc", "row", "i"], ident("i")))) == 1
        assert lint(self.rule, mapped("reduce", ["acc", "row", "i"], ident("row"))) == ()

    def test_non_iteration_callback(self):
        assert lint(self.rule, mapped("then", ["value", "index"], ident("index"))) == ()

    def test_key_outside_any_callback(self):
        assert lint(self.rule, jsx("li", attr("key", jsx_expr(ident("index"))))) == ()

    def test_other_attributes_are_ignored(self):
        element = jsx("li", attr("data-index", jsx_expr(ident("i"))))
        assert lint(self.rule, call(member("items", "map"), arrow(["item", "i"], element))) == ()


class TestInlineStyle:
    """jsx.no_inline_style and jsx.inline_style_static_only."""

    def test_inline_style_object(self):
        element = jsx("div", attr("style", jsx_expr(obj(prop("color", string("red"))))))
        violations = lint("jsx.no_inline_style", element)
        assert len(violations) == 1
        assert violations[0].rule_id == "jsx.no_inline_style"

    def test_style_reference_is_fine(self):
        element = jsx("div", attr("style", jsx_expr(member("styles", "box"))))
        assert lint("jsx.no_inline_style", element) == ()

    def test_other_attributes(self):
        element = jsx("div", attr("className", string("box", quote='"')))
        assert lint("jsx.no_inline_style", element) == ()

    def test_static_only_flags_literal_styles(self):
        static = obj(prop("margin", number(0)), prop("color", string("red")),
                     prop("top", node(K.OTHER, number(1), raw_kind="unary_expression")))
        violations = lint("jsx.inline_style_static_only", jsx("div", attr("style", jsx_expr(static))))
        assert len(violations) == 1

    def test_static_only_allows_computed_values(self):
        computed = obj(prop("width", ident("width")), prop("color", string("red")))
        assert lint("jsx.inline_style_static_only", jsx("div", attr("style", jsx_expr(computed)))) == ()

    def test_static_only_allows_substituted_templates(self):
        template = node(K.TEMPLATE_LITERAL, node(K.TEMPLATE_SUBSTITUTION, ident("w")), text="`${w}px`")
        element = jsx("div", attr("style", jsx_expr(obj(prop("width", template)))))
        assert lint("jsx.inline_style_static_only", element) == ()

    def test_static_only_is_off_by_default(self):
        meta = get_default_registry().lookup("jsx.inline_style_static_only").meta
        assert meta.default_severity == "off"

    def test_mutually_exclusive(self):
        config = {"jsx.no_inline_style": "warning", "jsx.inline_style_static_only": "warning"}
        ruleset = resolve_ruleset(get_default_registry(), config, profile=RuleProfile.NONE)
        element = jsx("div", attr("style", jsx_expr(obj(prop("color", string("red"))))))

        violations = TraversalEngine(ruleset).check_unit(source_unit(element)).violations

        assert [v.rule_id for v in violations] == ["jsx.no_inline_style"]


class TestBooleanPropShorthand:
    """`prop={true}` versus `prop`."""

    rule = "jsx.boolean_prop_shorthand"

    def test_explicit_true(self):
        violations = lint(self.rule, jsx("input", attr("disabled", jsx_expr(boolean(True)))))
        assert len(violations) == 1
        assert violations[0].meta["suggestion"] == "disabled"

    def test_shorthand_and_false_are_fine(self):
        element = jsx("input", attr("disabled"), attr("checked", jsx_expr(boolean(False))))
        assert lint(self.rule, element) == ()

    def test_never_mode(self):
        element = jsx("input", attr("disabled"), attr("readOnly", jsx_expr(boolean(True))))
        violations = lint(self.rule, element, options={"mode": "never"})
        assert [v.meta["suggestion"] for v in violations] == ["disabled={true}"]

    def test_invalid_mode(self):
        with pytest.raises(ConfigurationError):
            lint(self.rule, jsx("input"), options={"mode": "sometimes"})


class TestNoStringLiteralInBraces:
    """`title={'Save'}` versus `title="Save"`."""

    rule = "jsx.no_string_literal_in_braces"

    def test_braced_string(self):
        violations = lint(self.rule, jsx("button", attr("title", jsx_expr(string("Save")))))
        assert len(violations) == 1
        assert 'title="Save"' in violations[0].message

    def test_string_containing_double_quote_suggests_single_quotes(self):
        violations = lint(self.rule, jsx("p", attr("title", jsx_expr(string('say "hi"')))))
        assert violations[0].meta["suggestion"] == "'say \"hi\"'"

    def test_plain_string_attribute(self):
        assert lint(self.rule, jsx("button", attr("title", string("Save", quote='"')))) == ()

    def test_escapes_are_left_alone(self):
        assert lint(self.rule, jsx("p", attr("title", jsx_expr(string("a\\nb"))))) == ()

    def test_expressions_are_fine(self):
        assert lint(self.rule, jsx("p", attr("title", jsx_expr(ident("label"))))) == ()
