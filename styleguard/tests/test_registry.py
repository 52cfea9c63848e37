"""
Tests for the rule registry and rule discovery.
"""

import pytest

from styleguard.engine.errors import ConfigurationError
from styleguard.engine.nodes import NodeKind
from styleguard.engine.registry import RuleRegistry, build_registry, get_default_registry
from styleguard.engine.types import BaseRule, RuleMeta

BUILTIN_IDS = [
    "css.no_literal_color",
    "exports.no_default",
    "imports.no_conditional_require",
    "imports.order",
    "jsx.boolean_prop_shorthand",
    "jsx.no_inline_style",
    "jsx.inline_style_static_only",
    "jsx.no_array_index_key",
    "jsx.no_string_literal_in_braces",
    "naming.convention",
    "structure.max_component_statements",
    "types.no_explicit_any",
]


def make_rule(rule_id, kinds=(NodeKind.IDENTIFIER,), exclusive_with=()):
    class _Rule(BaseRule):
        meta = RuleMeta(id=rule_id, category="style", applies_to=frozenset(kinds),
                        exclusive_with=exclusive_with)

        def visit(self, node, ancestors, options):
            return []

    return _Rule()


class TestRuleRegistry:
    """Registration, lookup and freezing."""

    def setup_method(self):
        self.registry = RuleRegistry()

    def test_register_and_lookup(self):
        rule = make_rule("style.a")
        self.registry.register(rule)
        assert self.registry.lookup("style.a") is rule
        assert "style.a" in self.registry
        assert len(self.registry) == 1

    def test_lookup_unknown_returns_none(self):
        assert self.registry.lookup("style.missing") is None

    def test_duplicate_id_is_rejected(self):
        first = make_rule("style.a")
        self.registry.register(first)
        with pytest.raises(ConfigurationError) as excinfo:
            self.registry.register(make_rule("style.a"))
        assert excinfo.value.rule_id == "style.a"
        # The original registration is untouched
        assert self.registry.lookup("style.a") is first

    def test_frozen_registry_rejects_registration(self):
        self.registry.register(make_rule("style.a"))
        self.registry.freeze()
        assert self.registry.frozen
        with pytest.raises(ConfigurationError):
            self.registry.register(make_rule("style.b"))

    def test_self_exclusive_rule_is_rejected(self):
        with pytest.raises(ConfigurationError):
            self.registry.register(make_rule("style.a", exclusive_with=("style.a",)))

    def test_registration_order_is_kept(self):
        registry = build_registry([make_rule("style.z"), make_rule("style.a"), make_rule("style.m")])
        assert registry.get_rule_ids() == ["style.z", "style.a", "style.m"]


class TestRuleMeta:
    """Descriptor validation."""

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ValueError):
            RuleMeta(id="x.y", category="bogus", applies_to=frozenset([NodeKind.IDENTIFIER]))

    def test_unknown_default_severity_is_rejected(self):
        with pytest.raises(ValueError):
            RuleMeta(id="x.y", category="style", applies_to=frozenset([NodeKind.IDENTIFIER]),
                     default_severity="fatal")

    def test_applies_to_is_frozen(self):
        meta = RuleMeta(id="x.y", category="style", applies_to=[NodeKind.IDENTIFIER])
        assert meta.applies_to == frozenset([NodeKind.IDENTIFIER])
        assert not meta.is_unit_rule


class TestDefaultRegistry:
    """Discovery of the built-in rule catalog."""

    def test_all_builtin_rules_are_discovered(self):
        registry = get_default_registry()
        assert sorted(registry.get_rule_ids()) == sorted(BUILTIN_IDS)
        assert registry.frozen

    def test_discovery_order_follows_module_names(self):
        ids = get_default_registry().get_rule_ids()
        # jsx_inline_style.py registers both of its rules, no_inline_style first
        assert ids.index("jsx.no_inline_style") < ids.index("jsx.inline_style_static_only")
        assert ids.index("css.no_literal_color") < ids.index("types.no_explicit_any")

    def test_default_registry_is_shared(self):
        assert get_default_registry() is get_default_registry()

    def test_inline_style_rules_are_mutually_exclusive(self):
        registry = get_default_registry()
        static_only = registry.lookup("jsx.inline_style_static_only")
        assert static_only.meta.default_severity == "off"
        assert "jsx.no_inline_style" in static_only.meta.exclusive_with
