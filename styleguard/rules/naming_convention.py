"""
Rule: naming.convention

Checks identifier casing by declaration kind and suggests a compliant name.

- PascalCase: classes, interfaces, type aliases, enums and components
  (functions that render JSX, templates tagged with one of `component_tags`)
- camelCase: variables and functions
- UPPER_SNAKE_CASE: module-level constants initialised with a primitive
  literal, a negative number or a template without substitutions

Module-level constants bound to other tagged templates (gql`...`, sql`...`)
may use either the variable or the constant style.

Examples:
- class myComponent {}          # BAD: classes are PascalCase
- const maxRetries = 3;          # BAD: module-level constant, use MAX_RETRIES
- function UserCard() { return <div/>; }   # GOOD: component
"""

import re
from typing import Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import field_validator

from ..engine.nodes import Node, NodeKind, declared_name
from ..engine.types import BaseRule, Finding, RuleMeta, RuleOptions, WARNING
from ._common import is_static_value, renders_jsx, template_tag

Style = Literal["camel", "pascal", "upper_snake", "snake"]

DEFAULT_MAP: Dict[str, str] = {
    "class": "pascal",
    "interface": "pascal",
    "type": "pascal",
    "enum": "pascal",
    "component": "pascal",
    "function": "camel",
    "variable": "camel",
    "const": "upper_snake",
}

STYLE_LABELS = {
    "camel": "camelCase",
    "pascal": "PascalCase",
    "upper_snake": "UPPER_SNAKE_CASE",
    "snake": "snake_case",
}

DECLARATION_LABELS = {
    "class": "Class",
    "interface": "Interface",
    "type": "Type alias",
    "enum": "Enum",
    "component": "Component",
    "function": "Function",
    "variable": "Variable",
    "const": "Constant",
}

_KIND_BY_NODE = {
    NodeKind.CLASS_DECL: "class",
    NodeKind.INTERFACE_DECL: "interface",
    NodeKind.TYPE_ALIAS_DECL: "type",
    NodeKind.ENUM_DECL: "enum",
}

_MODULE_LEVEL_KINDS = frozenset([NodeKind.UNIT, NodeKind.EXPORT_NAMED, NodeKind.EXPORT_DEFAULT])


class NamingConventionOptions(RuleOptions):
    naming_map: Dict[str, Style] = {}
    allow_leading_underscore: bool = True
    component_tags: List[str] = ["styled"]

    @field_validator("naming_map")
    @classmethod
    def _known_kinds(cls, value: Dict[str, str]) -> Dict[str, str]:
        unknown = sorted(set(value) - set(DEFAULT_MAP))
        if unknown:
            raise ValueError(f"unknown declaration kinds {unknown}; expected some of {sorted(DEFAULT_MAP)}")
        return value


def _to_snake(s: str) -> str:
    """Convert to snake_case: fooBar -> foo_bar"""
    s = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", s)
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s)
    return re.sub(r"[\W]+", "_", s).strip("_").lower()


def _words(s: str):
    # Already upper-snake names split on underscores only
    if s.isupper():
        return [p.lower() for p in s.split("_") if p]
    return [p for p in re.split(r"[_\W]+", _to_snake(s)) if p]


def convert(style: str, name: str) -> str:
    """Convert a name to the given style."""
    words = _words(name.strip("_"))
    if not words:
        return name
    if style == "snake":
        return "_".join(words)
    if style == "upper_snake":
        return "_".join(words).upper()
    if style == "pascal":
        return "".join(w.capitalize() for w in words)
    head, *rest = words
    return head + "".join(w.capitalize() for w in rest)


def style_ok(style: str, name: str) -> bool:
    """Check if a name matches the given style."""
    if style == "snake":
        return bool(re.fullmatch(r"[a-z][a-z0-9_]*", name))
    if style == "camel":
        return bool(re.fullmatch(r"[a-z$][A-Za-z0-9$]*", name))
    if style == "pascal":
        return bool(re.fullmatch(r"[A-Z][A-Za-z0-9]*", name))
    if style == "upper_snake":
        return bool(re.fullmatch(r"[A-Z][A-Z0-9_]*", name))
    return True


class NamingConventionRule(BaseRule):
    """Flag declarations whose casing does not match their kind."""

    meta = RuleMeta(
        id="naming.convention",
        category="naming",
        applies_to=frozenset([
            NodeKind.CLASS_DECL,
            NodeKind.INTERFACE_DECL,
            NodeKind.TYPE_ALIAS_DECL,
            NodeKind.ENUM_DECL,
            NodeKind.FUNCTION_DECL,
            NodeKind.VARIABLE_DECLARATOR,
        ]),
        default_severity=WARNING,
        description="Identifier casing by declaration kind (PascalCase, camelCase, UPPER_SNAKE_CASE)",
        options=NamingConventionOptions,
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...],
              options: NamingConventionOptions) -> Iterator[Finding]:
        name_node = declared_name(node)
        if name_node is None or not name_node.text:
            return

        decl_kind = self._declaration_kind(node, ancestors, options)
        style = options.naming_map.get(decl_kind, DEFAULT_MAP[decl_kind])
        accepted = [style]
        if decl_kind == "variable" and self._is_tagged_module_constant(node, ancestors):
            accepted.append(options.naming_map.get("const", DEFAULT_MAP["const"]))

        name = name_node.text
        core = name.lstrip("_") if options.allow_leading_underscore else name
        if core and any(style_ok(s, core) for s in accepted):
            return

        suggested = convert(style, name)
        if options.allow_leading_underscore and name.startswith("_"):
            suggested = name[:len(name) - len(name.lstrip("_"))] + suggested

        label = DECLARATION_LABELS[decl_kind]
        expected = STYLE_LABELS[style]
        message = f"{label} '{name}' should be {expected}"
        if suggested != name:
            message += f" (suggested: '{suggested}')"
        yield self.report(name_node, message,
                          expected=expected, declaration=decl_kind, suggested_name=suggested)

    def _declaration_kind(self, node: Node, ancestors: Tuple[Node, ...],
                          options: NamingConventionOptions) -> str:
        if node.kind in _KIND_BY_NODE:
            return _KIND_BY_NODE[node.kind]
        if node.kind == NodeKind.FUNCTION_DECL:
            return "component" if renders_jsx(node) else "function"
        return self._variable_kind(node, ancestors, options)

    def _variable_kind(self, node: Node, ancestors: Tuple[Node, ...],
                       options: NamingConventionOptions) -> str:
        value: Optional[Node] = node.child_by_field("value")
        if value is not None:
            if value.kind in (NodeKind.ARROW_FUNCTION, NodeKind.FUNCTION_EXPRESSION):
                return "component" if renders_jsx(value) else "function"
            if value.kind == NodeKind.TAGGED_TEMPLATE and template_tag(value) in options.component_tags:
                return "component"

        if self._is_module_constant(ancestors) and value is not None and is_static_value(value):
            return "const"
        return "variable"

    @staticmethod
    def _is_module_constant(ancestors: Tuple[Node, ...]) -> bool:
        declaration = ancestors[-1] if ancestors else None
        return (declaration is not None and declaration.has_flag("const")
                and all(a.kind in _MODULE_LEVEL_KINDS for a in ancestors[:-1]))

    def _is_tagged_module_constant(self, node: Node, ancestors: Tuple[Node, ...]) -> bool:
        value = node.child_by_field("value")
        return (value is not None and value.kind == NodeKind.TAGGED_TEMPLATE
                and self._is_module_constant(ancestors))


RULES = [NamingConventionRule]
