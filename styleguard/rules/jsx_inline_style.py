"""Rules: jsx.no_inline_style, jsx.inline_style_static_only

Two opposite conventions for `style={{...}}` on JSX elements:

- jsx.no_inline_style bans inline style objects outright.
- jsx.inline_style_static_only allows inline styles for high-cardinality
  (computed) values only and flags style objects made entirely of literals.
  It is off by default and mutually exclusive with jsx.no_inline_style:
  when both fire on one attribute, only jsx.no_inline_style is reported.
"""

from typing import Iterator, Tuple

from ..engine.nodes import Node, NodeKind
from ..engine.types import OFF, BaseRule, Finding, RuleMeta, WARNING
from ._common import is_static_value, style_object


class NoInlineStyleRule(BaseRule):
    """Flag inline style objects on JSX elements."""

    meta = RuleMeta(
        id="jsx.no_inline_style",
        category="style",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        default_severity=WARNING,
        description="Inline style object on a JSX element",
        exclusive_with=("jsx.inline_style_static_only",),
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        if style_object(node) is not None:
            yield self.report(node, "Inline style object; move styles to a stylesheet or styled component")


class InlineStyleStaticOnlyRule(BaseRule):
    """Flag inline style objects whose values are all static literals."""

    meta = RuleMeta(
        id="jsx.inline_style_static_only",
        category="style",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        default_severity=OFF,
        description="Inline styles are reserved for computed values; static ones belong in a stylesheet",
        exclusive_with=("jsx.no_inline_style",),
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        obj = style_object(node)
        if obj is None or not obj.children:
            return
        for member in obj.children:
            if member.kind == NodeKind.COMMENT:
                continue
            if member.kind != NodeKind.OBJECT_PROPERTY:
                return
            value = member.child_by_field("value")
            if value is None or not is_static_value(value):
                return
        yield self.report(node, "Inline style has only static values; move it to a stylesheet")


RULES = [NoInlineStyleRule, InlineStyleStaticOnlyRule]
