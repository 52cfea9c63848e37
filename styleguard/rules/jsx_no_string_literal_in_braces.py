"""Rule: jsx.no_string_literal_in_braces

`title={'Save'}` should be written `title="Save"`. Strings with escapes are
left alone since JSX attribute strings do not process them.
"""

from typing import Iterator, Tuple

from ..engine.nodes import Node, NodeKind, string_value
from ..engine.types import BaseRule, Finding, RuleMeta, WARNING
from ._common import attribute_name, attribute_value, expression_of


class NoStringLiteralInBracesRule(BaseRule):
    """Flag string literals wrapped in a JSX expression container."""

    meta = RuleMeta(
        id="jsx.no_string_literal_in_braces",
        category="style",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        default_severity=WARNING,
        description="String literal wrapped in braces as a JSX prop value",
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        value = attribute_value(node)
        if value is None or value.kind != NodeKind.JSX_EXPRESSION:
            return
        expression = expression_of(value)
        if expression is None or expression.kind != NodeKind.STRING_LITERAL:
            return
        literal = string_value(expression)
        if literal is None or "\\" in literal:
            return
        quote = "'" if '"' in literal else '"'
        name = attribute_name(node)
        yield self.report(value, f"Unnecessary braces around string literal; write {name}={quote}{literal}{quote}",
                          suggestion=f"{quote}{literal}{quote}")


RULES = [NoStringLiteralInBracesRule]
