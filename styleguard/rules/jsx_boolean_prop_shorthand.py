"""Rule: jsx.boolean_prop_shorthand

Enforces one spelling for `true` boolean props.

- mode "always" (default): `<Input disabled={true} />` should be `<Input disabled />`
- mode "never": `<Input disabled />` should be `<Input disabled={true} />`
"""

from typing import Iterator, Literal, Tuple

from ..engine.nodes import Node, NodeKind
from ..engine.types import BaseRule, Finding, RuleMeta, RuleOptions, WARNING
from ._common import attribute_name, attribute_value, expression_of


class BooleanPropShorthandOptions(RuleOptions):
    mode: Literal["always", "never"] = "always"


class BooleanPropShorthandRule(BaseRule):
    """Flag `prop={true}` (or bare `prop` in "never" mode)."""

    meta = RuleMeta(
        id="jsx.boolean_prop_shorthand",
        category="style",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        default_severity=WARNING,
        description="Boolean props set to true use the shorthand form",
        options=BooleanPropShorthandOptions,
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...],
              options: BooleanPropShorthandOptions) -> Iterator[Finding]:
        name = attribute_name(node)
        if not name:
            return
        value = attribute_value(node)

        if options.mode == "always":
            if value is None or value.kind != NodeKind.JSX_EXPRESSION:
                return
            expression = expression_of(value)
            if expression is not None and expression.kind == NodeKind.BOOLEAN_LITERAL \
                    and expression.text == "true":
                yield self.report(node, f"Boolean prop '{name}' set to {{true}}; write it as '{name}'",
                                  suggestion=name)
        elif value is None:
            yield self.report(node, f"Boolean prop '{name}' uses the shorthand; write '{name}={{true}}'",
                              suggestion=f"{name}={{true}}")


RULES = [BooleanPropShorthandRule]
