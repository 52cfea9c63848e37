"""Rule: imports.no_conditional_require

Detects `require(...)` calls nested under a conditional (if / ternary /
switch, or a `&&`, `||`, `??` expression). Conditional loading hides
dependencies from bundlers and static analysis.

Examples:
- if (isDev) { require('./devtools'); }        # BAD
- const lib = flag ? require('a') : require('b')  # BAD
- const path = require('path');               # GOOD
"""

from typing import Iterator, Optional, Tuple

from ..engine.nodes import Node, NodeKind, string_value
from ..engine.types import BaseRule, Finding, RuleMeta, WARNING
from ._common import call_arguments

LOGICAL_OPERATORS = frozenset(["&&", "||", "??"])


def enclosing_conditional(ancestors: Tuple[Node, ...]) -> Optional[Node]:
    for ancestor in reversed(ancestors):
        if ancestor.kind == NodeKind.CONDITIONAL:
            return ancestor
        if ancestor.raw_kind == "binary_expression" and ancestor.flags & LOGICAL_OPERATORS:
            return ancestor
    return None


class NoConditionalRequireRule(BaseRule):
    """Flag require() calls under a conditional."""

    meta = RuleMeta(
        id="imports.no_conditional_require",
        category="imports",
        applies_to=frozenset([NodeKind.CALL_EXPRESSION]),
        default_severity=WARNING,
        description="require() inside a conditional; use a top-level import",
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        callee = node.child_by_field("function")
        if callee is None and node.children:
            callee = node.children[0]
        if callee is None or callee.kind != NodeKind.IDENTIFIER or callee.text != "require":
            return
        if enclosing_conditional(ancestors) is None:
            return

        arguments = call_arguments(node)
        module = string_value(arguments[0]) if arguments and arguments[0].kind == NodeKind.STRING_LITERAL else None
        what = f"'{module}'" if module else "a module"
        yield self.report(node, f"Conditional require() of {what}; use a top-level import", module=module)


RULES = [NoConditionalRequireRule]
