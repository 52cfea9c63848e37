"""Rule: types.no_explicit_any

Detects explicit `any` in type positions.

Examples:
- function parse(input: any) {}        # BAD
- function parse(input: unknown) {}    # GOOD
"""

from typing import Iterator, Tuple

from ..engine.nodes import Node, NodeKind
from ..engine.types import BaseRule, Finding, RuleMeta, WARNING


class NoExplicitAnyRule(BaseRule):
    """Flag the `any` type."""

    meta = RuleMeta(
        id="types.no_explicit_any",
        category="anti-pattern",
        applies_to=frozenset([NodeKind.TYPE_REFERENCE]),
        default_severity=WARNING,
        description="Explicit 'any' type annotation",
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        if node.text == "any":
            yield self.report(node, "Explicit 'any' type; use a specific type or 'unknown'")


RULES = [NoExplicitAnyRule]
