"""Rule: exports.no_default

Default exports are banned; named exports keep import names consistent
across the codebase and work with re-export tooling.

Examples:
- export default function App() {}      # BAD
- export function App() {}              # GOOD
"""

from typing import Iterator, Tuple

from ..engine.nodes import Node, NodeKind
from ..engine.types import BaseRule, Finding, RuleMeta, WARNING


class NoDefaultExportRule(BaseRule):
    """Flag `export default` statements."""

    meta = RuleMeta(
        id="exports.no_default",
        category="anti-pattern",
        applies_to=frozenset([NodeKind.EXPORT_DEFAULT]),
        default_severity=WARNING,
        description="Default export; use a named export instead",
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        yield self.report(node, "Default export; use a named export instead")


RULES = [NoDefaultExportRule]
