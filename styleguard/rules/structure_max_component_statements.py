"""Rule: structure.max_component_statements

Detects components whose body has more top-level statements than the
configured threshold. A component is a function that renders JSX.
"""

from typing import Iterator, Optional, Tuple

from pydantic import Field

from ..engine.nodes import Node, NodeKind, declared_name
from ..engine.types import BaseRule, Finding, RuleMeta, RuleOptions, WARNING
from ._common import body_statements, renders_jsx


class MaxComponentStatementsOptions(RuleOptions):
    max_statements: int = Field(default=30, ge=1)


def component_name(node: Node, ancestors: Tuple[Node, ...]) -> Optional[str]:
    name = declared_name(node)
    if name is None and ancestors and ancestors[-1].kind == NodeKind.VARIABLE_DECLARATOR:
        name = declared_name(ancestors[-1])
    return name.text if name is not None else None


class MaxComponentStatementsRule(BaseRule):
    """Flag oversized component bodies."""

    meta = RuleMeta(
        id="structure.max_component_statements",
        category="structure",
        applies_to=frozenset([NodeKind.FUNCTION_DECL, NodeKind.ARROW_FUNCTION, NodeKind.FUNCTION_EXPRESSION]),
        default_severity=WARNING,
        description="Component body exceeds the statement limit",
        options=MaxComponentStatementsOptions,
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...],
              options: MaxComponentStatementsOptions) -> Iterator[Finding]:
        statements = body_statements(node)
        if len(statements) <= options.max_statements or not renders_jsx(node):
            return
        name = component_name(node, ancestors) or "<anonymous>"
        yield self.report(
            node,
            f"Component '{name}' has {len(statements)} statements (max {options.max_statements}); "
            f"split it into smaller components or hooks",
            statements=len(statements),
            max_statements=options.max_statements,
        )


RULES = [MaxComponentStatementsRule]
