"""Rule: jsx.no_array_index_key

Detects the index parameter of a list-rendering callback used as a JSX key.

Examples:
- items.map((item, i) => <li key={i}>{item}</li>)              # BAD
- items.map((item, i) => <li key={`row-${i}`}>{item}</li>)     # BAD
- items.map(item => <li key={item.id}>{item}</li>)             # GOOD
"""

from typing import Iterator, Set, Tuple

from ..engine.nodes import FUNCTION_KINDS, Node, NodeKind
from ..engine.types import BaseRule, Finding, RuleMeta, WARNING
from ._common import attribute_name, attribute_value, callee_name, parameter_names

# Array methods whose callback receives (element, index)
ITERATION_METHODS = frozenset(["map", "flatMap", "forEach", "filter", "reduce"])


def index_parameters(ancestors: Tuple[Node, ...]) -> Set[str]:
    """Index parameter names of every enclosing `.map(...)`-style callback."""
    names: Set[str] = set()
    for position in range(2, len(ancestors)):
        function = ancestors[position]
        if function.kind not in FUNCTION_KINDS:
            continue
        arguments, call = ancestors[position - 1], ancestors[position - 2]
        if arguments.kind != NodeKind.ARGUMENTS or call.kind != NodeKind.CALL_EXPRESSION:
            continue
        method = callee_name(call)
        if method not in ITERATION_METHODS:
            continue
        params = parameter_names(function)
        # reduce passes (accumulator, element, index)
        slot = 2 if method == "reduce" else 1
        if len(params) > slot and params[slot]:
            names.add(params[slot])
    return names


class NoArrayIndexKeyRule(BaseRule):
    """Flag `key` attributes derived from an array index."""

    meta = RuleMeta(
        id="jsx.no_array_index_key",
        category="anti-pattern",
        applies_to=frozenset([NodeKind.JSX_ATTRIBUTE]),
        default_severity=WARNING,
        description="Array index used as a JSX key in a list-rendering callback",
    )

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options) -> Iterator[Finding]:
        if attribute_name(node) != "key":
            return
        value = attribute_value(node)
        if value is None or value.kind != NodeKind.JSX_EXPRESSION:
            return

        index_names = index_parameters(ancestors)
        if not index_names:
            return

        for candidate in value.walk():
            if (candidate.kind == NodeKind.IDENTIFIER and candidate.text in index_names
                    and candidate.field != "property"):
                yield self.report(
                    value,
                    f"Array index '{candidate.text}' used as a JSX key; use a stable id from the item",
                    index=candidate.text,
                )
                return


RULES = [NoArrayIndexKeyRule]
