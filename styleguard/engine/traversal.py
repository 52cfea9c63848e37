"""
Traversal engine.

Walks one source unit depth-first, pre-order, and dispatches the rules of a
resolved RuleSet on the node kinds they are registered for. Unit-scoped rules
run once, before the walk, so whole-file violations come first.

The walk is iterative: the explicit stack bounds memory by tree size and the
ancestor chain is a list that shrinks as the walk unwinds. Nodes carry no
parent pointers.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .errors import StructuralLimitError
from .nodes import Node
from .resolver import RuleSet, RuleSetting
from .suppressions import filter_suppressed_violations
from .types import ERROR, Rule, SourceUnit, UnitFailure, UnitResult, Violation

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 512


class UnitState(str, Enum):
    """Lifecycle of one unit inside the engine."""
    PENDING = "pending"
    VISITING = "visiting"
    DONE = "done"
    FAILED = "failed"


def _mutually_exclusive(first: Rule, second: Rule) -> bool:
    return (second.meta.id in first.meta.exclusive_with
            or first.meta.id in second.meta.exclusive_with)


class UnitTraversal:
    """Single traversal of one source unit: PENDING -> VISITING -> DONE | FAILED."""

    def __init__(self, engine: "TraversalEngine", unit: SourceUnit):
        self.engine = engine
        self.unit = unit
        self.state = UnitState.PENDING
        self.nodes_visited = 0

    def run(self) -> UnitResult:
        """Walk the unit and return its result. Never raises for unit-level faults."""
        if self.state != UnitState.PENDING:
            raise RuntimeError(f"Traversal of {self.unit.path} already ran ({self.state.value})")

        self.state = UnitState.VISITING
        try:
            violations = self._walk()
        except StructuralLimitError as exc:
            self.state = UnitState.FAILED
            logger.warning("Skipping %s: %s", self.unit.path, exc.message)
            return UnitResult(
                path=self.unit.path,
                failure=UnitFailure(kind=exc.kind, message=exc.message, span=exc.span),
            )

        if self.engine.apply_suppressions and self.unit.text:
            violations = filter_suppressed_violations(violations, self.unit.text)

        self.state = UnitState.DONE
        return UnitResult(path=self.unit.path, violations=tuple(violations))

    def _walk(self) -> List[Violation]:
        ruleset = self.engine.ruleset
        max_depth = self.engine.max_depth
        max_nodes = self.engine.max_nodes
        root = self.unit.root

        violations = self._dispatch(ruleset.unit_rules, root, ())

        stack: List[Tuple[Node, int]] = [(root, 0)]
        ancestors: List[Node] = []
        while stack:
            node, depth = stack.pop()
            if depth > max_depth:
                raise StructuralLimitError(
                    f"Tree depth exceeds the maximum of {max_depth}", limit=max_depth, span=node.span)

            self.nodes_visited += 1
            if max_nodes is not None and self.nodes_visited > max_nodes:
                raise StructuralLimitError(
                    f"Tree size exceeds the maximum of {max_nodes} nodes", limit=max_nodes, span=node.span)

            del ancestors[depth:]
            entries = ruleset.rules_for(node.kind)
            if entries:
                violations.extend(self._dispatch(entries, node, tuple(ancestors)))

            if node.children:
                ancestors.append(node)
                stack.extend((child, depth + 1) for child in reversed(node.children))

        return violations

    def _dispatch(self, entries: Sequence[Tuple[Rule, RuleSetting]], node: Node,
                  ancestors: Tuple[Node, ...]) -> List[Violation]:
        """Run every applicable rule on a node.

        All violations are kept, except that when two mutually exclusive rules
        both fire on the node only the one registered first keeps its findings.
        """
        fired: List[Rule] = []
        collected: List[Violation] = []
        for rule, setting in entries:
            produced = self._invoke(rule, setting, node, ancestors)
            if not produced:
                continue
            reportable = [v for v in produced if not v.internal]
            if reportable and any(_mutually_exclusive(rule, other) for other in fired):
                logger.debug("Dropping %s on %s: mutually exclusive with an earlier rule",
                             rule.meta.id, self.unit.path)
                collected.extend(v for v in produced if v.internal)
                continue
            if reportable:
                fired.append(rule)
            collected.extend(produced)
        return collected

    def _invoke(self, rule: Rule, setting: RuleSetting, node: Node,
                ancestors: Tuple[Node, ...]) -> List[Violation]:
        """Call one rule, converting findings into violations and faults into internal errors."""
        rule_id = rule.meta.id
        try:
            return [
                Violation(
                    rule_id=rule_id,
                    severity=setting.severity,
                    message=finding.message,
                    span=finding.span,
                    source_unit_id=self.unit.path,
                    meta=finding.meta,
                )
                for finding in rule.visit(node, ancestors, setting.options) or ()
            ]
        except Exception as exc:
            logger.warning("Rule '%s' failed on %s at offset %d: %s: %s",
                           rule_id, self.unit.path, node.span.start, type(exc).__name__, exc)
            logger.debug("Rule failure traceback", exc_info=True)
            return [Violation(
                rule_id=rule_id,
                severity=ERROR,
                message=f"Internal rule error in '{rule_id}': {type(exc).__name__}: {exc}",
                span=node.span,
                source_unit_id=self.unit.path,
                meta={"internal": True, "exception": type(exc).__name__, "node_kind": node.kind.value},
                internal=True,
            )]


class TraversalEngine:
    """Depth-first dispatcher invoking the rules of a RuleSet on source units.

    The engine holds no per-unit state and can be shared by worker threads.
    """

    def __init__(self, ruleset: RuleSet, max_depth: int = DEFAULT_MAX_DEPTH,
                 max_nodes: Optional[int] = None, apply_suppressions: bool = True):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if max_nodes is not None and max_nodes < 1:
            raise ValueError("max_nodes must be at least 1")
        self.ruleset = ruleset
        self.max_depth = max_depth
        self.max_nodes = max_nodes
        self.apply_suppressions = apply_suppressions

    def traversal(self, unit: SourceUnit) -> UnitTraversal:
        """Create a pending traversal for a unit."""
        return UnitTraversal(self, unit)

    def check_unit(self, unit: SourceUnit) -> UnitResult:
        """Check one unit and return its violations in traversal order."""
        return self.traversal(unit).run()
