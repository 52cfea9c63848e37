"""
Core types for the styleguard engine.

This module provides the shared dataclasses and protocols used across the
engine and the rule catalog: rule metadata, the rule protocol, findings
produced by rules and the violations the engine builds from them.
"""

from dataclasses import dataclass
from typing import (Any, Dict, FrozenSet, Iterable, Literal, Optional, Protocol, Tuple, Type,
                    Union)

from pydantic import BaseModel, ConfigDict

from .nodes import Node, NodeKind, Span


# Type aliases for clarity
Severity = Literal["error", "warning"]
SeveritySetting = Literal["error", "warning", "off"]
Category = Literal["naming", "imports", "structure", "style", "anti-pattern"]

ERROR = "error"
WARNING = "warning"
OFF = "off"

SEVERITY_SETTINGS: Tuple[str, ...] = (ERROR, WARNING, OFF)
CATEGORIES: Tuple[str, ...] = ("naming", "imports", "structure", "style", "anti-pattern")

# Accepted spellings in user configuration
SEVERITY_ALIASES: Dict[Any, str] = {
    "error": ERROR,
    "warning": WARNING,
    "warn": WARNING,
    "off": OFF,
    2: ERROR,
    1: WARNING,
    0: OFF,
}

# Scope marker for rules that run once per source unit
UNIT = "unit"
AppliesTo = Union[FrozenSet[NodeKind], Literal["unit"]]


class RuleOptions(BaseModel):
    """Base class for rule option schemas.

    Subclasses declare typed, defaulted fields. Unknown option names are
    rejected and resolved options are immutable.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)


class NoOptions(RuleOptions):
    """Schema for rules that take no options."""


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule.

    Attributes:
        id: Globally unique rule identifier (e.g., "naming.convention")
        category: Rule category for grouping
        applies_to: Node kinds the rule is dispatched on, or UNIT
        default_severity: Severity used when configuration is silent
        description: Human-readable description
        options: pydantic model describing the rule's options
        exclusive_with: Rule ids whose findings on the same node conflict
    """
    id: str
    category: Category
    applies_to: AppliesTo
    default_severity: SeveritySetting = WARNING
    description: str = ""
    options: Type[RuleOptions] = NoOptions
    exclusive_with: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Rule '{self.id}' has unknown category '{self.category}'")
        if self.default_severity not in SEVERITY_SETTINGS:
            raise ValueError(f"Rule '{self.id}' has unknown default severity '{self.default_severity}'")
        if self.applies_to != UNIT:
            object.__setattr__(self, 'applies_to', frozenset(self.applies_to))
        object.__setattr__(self, 'exclusive_with', tuple(self.exclusive_with))

    @property
    def is_unit_rule(self) -> bool:
        return self.applies_to == UNIT


@dataclass(frozen=True)
class Finding:
    """What a rule reports: a message anchored at a span."""
    message: str
    span: Span
    meta: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Violation:
    """A reported rule breach, stamped with rule id, severity and unit."""
    rule_id: str
    severity: Severity
    message: str
    span: Span
    source_unit_id: str
    meta: Optional[Dict[str, Any]] = None
    internal: bool = False

    @property
    def sort_key(self) -> Tuple[int, str]:
        return (self.span.start, self.rule_id)

    @property
    def dedup_key(self) -> Tuple[str, int, int, str]:
        return (self.rule_id, self.span.start, self.span.end, self.message)


@dataclass(frozen=True)
class SourceUnit:
    """One input file's parsed tree plus its identity."""
    path: str
    root: Node
    text: Optional[str] = None

    def __post_init__(self):
        if self.root.kind != NodeKind.UNIT:
            raise ValueError(f"Source unit '{self.path}' must be rooted at a Unit node, got {self.root.kind.value}")


class Rule(Protocol):
    """Protocol for all rules in the engine.

    Rules are pure: no shared mutable state, no I/O, deterministic for a
    given node, ancestor chain and options.
    """
    meta: RuleMeta

    def visit(self, node: Node, ancestors: Tuple[Node, ...], options: Any) -> Iterable[Finding]:
        """Check one node and return findings.

        Args:
            node: The node being visited (the Unit root for unit rules)
            ancestors: Chain from the root down to the node's parent
            options: Resolved options, an instance of meta.options

        Returns:
            Iterable of findings for this node
        """
        ...


class BaseRule:
    """Convenience base class for built-in rules."""

    meta: RuleMeta

    def report(self, node: Node, message: str, **meta: Any) -> Finding:
        """Build a finding anchored at `node`."""
        return Finding(message=message, span=node.span, meta=meta or None)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.meta.id}>"


@dataclass(frozen=True)
class UnitFailure:
    """Why a unit contributed no violations."""
    kind: str
    message: str
    span: Optional[Span] = None


@dataclass(frozen=True)
class UnitResult:
    """Outcome of checking one source unit."""
    path: str
    violations: Tuple[Violation, ...] = ()
    failure: Optional[UnitFailure] = None

    @property
    def failed(self) -> bool:
        return self.failure is not None
