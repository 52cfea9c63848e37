"""
styleguard engine package.

Rule registry, rule set resolution, traversal, aggregation and the parallel
runner. The tree-sitter front-end lives in tsx_adapter and is imported
separately so the engine can be used with hand-built trees.
"""

from .nodes import Node, NodeKind, Span

from .types import (
    Finding, RuleMeta, Rule, BaseRule, RuleOptions, NoOptions, Violation,
    SourceUnit, UnitResult, UnitFailure, ERROR, WARNING, OFF, UNIT
)

from .errors import (
    StyleguardError, ConfigurationError, ParseError, StructuralLimitError
)

from .registry import RuleRegistry, get_default_registry, build_registry

from .resolver import RuleSet, RuleSetting, resolve_ruleset

from .traversal import TraversalEngine

from .aggregator import Outcome, Report, UnitReport, ViolationAggregator

from .runner import LintRunner, SourceParser

__all__ = [
    # Tree model
    "Node", "NodeKind", "Span",

    # Types
    "Finding", "RuleMeta", "Rule", "BaseRule", "RuleOptions", "NoOptions", "Violation",
    "SourceUnit", "UnitResult", "UnitFailure", "ERROR", "WARNING", "OFF", "UNIT",

    # Errors
    "StyleguardError", "ConfigurationError", "ParseError", "StructuralLimitError",

    # Registry and resolution
    "RuleRegistry", "get_default_registry", "build_registry",
    "RuleSet", "RuleSetting", "resolve_ruleset",

    # Execution
    "TraversalEngine", "Outcome", "Report", "UnitReport", "ViolationAggregator",
    "LintRunner", "SourceParser",
]
