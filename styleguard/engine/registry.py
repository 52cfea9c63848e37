"""
Registry for rules.

This module provides the catalog of rules keyed by id. The default registry
is populated once from the built-in rule package and frozen; it is shared
read-only by every run and every worker thread afterwards.
"""

import importlib
import logging
import pkgutil
import threading
from typing import Dict, Iterator, List, Optional

from .errors import ConfigurationError
from .types import Rule

logger = logging.getLogger(__name__)

BUILTIN_RULES_PACKAGE = "styleguard.rules"


class RuleRegistry:
    """Central registry for rules."""

    def __init__(self):
        self._rules: List[Rule] = []
        self._rule_index: Dict[str, Rule] = {}  # id -> rule
        self._frozen = False

    def register(self, rule: Rule) -> None:
        """Register a rule in the registry.

        Raises:
            ConfigurationError: If the id is already taken or the registry
                is frozen
        """
        rule_id = rule.meta.id
        if self._frozen:
            raise ConfigurationError("Registry is frozen; rules must be registered at startup", rule_id=rule_id)
        if rule_id in self._rule_index:
            raise ConfigurationError(
                f"Duplicate rule id (already registered by {self._rule_index[rule_id]!r})",
                rule_id=rule_id,
            )
        for other_id in rule.meta.exclusive_with:
            if other_id == rule_id:
                raise ConfigurationError("A rule cannot be mutually exclusive with itself", rule_id=rule_id)

        self._rules.append(rule)
        self._rule_index[rule_id] = rule
        logger.debug("Registered rule %s", rule_id)

    def lookup(self, rule_id: str) -> Optional[Rule]:
        """Get rule by id, or None if not found."""
        return self._rule_index.get(rule_id)

    def freeze(self) -> "RuleRegistry":
        """Make the registry immutable."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_all_rules(self) -> List[Rule]:
        """Get all registered rules, in registration order."""
        return self._rules.copy()

    def get_rule_ids(self) -> List[str]:
        """Get all registered rule IDs, in registration order."""
        return list(self._rule_index.keys())

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rule_index

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def discover_rules(self, package_name: str = BUILTIN_RULES_PACKAGE) -> int:
        """
        Discover and register rules from a package.

        Every submodule is imported in sorted order and its module-level
        ``RULES`` list is registered. Import failures propagate: a broken
        built-in rule is a programming error.

        Args:
            package_name: Package to discover from

        Returns:
            Number of rules discovered and registered
        """
        initial_count = len(self._rules)
        package = importlib.import_module(package_name)

        module_names = sorted(
            modname for _, modname, ispkg in pkgutil.iter_modules(package.__path__, package.__name__ + ".")
            if not ispkg
        )
        for modname in module_names:
            module = importlib.import_module(modname)
            self._extract_rules_from_module(module)

        discovered = len(self._rules) - initial_count
        logger.debug("Discovered %d rules from %s", discovered, package_name)
        return discovered

    def _extract_rules_from_module(self, module) -> None:
        """Register the RULES list of a module."""
        rules = getattr(module, 'RULES', None)
        if rules is None:
            return
        if not isinstance(rules, (list, tuple)):
            raise ConfigurationError(f"{module.__name__}.RULES must be a list of rules")
        for rule in rules:
            # Classes are instantiated, instances are registered as-is
            if isinstance(rule, type):
                rule = rule()
            self.register(rule)


_default_registry: Optional[RuleRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> RuleRegistry:
    """Get the process-wide registry of built-in rules, building it on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            registry = RuleRegistry()
            registry.discover_rules(BUILTIN_RULES_PACKAGE)
            _default_registry = registry.freeze()
        return _default_registry


def build_registry(rules: List[Rule]) -> RuleRegistry:
    """Build and freeze a registry from an explicit list of rules."""
    registry = RuleRegistry()
    for rule in rules:
        registry.register(rule)
    return registry.freeze()
