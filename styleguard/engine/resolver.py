"""
Rule set resolution.

Merges the registry's built-in defaults with user configuration into an
immutable RuleSet. Resolution is a pure function of (registry, config,
profile, strict): the same inputs always produce an equal RuleSet.

Unknown rule ids policy: with ``strict=True`` (the default) an unknown id is
a ConfigurationError; with ``strict=False`` it is logged as a warning and
recorded in ``RuleSet.warnings``.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .errors import ConfigurationError
from .nodes import NodeKind
from .profiles import RuleProfile, baseline_severity, get_default_profile
from .registry import RuleRegistry
from .types import OFF, SEVERITY_ALIASES, Rule, RuleMeta, RuleOptions

logger = logging.getLogger(__name__)

ENTRY_KEYS = frozenset(["severity", "options"])


@dataclass(frozen=True)
class RuleSetting:
    """Resolved configuration of one rule for a run."""
    rule_id: str
    enabled: bool
    severity: str
    options: RuleOptions


class RuleSet:
    """Resolved, read-only mapping of rule id to enablement, severity and options.

    The kind -> rules dispatch index is built once here, in registration
    order, and shared by every traversal that uses this rule set.
    """

    def __init__(self, registry: RuleRegistry, settings: Mapping[str, RuleSetting],
                 warnings: Tuple[str, ...] = ()):
        self._registry = registry
        self._settings = MappingProxyType(dict(settings))
        self._warnings = tuple(warnings)

        unit_rules = []
        kind_index: Dict[NodeKind, List[Tuple[Rule, RuleSetting]]] = {}
        for rule in registry:
            setting = self._settings.get(rule.meta.id)
            if setting is None or not setting.enabled:
                continue
            if rule.meta.is_unit_rule:
                unit_rules.append((rule, setting))
            else:
                for kind in rule.meta.applies_to:
                    kind_index.setdefault(kind, []).append((rule, setting))

        self._unit_rules = tuple(unit_rules)
        self._kind_index = MappingProxyType({kind: tuple(entries) for kind, entries in kind_index.items()})

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def settings(self) -> Mapping[str, RuleSetting]:
        return self._settings

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self._warnings

    @property
    def unit_rules(self) -> Tuple[Tuple[Rule, RuleSetting], ...]:
        """Enabled unit-scoped rules with their settings."""
        return self._unit_rules

    def rules_for(self, kind: NodeKind) -> Tuple[Tuple[Rule, RuleSetting], ...]:
        """Enabled rules dispatched on a node kind, in registration order."""
        return self._kind_index.get(kind, ())

    def get(self, rule_id: str) -> Optional[RuleSetting]:
        return self._settings.get(rule_id)

    def is_enabled(self, rule_id: str) -> bool:
        setting = self._settings.get(rule_id)
        return setting is not None and setting.enabled

    def enabled_rule_ids(self) -> List[str]:
        """Ids of enabled rules, in registration order."""
        return [rule_id for rule_id in self._registry.get_rule_ids() if self.is_enabled(rule_id)]

    def fingerprint(self) -> Tuple[Tuple[str, str, str], ...]:
        """Hashable summary of the resolved settings, usable as a cache key."""
        return tuple(
            (rule_id, setting.severity, setting.options.model_dump_json())
            for rule_id, setting in self._settings.items()
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._registry is other._registry and self.fingerprint() == other.fingerprint()

    def __hash__(self) -> int:
        return hash(self.fingerprint())

    def __len__(self) -> int:
        return len(self._settings)


def resolve_ruleset(registry: RuleRegistry, config: Optional[Mapping[str, Any]] = None, *,
                    strict: bool = True, profile: Optional[RuleProfile] = None) -> RuleSet:
    """
    Resolve user configuration against the registry.

    Args:
        registry: Catalog of available rules
        config: Mapping of rule id to "off" | "warn" | "warning" | "error" |
            0 | 1 | 2 | {"severity": ..., "options": {...}} |
            [severity, options]. None means all defaults.
        strict: Treat unknown rule ids as fatal
        profile: Baseline profile (default: recommended)

    Returns:
        The resolved RuleSet

    Raises:
        ConfigurationError: On malformed entries, invalid options, or unknown
            ids in strict mode
    """
    if profile is None:
        profile = get_default_profile()
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise ConfigurationError("Rule configuration must be a mapping of rule id to setting")

    warnings = []
    for rule_id in config:
        if rule_id in registry:
            continue
        if strict:
            raise ConfigurationError("Unknown rule id", rule_id=str(rule_id))
        message = f"Unknown rule id '{rule_id}' in configuration; ignored"
        logger.warning(message)
        warnings.append(message)

    settings: Dict[str, RuleSetting] = {}
    for rule in registry:
        meta = rule.meta
        severity = baseline_severity(meta, profile)
        raw_options: Mapping[str, Any] = {}
        if meta.id in config:
            severity, raw_options = _parse_entry(meta.id, config[meta.id], severity)
        options = resolve_options(meta, raw_options)
        settings[meta.id] = RuleSetting(
            rule_id=meta.id,
            enabled=severity != OFF,
            severity=severity,
            options=options,
        )

    return RuleSet(registry, settings, tuple(warnings))


def resolve_options(meta: RuleMeta, raw_options: Any) -> RuleOptions:
    """Validate raw options against the rule's schema, filling in defaults."""
    if raw_options is None:
        raw_options = {}
    if not isinstance(raw_options, Mapping):
        raise ConfigurationError("Options must be a mapping of option name to value", rule_id=meta.id)
    try:
        return meta.options.model_validate(dict(raw_options))
    except ValidationError as exc:
        error = exc.errors()[0]
        loc = error.get("loc") or ()
        option = str(loc[0]) if loc else None
        raise ConfigurationError(f"Invalid option value: {error.get('msg')}", rule_id=meta.id,
                                 option=option) from exc


def _parse_entry(rule_id: str, entry: Any, baseline: str) -> Tuple[str, Mapping[str, Any]]:
    """Split one configuration entry into (severity, raw options)."""
    if isinstance(entry, Mapping):
        extra = set(entry) - ENTRY_KEYS
        if extra:
            raise ConfigurationError(f"Unexpected keys in rule entry: {', '.join(sorted(map(str, extra)))}",
                                     rule_id=rule_id)
        severity = baseline
        if "severity" in entry:
            severity = _normalize_severity(rule_id, entry["severity"])
        return severity, entry.get("options") or {}

    if isinstance(entry, (list, tuple)):
        if not 1 <= len(entry) <= 2:
            raise ConfigurationError("List entries must be [severity] or [severity, options]", rule_id=rule_id)
        severity = _normalize_severity(rule_id, entry[0])
        options = entry[1] if len(entry) == 2 else {}
        return severity, options

    return _normalize_severity(rule_id, entry), {}


def _normalize_severity(rule_id: str, value: Any) -> str:
    """Map a configured severity spelling onto error | warning | off."""
    # bool is an int subclass; True must not silently mean "warning"
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigurationError(f"Invalid severity {value!r}; expected off, warn, warning or error",
                                 rule_id=rule_id)
    key = value.strip().lower() if isinstance(value, str) else value
    severity = SEVERITY_ALIASES.get(key)
    if severity is None:
        raise ConfigurationError(f"Invalid severity {value!r}; expected off, warn, warning or error",
                                 rule_id=rule_id)
    return severity
