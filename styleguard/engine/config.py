"""
Configuration file loading for styleguard.

The engine itself only consumes an already-parsed mapping; this module is the
CLI-side loader that turns a YAML file into a LintConfig:

    profile: recommended
    strict: true
    max_warnings: 10
    exclude: ["**/*.stories.tsx"]
    rules:
      naming.convention: error
      structure.max_component_statements:
        severity: warn
        options: {max_statements: 40}
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

CONFIG_FILE_NAMES = [".styleguard.yml", ".styleguard.yaml", "styleguard.yml", "styleguard.yaml"]

# Minimum accepted value per integer key
_INT_KEYS = {"max_depth": 1, "max_nodes": 1, "workers": 1, "max_warnings": 0}
_KNOWN_KEYS = frozenset(["rules", "profile", "strict", "exclude"] + list(_INT_KEYS))


@dataclass
class LintConfig:
    """Parsed configuration file. Unset fields fall back to settings/defaults."""
    rules: Dict[str, Any] = field(default_factory=dict)
    profile: Optional[str] = None
    strict: Optional[bool] = None
    max_depth: Optional[int] = None
    max_nodes: Optional[int] = None
    workers: Optional[int] = None
    max_warnings: Optional[int] = None
    exclude: List[str] = field(default_factory=list)
    source: Optional[str] = None


def parse_config(data: Any, source: Optional[str] = None) -> LintConfig:
    """
    Validate a parsed YAML document and build a LintConfig.

    Raises:
        ConfigurationError: On any structural problem
    """
    if data is None:
        return LintConfig(source=source)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {source or '<memory>'} must be a mapping")

    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(map(str, unknown)))}")

    rules = data.get("rules") or {}
    if not isinstance(rules, dict):
        raise ConfigurationError("'rules' must be a mapping of rule id to setting")

    profile = data.get("profile")
    if profile is not None and not isinstance(profile, str):
        raise ConfigurationError("'profile' must be a string")

    strict = data.get("strict")
    if strict is not None and not isinstance(strict, bool):
        raise ConfigurationError("'strict' must be true or false")

    ints = {}
    for key, minimum in _INT_KEYS.items():
        value = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < minimum):
            raise ConfigurationError(f"'{key}' must be an integer of at least {minimum}")
        ints[key] = value

    exclude = data.get("exclude") or []
    if isinstance(exclude, str):
        exclude = [exclude]
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        raise ConfigurationError("'exclude' must be a list of glob patterns")

    return LintConfig(
        rules=dict(rules),
        profile=profile,
        strict=strict,
        exclude=list(exclude),
        source=source,
        **ints,
    )


def load_config(config_path: str) -> LintConfig:
    """
    Load configuration from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    if not os.path.isfile(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
    return parse_config(data, source=config_path)


def save_config(config: LintConfig, config_path: str) -> None:
    """Save configuration to a YAML file."""
    config_dict: Dict[str, Any] = {"rules": config.rules}
    for key in ("profile", "strict") + tuple(_INT_KEYS):
        value = getattr(config, key)
        if value is not None:
            config_dict[key] = value
    if config.exclude:
        config_dict["exclude"] = config.exclude

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, indent=2, sort_keys=False)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for .styleguard.yml, .styleguard.yaml, styleguard.yml and
    styleguard.yaml, in that order, in each directory.
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_FILE_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.isfile(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None
