"""
Rule profile definitions for the styleguard engine.

A profile decides the baseline severity of every registered rule before the
user's per-rule configuration is applied on top of it.
"""

from enum import Enum
from typing import Any, Dict

from .types import OFF, WARNING, RuleMeta


class RuleProfile(str, Enum):
    """Predefined rule profiles."""
    RECOMMENDED = "recommended"
    ALL = "all"
    NONE = "none"


def get_default_profile() -> RuleProfile:
    """Get the default rule profile."""
    return RuleProfile.RECOMMENDED


def validate_profile(profile_name: str) -> RuleProfile:
    """
    Validate and normalize a profile name.

    Raises:
        ValueError: If profile name is not recognized
    """
    try:
        return RuleProfile(profile_name)
    except ValueError:
        valid_profiles = [p.value for p in RuleProfile]
        raise ValueError(
            f"Invalid profile '{profile_name}'. "
            f"Valid profiles are: {', '.join(valid_profiles)}"
        )


def baseline_severity(meta: RuleMeta, profile: RuleProfile) -> str:
    """
    Severity a rule starts from under a profile.

    RECOMMENDED keeps the rule's declared default, ALL turns rules that are
    off by default into warnings, NONE disables everything.
    """
    if profile == RuleProfile.NONE:
        return OFF
    if profile == RuleProfile.ALL and meta.default_severity == OFF:
        return WARNING
    return meta.default_severity


def get_profile_info() -> Dict[str, Dict[str, Any]]:
    """Get information about all available profiles."""
    return {
        RuleProfile.RECOMMENDED.value: {
            "name": "Recommended",
            "description": "Each rule at its declared default severity",
            "recommended": True,
        },
        RuleProfile.ALL.value: {
            "name": "All Rules",
            "description": "Every rule enabled; rules that are off by default report warnings",
            "recommended": False,
        },
        RuleProfile.NONE.value: {
            "name": "None",
            "description": "Every rule disabled unless configured explicitly",
            "recommended": False,
        },
    }
