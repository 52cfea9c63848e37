"""
Exception taxonomy for the styleguard engine.

Only ConfigurationError is fatal to a run. ParseError and StructuralLimitError
fail a single source unit and are reported alongside the other units.
"""

from typing import Optional

from .nodes import Span


class StyleguardError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(StyleguardError):
    """Malformed or unknown rule configuration, raised before any traversal."""

    def __init__(self, message: str, rule_id: Optional[str] = None, option: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.rule_id = rule_id
        self.option = option

    def __str__(self) -> str:
        prefix = ""
        if self.rule_id and self.option:
            prefix = f"{self.rule_id}.{self.option}: "
        elif self.rule_id:
            prefix = f"{self.rule_id}: "
        return prefix + self.message


class UnitError(StyleguardError):
    """A failure confined to one source unit."""

    kind = "unit-error"

    def __init__(self, message: str, span: Optional[Span] = None):
        super().__init__(message)
        self.message = message
        self.span = span


class ParseError(UnitError):
    """The front-end could not turn a file into a tree."""

    kind = "parse-error"


class StructuralLimitError(UnitError):
    """A tree exceeded the configured depth or size cap."""

    kind = "structural-limit"

    def __init__(self, message: str, limit: int, span: Optional[Span] = None):
        super().__init__(message, span)
        self.limit = limit
