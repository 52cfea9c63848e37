"""
Suppression system for styleguard rules.

This module parses suppression comments in source text so that individual
violations can be silenced at the line where they occur:

    const a = <div style={{ color: 'red' }} />; // styleguard: ignore[jsx.no_inline_style]
    // styleguard: ignore-next-line[jsx.*]
"""

import fnmatch
import re
from typing import Dict, Iterable, List, Set, Tuple

from .types import Violation

_SUPPRESSION_PATTERN = re.compile(
    r'(?://|/\*|\{/\*)\s*styleguard:\s*(ignore|ignore-next-line)\s*\[\s*([^\]]*)\s*\]',
    re.IGNORECASE,
)


class SuppressionParser:
    """Parser for styleguard suppression comments."""

    def __init__(self, text: str):
        self.text = text
        self._text_bytes = text.encode('utf-8')
        self.lines = text.split('\n')
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}
        self._parse_suppressions()

    def _parse_suppressions(self):
        """Parse all suppression comments in the text."""
        for line_num, line in enumerate(self.lines, 1):
            for directive, patterns in self._extract_suppression_patterns(line):
                target = line_num + 1 if directive == "ignore-next-line" else line_num
                self.line_suppressions.setdefault(target, set()).update(patterns)

    def _extract_suppression_patterns(self, line: str) -> List[Tuple[str, Set[str]]]:
        """Extract (directive, patterns) pairs from a line."""
        found = []
        for match in _SUPPRESSION_PATTERN.finditer(line):
            directive = match.group(1).lower()
            patterns = {pattern.strip() for pattern in match.group(2).split(',') if pattern.strip()}
            if patterns:
                found.append((directive, patterns))
        return found

    def is_suppressed(self, violation: Violation) -> bool:
        """Check if a violation should be suppressed."""
        line_num = violation.span.line or self._byte_to_line(violation.span.start)
        patterns = self.line_suppressions.get(line_num)
        if not patterns:
            return False
        return any(self._matches_pattern(violation.rule_id, pattern) for pattern in patterns)

    def _byte_to_line(self, byte_offset: int) -> int:
        """Convert byte offset to 1-based line number."""
        if byte_offset <= 0:
            return 1
        return self._text_bytes[:byte_offset].count(b'\n') + 1

    def _matches_pattern(self, rule_id: str, pattern: str) -> bool:
        """Check if a rule ID matches a suppression pattern (exact or glob)."""
        return rule_id == pattern or fnmatch.fnmatch(rule_id, pattern)


def filter_suppressed_violations(violations: Iterable[Violation], text: str) -> List[Violation]:
    """Filter out suppressed violations. Internal rule errors are never suppressed."""
    violations = list(violations)
    if not violations or 'styleguard' not in text:
        return violations

    parser = SuppressionParser(text)
    return [v for v in violations if v.internal or not parser.is_suppressed(v)]
