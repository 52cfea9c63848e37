"""
Violation aggregation.

Collects per-unit results, removes duplicates, orders violations by
(span.start, rule_id) and units by path, counts by severity and decides the
run outcome. The Report built here is the only payload handed to reporters
and to the exit-code mapping.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .types import ERROR, WARNING, UnitFailure, UnitResult, Violation


class Outcome(str, Enum):
    """Aggregate outcome of a run."""
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass(frozen=True)
class UnitReport:
    """Ordered, de-duplicated violations of one source unit."""
    path: str
    violations: Tuple[Violation, ...] = ()
    failure: Optional[UnitFailure] = None

    @property
    def failed(self) -> bool:
        return self.failure is not None

    def count(self, severity: str) -> int:
        return sum(1 for v in self.violations if v.severity == severity)


@dataclass(frozen=True)
class Report:
    """Aggregate result of a run."""
    units: Tuple[UnitReport, ...]
    counts: Mapping[str, int]
    outcome: Outcome
    partial: bool = False
    config_warnings: Tuple[str, ...] = ()

    @property
    def error_count(self) -> int:
        return self.counts.get(ERROR, 0)

    @property
    def warning_count(self) -> int:
        return self.counts.get(WARNING, 0)

    @property
    def failed_units(self) -> Tuple[UnitReport, ...]:
        return tuple(unit for unit in self.units if unit.failed)

    @property
    def violations(self) -> Tuple[Violation, ...]:
        """All violations, ordered by unit path then position."""
        return tuple(v for unit in self.units for v in unit.violations)

    def unit(self, path: str) -> Optional[UnitReport]:
        for unit in self.units:
            if unit.path == path:
                return unit
        return None


def order_violations(violations: Iterable[Violation]) -> Tuple[Violation, ...]:
    """De-duplicate and sort violations by (span.start, rule_id).

    The sort is stable, so violations with equal keys keep traversal order.
    """
    seen = set()
    unique: List[Violation] = []
    for violation in violations:
        key = violation.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(violation)
    return tuple(sorted(unique, key=lambda v: v.sort_key))


def decide_outcome(counts: Mapping[str, int], failed_units: int, partial: bool) -> Outcome:
    """Worst observed severity wins; a partial run is never a success."""
    if counts.get(ERROR, 0) or failed_units:
        return Outcome.FAILURE
    if counts.get(WARNING, 0) or partial:
        return Outcome.WARNING
    return Outcome.SUCCESS


class ViolationAggregator:
    """Merge point for unit results coming back from workers."""

    def __init__(self):
        self._results: Dict[str, UnitResult] = {}

    def add(self, result: UnitResult) -> None:
        """Add the result of one unit.

        Raises:
            ValueError: If a result for the same path was already added
        """
        if result.path in self._results:
            raise ValueError(f"Duplicate result for unit '{result.path}'")
        self._results[result.path] = result

    def extend(self, results: Iterable[UnitResult]) -> None:
        for result in results:
            self.add(result)

    def __len__(self) -> int:
        return len(self._results)

    def report(self, partial: bool = False, config_warnings: Tuple[str, ...] = ()) -> Report:
        """Build the immutable report for everything added so far."""
        units = []
        counts = {ERROR: 0, WARNING: 0}
        for path in sorted(self._results):
            result = self._results[path]
            violations = order_violations(result.violations)
            for violation in violations:
                counts[violation.severity] = counts.get(violation.severity, 0) + 1
            units.append(UnitReport(path=path, violations=violations, failure=result.failure))

        failed = sum(1 for unit in units if unit.failed)
        return Report(
            units=tuple(units),
            counts=MappingProxyType(counts),
            outcome=decide_outcome(counts, failed, partial),
            partial=partial,
            config_warnings=tuple(config_warnings),
        )
