"""
Tests for violation aggregation and outcome computation.
"""

import pytest

from styleguard.engine.aggregator import Outcome, ViolationAggregator, decide_outcome, order_violations
from styleguard.engine.nodes import Span
from styleguard.engine.types import UnitFailure, UnitResult, Violation


def violation(rule_id, start, severity="warning", message="msg", path="a.ts"):
    return Violation(rule_id=rule_id, severity=severity, message=message, span=Span(start, start + 1),
                     source_unit_id=path)


class TestOrdering:
    """Violations ordered by (span.start, rule_id), duplicates removed."""

    def test_sorted_by_start_then_rule_id(self):
        ordered = order_violations([
            violation("b.rule", 10),
            violation("z.rule", 2),
            violation("a.rule", 10),
        ])
        assert [(v.span.start, v.rule_id) for v in ordered] == [(2, "z.rule"), (10, "a.rule"), (10, "b.rule")]

    def test_exact_duplicates_are_removed(self):
        ordered = order_violations([violation("a.rule", 1), violation("a.rule", 1)])
        assert len(ordered) == 1

    def test_same_position_different_messages_are_kept(self):
        ordered = order_violations([violation("a.rule", 1, message="x"), violation("a.rule", 1, message="y")])
        assert [v.message for v in ordered] == ["x", "y"]


class TestOutcome:
    """Worst severity decides the outcome."""

    @pytest.mark.parametrize("counts,failed,partial,expected", [
        ({"error": 0, "warning": 0}, 0, False, Outcome.SUCCESS),
        ({"error": 0, "warning": 2}, 0, False, Outcome.WARNING),
        ({"error": 1, "warning": 2}, 0, False, Outcome.FAILURE),
        ({"error": 0, "warning": 0}, 1, False, Outcome.FAILURE),
        ({"error": 0, "warning": 0}, 0, True, Outcome.WARNING),
    ])
    def test_decide_outcome(self, counts, failed, partial, expected):
        assert decide_outcome(counts, failed, partial) == expected


class TestViolationAggregator:
    """Merging unit results into one report."""

    def setup_method(self):
        self.aggregator = ViolationAggregator()

    def test_units_ordered_by_path_and_counted(self):
        self.aggregator.add(UnitResult("b.ts", (violation("x.rule", 5, "error", path="b.ts"),)))
        self.aggregator.add(UnitResult("a.ts", (violation("x.rule", 9, path="a.ts"),
                                                violation("x.rule", 1, path="a.ts"))))
        report = self.aggregator.report()

        assert [unit.path for unit in report.units] == ["a.ts", "b.ts"]
        assert [v.span.start for v in report.unit("a.ts").violations] == [1, 9]
        assert report.error_count == 1
        assert report.warning_count == 2
        assert report.outcome == Outcome.FAILURE
        assert not report.partial

    def test_failed_unit_fails_run(self):
        self.aggregator.add(UnitResult("a.ts", failure=UnitFailure("parse-error", "bad syntax")))
        report = self.aggregator.report()
        assert report.outcome == Outcome.FAILURE
        assert [unit.path for unit in report.failed_units] == ["a.ts"]

    def test_partial_run_is_never_success(self):
        self.aggregator.add(UnitResult("a.ts"))
        report = self.aggregator.report(partial=True)
        assert report.partial
        assert report.outcome == Outcome.WARNING

    def test_duplicate_unit_is_rejected(self):
        self.aggregator.add(UnitResult("a.ts"))
        with pytest.raises(ValueError):
            self.aggregator.add(UnitResult("a.ts"))

    def test_empty_report(self):
        report = self.aggregator.report()
        assert report.units == ()
        assert report.outcome == Outcome.SUCCESS
        assert report.unit("missing.ts") is None
