"""
Tests for the parallel runner: determinism, per-unit isolation and
cooperative cancellation.
"""

import threading

from node_factory import K, class_decl, ident, import_, source_unit, unit
from styleguard.engine.aggregator import Outcome
from styleguard.engine.errors import ParseError
from styleguard.engine.nodes import Span
from styleguard.engine.registry import build_registry, get_default_registry
from styleguard.engine.resolver import resolve_ruleset
from styleguard.engine.runner import LintRunner, check_units
from styleguard.engine.types import UNIT, BaseRule, RuleMeta


class StubParser:
    """Parser collaborator returning prebuilt trees keyed by path."""

    def __init__(self, trees):
        self.trees = trees

    def parse(self, text, path):
        if text == "<syntax error>":
            raise ParseError("unexpected token", Span(3, 4, line=1, column=4))
        if text == "<crash>":
            raise RuntimeError("grammar crashed")
        return self.trees[path]


class CancelAfter(BaseRule):
    """Sets the cancellation event once it has seen `limit` units."""

    meta = RuleMeta(id="structure.cancel_after", category="structure", applies_to=UNIT)

    def __init__(self, event, limit):
        self.event = event
        self.limit = limit
        self.seen = 0

    def visit(self, node, ancestors, options):
        self.seen += 1
        if self.seen >= self.limit:
            self.event.set()
        return []


class ExplodeOnBoom(BaseRule):
    meta = RuleMeta(id="style.explode", category="style", applies_to=frozenset([K.IDENTIFIER]))

    def visit(self, node, ancestors, options):
        if node.text == "boom":
            raise ValueError("cannot handle this node")
        return []


def builtin_ruleset(config=None):
    return resolve_ruleset(get_default_registry(), config)


def sample_units(count):
    units = []
    for i in range(count):
        units.append(source_unit(
            import_("./b", start=0), import_("./a", start=50),
            class_decl(f"thing{i}", start=100),
            path=f"src/file{i:02d}.tsx",
        ))
    return units


class TestDeterminism:
    """Same inputs, any worker count, same report."""

    def test_parallel_matches_sequential(self):
        units = sample_units(12)
        ruleset = builtin_ruleset()
        sequential = LintRunner(ruleset, workers=1).run_units(units)
        parallel = LintRunner(ruleset, workers=4).run_units(list(reversed(units)))

        assert [u.path for u in sequential.units] == [u.path for u in parallel.units]
        assert sequential.violations == parallel.violations
        assert dict(sequential.counts) == dict(parallel.counts)
        assert sequential.outcome == parallel.outcome == Outcome.WARNING

    def test_each_unit_reports_its_own_violations(self):
        report = check_units(builtin_ruleset(), sample_units(2))
        for unit_report in report.units:
            assert {v.source_unit_id for v in unit_report.violations} == {unit_report.path}
            assert sorted(v.rule_id for v in unit_report.violations) == ["imports.order", "naming.convention"]


class TestUnitIsolation:
    """Faults stay inside the unit that caused them."""

    def test_rule_fault_only_affects_its_unit(self):
        registry = build_registry([ExplodeOnBoom()] + get_default_registry().get_all_rules())
        ruleset = resolve_ruleset(registry)
        bad = source_unit(ident("boom", start=3), path="bad.ts")
        good = source_unit(class_decl("lowercase", start=0), path="good.ts")

        report = LintRunner(ruleset, workers=2).run_units([bad, good])

        bad_report, good_report = report.unit("bad.ts"), report.unit("good.ts")
        assert [v.rule_id for v in bad_report.violations] == ["style.explode"]
        assert bad_report.violations[0].internal
        assert [v.rule_id for v in good_report.violations] == ["naming.convention"]
        assert report.outcome == Outcome.FAILURE

    def test_parse_error_fails_only_that_file(self):
        trees = {"ok.ts": unit(class_decl("Fine"))}
        files = {"ok.ts": "class Fine {}", "broken.ts": "<syntax error>"}
        runner = LintRunner(builtin_ruleset(), StubParser(trees), workers=2, reader=files.__getitem__)

        report = runner.run(["ok.ts", "broken.ts"])

        broken = report.unit("broken.ts")
        assert broken.failed
        assert broken.failure.kind == "parse-error"
        assert broken.failure.span.line == 1
        assert broken.violations == ()
        assert not report.unit("ok.ts").failed
        assert report.outcome == Outcome.FAILURE

    def test_unreadable_file_fails_only_that_file(self, tmp_path):
        present = tmp_path / "present.ts"
        present.write_text("class Fine {}", encoding="utf-8")
        missing = str(tmp_path / "missing.ts")
        runner = LintRunner(builtin_ruleset(), StubParser({str(present): unit(class_decl("Fine"))}))

        report = runner.run([str(present), missing])

        assert report.unit(missing).failure.kind == "read-error"
        assert not report.unit(str(present)).failed

    def test_duplicate_paths_are_checked_once(self):
        trees = {"a.ts": unit()}
        runner = LintRunner(builtin_ruleset(), StubParser(trees), reader=lambda path: "")
        report = runner.run(["a.ts", "a.ts"])
        assert len(report.units) == 1

    def test_parser_crash_fails_only_that_file(self):
        trees = {"good.ts": unit(class_decl("lowercase"))}
        files = {"good.ts": "class lowercase {}", "bad.ts": "<crash>"}
        runner = LintRunner(builtin_ruleset(), StubParser(trees), workers=2, reader=files.__getitem__)

        report = runner.run(["bad.ts", "good.ts"])

        bad = report.unit("bad.ts")
        assert bad.failure.kind == "parse-error"
        assert "grammar crashed" in bad.failure.message
        assert [v.rule_id for v in report.unit("good.ts").violations] == ["naming.convention"]

    def test_duplicate_units_are_checked_once(self):
        same = source_unit(class_decl("lowercase"), path="same.ts")
        report = check_units(builtin_ruleset(), [same, same])
        assert [u.path for u in report.units] == ["same.ts"]
        assert len(report.violations) == 1


class TestCancellation:
    """Cooperative cancellation keeps completed units and flags the run."""

    def test_cancel_after_k_units(self):
        event = threading.Event()
        registry = build_registry([CancelAfter(event, limit=3)])
        units = sample_units(8)

        report = LintRunner(resolve_ruleset(registry), workers=1).run_units(units, cancel_event=event)

        assert len(report.units) == 3
        assert [u.path for u in report.units] == [u.path for u in units[:3]]
        assert report.partial
        assert report.outcome != Outcome.SUCCESS

    def test_cancelled_before_start(self):
        event = threading.Event()
        event.set()
        report = LintRunner(builtin_ruleset(), workers=2).run_units(sample_units(4), cancel_event=event)
        assert report.units == ()
        assert report.partial
        assert report.outcome == Outcome.WARNING

    def test_cancel_after_everything_finished_is_not_partial(self):
        event = threading.Event()
        registry = build_registry([CancelAfter(event, limit=2)])
        report = LintRunner(resolve_ruleset(registry), workers=1).run_units(sample_units(2),
                                                                             cancel_event=event)
        assert len(report.units) == 2
        assert not report.partial
        assert report.outcome == Outcome.SUCCESS

    def test_timeout_without_expiry_completes(self):
        report = LintRunner(builtin_ruleset(), workers=2).run_units(sample_units(3), timeout=60)
        assert len(report.units) == 3
        assert not report.partial
