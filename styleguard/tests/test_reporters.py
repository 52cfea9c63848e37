"""
Tests for the pretty and JSON report formats.
"""

import json

import pytest

from styleguard.engine.aggregator import ViolationAggregator
from styleguard.engine.nodes import Span
from styleguard.engine.types import UnitFailure, UnitResult, Violation
from styleguard.reporters import PROTOCOL_VERSION, format_report, report_to_json


def violation(rule_id, severity, start, path, line=None, column=None, meta=None):
    return Violation(rule_id=rule_id, severity=severity, message=f"{rule_id} message",
                     span=Span(start, start + 3, line=line, column=column), source_unit_id=path, meta=meta)


class TestReporters:
    """Serialisation of a finished report."""

    def setup_method(self):
        aggregator = ViolationAggregator()
        aggregator.add(UnitResult(path="/repo/src/App.tsx", violations=(
            violation("naming.convention", "warning", 40, "/repo/src/App.tsx", line=3, column=7,
                      meta={"suggested_name": "App"}),
            violation("exports.no_default", "error", 0, "/repo/src/App.tsx", line=1, column=1),
        )))
        aggregator.add(UnitResult(path="/repo/src/broken.ts",
                                  failure=UnitFailure("parse-error", "Syntax error at 2:5", Span(9, 10, 2, 5))))
        aggregator.add(UnitResult(path="/repo/src/clean.ts"))
        self.report = aggregator.report(partial=True, config_warnings=("unknown rule 'x.y'",))

    def test_json_document(self):
        data = json.loads(format_report(self.report, "json", base="/repo", metrics={"duration_ms": 1.5}))

        assert data["styleguard.protocol"] == PROTOCOL_VERSION
        assert data["files_checked"] == 3
        assert data["outcome"] == "failure"
        assert data["partial"] is True
        assert data["counts"] == {"error": 1, "warning": 1, "failed_units": 1}
        assert data["config_warnings"] == ["unknown rule 'x.y'"]
        assert data["metrics"] == {"duration_ms": 1.5}
        assert [u["path"] for u in data["units"]] == ["src/App.tsx", "src/broken.ts", "src/clean.ts"]

    def test_json_violations_are_ordered_by_position(self):
        app = report_to_json(self.report)["units"][0]
        assert [v["rule_id"] for v in app["violations"]] == ["exports.no_default", "naming.convention"]
        assert app["violations"][1]["meta"] == {"suggested_name": "App"}
        assert app["violations"][1]["span"] == {"start_byte": 40, "end_byte": 43, "line": 3, "column": 7}
        assert "meta" not in app["violations"][0]

    def test_json_failure(self):
        broken = report_to_json(self.report)["units"][1]
        assert broken["failure"]["kind"] == "parse-error"
        assert broken["failure"]["span"]["line"] == 2
        assert broken["violations"] == []

    def test_pretty(self):
        text = format_report(self.report, "pretty", base="/repo")
        lines = text.splitlines()

        assert lines[0] == "config: unknown rule 'x.y'"
        assert "src/App.tsx" in lines
        assert "  1:1  error  exports.no_default message  (exports.no_default)" in lines
        assert "  2:5  failed  Syntax error at 2:5 [parse-error]" in lines
        assert "src/clean.ts" not in lines
        assert "3 files checked: 1 errors, 1 warnings, 1 failed" in lines
        assert "Run was cancelled; results are partial" in lines
        assert lines[-1] == "Outcome: failure"

    def test_paths_outside_base_stay_absolute(self):
        data = report_to_json(self.report, base="/elsewhere/project")
        assert data["units"][0]["path"] == "/repo/src/App.tsx"

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            format_report(self.report, "xml")
