"""
Report formatting for the styleguard CLI.

Two formats:
- json: versioned protocol document for editors and CI tooling
- pretty: human-readable listing grouped by file
"""

import json
import os
from typing import Any, Dict, List, Optional

from .engine.aggregator import Report, UnitReport
from .engine.nodes import Span
from .engine.types import ERROR, Violation

PROTOCOL_VERSION = "1"
ENGINE_VERSION = "0.1.0"

FORMATS = ("pretty", "json")


def _relative(path: str, base: Optional[str]) -> str:
    if not base:
        return path
    try:
        relative = os.path.relpath(path, base)
    except ValueError:
        # Different drive on Windows
        return path
    return path if relative.startswith("..") else relative


def span_to_json(span: Optional[Span]) -> Optional[Dict[str, Any]]:
    if span is None:
        return None
    return {
        "start_byte": span.start,
        "end_byte": span.end,
        "line": span.line,
        "column": span.column,
    }


def violation_to_json(violation: Violation) -> Dict[str, Any]:
    data = {
        "rule_id": violation.rule_id,
        "severity": violation.severity,
        "message": violation.message,
        "span": span_to_json(violation.span),
    }
    if violation.meta:
        data["meta"] = violation.meta
    if violation.internal:
        data["internal"] = True
    return data


def unit_to_json(unit: UnitReport, base: Optional[str] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "path": _relative(unit.path, base),
        "violations": [violation_to_json(v) for v in unit.violations],
    }
    if unit.failure is not None:
        data["failure"] = {
            "kind": unit.failure.kind,
            "message": unit.failure.message,
            "span": span_to_json(unit.failure.span),
        }
    return data


def report_to_json(report: Report, base: Optional[str] = None,
                   metrics: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
    """Build the JSON protocol document for a report."""
    return {
        "styleguard.protocol": PROTOCOL_VERSION,
        "engine_version": ENGINE_VERSION,
        "files_checked": len(report.units),
        "outcome": report.outcome.value,
        "partial": report.partial,
        "counts": {
            "error": report.error_count,
            "warning": report.warning_count,
            "failed_units": len(report.failed_units),
        },
        "config_warnings": list(report.config_warnings),
        "units": [unit_to_json(unit, base) for unit in report.units],
        "metrics": metrics or {},
    }


def _location(span: Optional[Span]) -> str:
    if span is None:
        return "-"
    if span.line is not None:
        return f"{span.line}:{span.column or 1}"
    return f"@{span.start}"


def format_pretty(report: Report, base: Optional[str] = None) -> str:
    lines: List[str] = []

    for warning in report.config_warnings:
        lines.append(f"config: {warning}")
    if report.config_warnings:
        lines.append("")

    for unit in report.units:
        if not unit.violations and not unit.failed:
            continue
        lines.append(_relative(unit.path, base))
        if unit.failure is not None:
            lines.append(f"  {_location(unit.failure.span)}  failed  {unit.failure.message} "
                         f"[{unit.failure.kind}]")
        for violation in unit.violations:
            severity = "error" if violation.severity == ERROR else "warning"
            lines.append(f"  {_location(violation.span)}  {severity}  {violation.message}  "
                         f"({violation.rule_id})")
        lines.append("")

    summary = (f"{len(report.units)} files checked: {report.error_count} errors, "
               f"{report.warning_count} warnings")
    if report.failed_units:
        summary += f", {len(report.failed_units)} failed"
    lines.append(summary)
    if report.partial:
        lines.append("Run was cancelled; results are partial")
    lines.append(f"Outcome: {report.outcome.value}")
    return "\n".join(lines)


def format_report(report: Report, format_type: str, base: Optional[str] = None,
                  metrics: Optional[Dict[str, float]] = None) -> str:
    """Format a report according to the specified format."""
    if format_type == "json":
        return json.dumps(report_to_json(report, base, metrics), indent=2)
    if format_type == "pretty":
        return format_pretty(report, base)
    raise ValueError(f"Unknown format: {format_type}")
