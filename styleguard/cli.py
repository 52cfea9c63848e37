"""
Command-line entry point.

    styleguard src/ --format json --max-warnings 0

Exit codes:
    0  success (warnings within the --max-warnings budget)
    1  error violations, failed files, too many warnings or a cancelled run
    2  configuration error; no file is processed
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .engine.aggregator import Outcome, Report
from .engine.config import LintConfig, find_config_file, load_config
from .engine.errors import ConfigurationError
from .engine.file_filter import collect_files
from .engine.profiles import get_default_profile, get_profile_info, validate_profile
from .engine.registry import RuleRegistry, get_default_registry
from .engine.resolver import resolve_ruleset
from .engine.runner import LintRunner
from .engine.settings import EngineSettings, load_settings
from .engine.tsx_adapter import TreeSitterParser
from .reporters import FORMATS, format_report

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="styleguard",
        description="Style and convention checker for TypeScript, TSX and JavaScript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  styleguard src/
  styleguard src/ --format json --max-warnings 0
  styleguard app.tsx --profile all --jobs 1
        """
    )
    parser.add_argument("paths", nargs="*", metavar="PATH",
                        help="Files or directories to check")
    parser.add_argument("--config", help="Path to configuration file (default: auto-detect)")
    parser.add_argument("--max-warnings", type=int, default=None,
                        help="Fail when more than N warnings are reported")
    parser.add_argument("--format", choices=FORMATS, default="pretty", help="Output format")
    parser.add_argument("--jobs", type=int, default=None,
                        help="Number of worker threads (default: CPU count)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Cancel the run after this many seconds")
    parser.add_argument("--max-depth", type=int, default=None,
                        help="Maximum syntax tree depth per file")
    parser.add_argument("--profile", choices=sorted(get_profile_info()), default=None,
                        help="Baseline rule profile (default: recommended)")
    parser.add_argument("--no-strict", action="store_true",
                        help="Warn about unknown rule ids instead of failing")
    parser.add_argument("--list-rules", action="store_true", help="List available rules and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def setup_logging(verbose: bool, level: str) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def list_rules(registry: RuleRegistry) -> str:
    lines = []
    for rule in registry:
        meta = rule.meta
        lines.append(f"{meta.id:40} {meta.category:13} {meta.default_severity:8} {meta.description}")
    return "\n".join(lines)


def _first_set(*values):
    for value in values:
        if value is not None:
            return value
    return None


def exit_code(report: Report, max_warnings: Optional[int] = None) -> int:
    """Map a report onto the process exit code."""
    if report.outcome == Outcome.FAILURE or report.partial:
        return EXIT_FAILURE
    if max_warnings is not None and report.warning_count > max_warnings:
        return EXIT_FAILURE
    return EXIT_SUCCESS


def run(args: argparse.Namespace, settings: EngineSettings) -> int:
    registry = get_default_registry()

    config_path = args.config or find_config_file(args.paths[0])
    config = load_config(config_path) if config_path else LintConfig()
    logger.debug("Using config: %s", config_path or "defaults")

    profile_name = _first_set(args.profile, config.profile)
    try:
        profile = validate_profile(profile_name) if profile_name else get_default_profile()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    strict = False if args.no_strict else _first_set(config.strict, settings.strict)
    ruleset = resolve_ruleset(registry, config.rules, strict=strict, profile=profile)
    logger.debug("Enabled rules: %s", ruleset.enabled_rule_ids())

    max_depth = _first_set(args.max_depth, config.max_depth, settings.max_depth)
    workers = _first_set(args.jobs, config.workers, settings.effective_workers)
    max_nodes = _first_set(config.max_nodes, settings.max_nodes)
    max_warnings = _first_set(args.max_warnings, config.max_warnings)
    timeout = _first_set(args.timeout, settings.timeout)
    for name, value in (("max-depth", max_depth), ("jobs", workers), ("max-nodes", max_nodes)):
        if value is not None and value < 1:
            raise ConfigurationError(f"{name} must be at least 1")

    files = collect_files(args.paths, exclude=list(config.exclude) + settings.exclude)
    if not files:
        print("No files found to check", file=sys.stderr)
        return EXIT_FAILURE
    logger.debug("Found %d files to check", len(files))

    runner = LintRunner(ruleset, TreeSitterParser(max_depth=max_depth), workers=workers,
                        max_depth=max_depth, max_nodes=max_nodes)
    report = runner.run(files, timeout=timeout)

    print(format_report(report, args.format, base=os.getcwd(), metrics=runner.metrics))
    return exit_code(report, max_warnings)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"Configuration error: invalid STYLEGUARD_* environment: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(args.verbose, settings.log_level)

    if args.list_rules:
        print(list_rules(get_default_registry()))
        return EXIT_SUCCESS
    if not args.paths:
        parser.error("at least one PATH is required")

    try:
        return run(args, settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
