"""
Parallel runner for the styleguard engine.

Reads files, hands them to the parser collaborator, checks the resulting
units on a thread pool and merges everything into one Report. Each unit is
independent: read errors, parse errors and structural limit errors fail that
unit only.

Cancellation is cooperative: a threading.Event (set by the caller, a timeout
timer or a KeyboardInterrupt) stops units from starting. Results of units
that already finished are kept and the report is flagged partial.
"""

import concurrent.futures
import logging
import os
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, TypeVar

from .aggregator import Report, ViolationAggregator
from .errors import UnitError
from .nodes import Node
from .resolver import RuleSet
from .traversal import DEFAULT_MAX_DEPTH, TraversalEngine
from .types import SourceUnit, UnitFailure, UnitResult

logger = logging.getLogger(__name__)

# How often the merge loop wakes up to look at the cancellation signal
POLL_INTERVAL = 0.05

T = TypeVar("T")


class SourceParser(Protocol):
    """Parser collaborator: file content + path in, Node tree out."""

    def parse(self, text: str, path: str) -> Node:
        """Parse text into a Unit-rooted tree.

        Raises:
            ParseError: On malformed input
        """
        ...


def read_source(path: str) -> str:
    """Read a source file as UTF-8."""
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class LintRunner:
    """Schedules units across worker threads and aggregates their results."""

    def __init__(self, ruleset: RuleSet, parser: Optional[SourceParser] = None,
                 workers: Optional[int] = None, max_depth: int = DEFAULT_MAX_DEPTH,
                 max_nodes: Optional[int] = None, reader: Callable[[str], str] = read_source):
        self.ruleset = ruleset
        self.parser = parser
        self.workers = max(1, workers or os.cpu_count() or 1)
        self.engine = TraversalEngine(ruleset, max_depth=max_depth, max_nodes=max_nodes)
        self.reader = reader
        self.metrics: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Per-unit pipeline (runs on worker threads)
    # ------------------------------------------------------------------

    def check_source(self, text: str, path: str) -> UnitResult:
        """Parse and check one file's content."""
        if self.parser is None:
            raise RuntimeError("LintRunner needs a parser to check source text")
        try:
            root = self.parser.parse(text, path)
            unit = SourceUnit(path=path, root=root, text=text)
        except UnitError as exc:
            logger.warning("Failed to parse %s: %s", path, exc.message)
            return UnitResult(path=path, failure=UnitFailure(kind=exc.kind, message=exc.message, span=exc.span))
        except ValueError as exc:
            logger.warning("Parser returned an invalid tree for %s: %s", path, exc)
            return UnitResult(path=path, failure=UnitFailure(kind="parse-error", message=str(exc)))
        except Exception as exc:
            logger.warning("Parser crashed on %s: %s", path, exc)
            logger.debug("Parser traceback for %s", path, exc_info=True)
            return UnitResult(path=path, failure=UnitFailure(kind="parse-error", message=f"{type(exc).__name__}: {exc}"))
        return self.engine.check_unit(unit)

    def check_path(self, path: str) -> UnitResult:
        """Read, parse and check one file."""
        try:
            text = self.reader(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            return UnitResult(path=path, failure=UnitFailure(kind="read-error", message=str(exc)))
        return self.check_source(text, path)

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def run(self, paths: Iterable[str], cancel_event: Optional[threading.Event] = None,
            timeout: Optional[float] = None) -> Report:
        """Check files on disk. See run_units for cancellation semantics."""
        unique_paths = list(dict.fromkeys(paths))
        return self._execute(unique_paths, self.check_path, cancel_event, timeout)

    def run_units(self, units: Iterable[SourceUnit], cancel_event: Optional[threading.Event] = None,
                  timeout: Optional[float] = None) -> Report:
        """Check already-parsed units.

        Args:
            units: Source units, one per file; later units with an
                already-seen path are ignored
            cancel_event: Set to stop units from starting
            timeout: Seconds after which the run cancels itself

        Returns:
            Report with units ordered by path; partial if the run was
            cancelled before every unit finished
        """
        by_path: Dict[str, SourceUnit] = {}
        for unit in units:
            if unit.path in by_path:
                logger.debug("Skipping duplicate unit %s", unit.path)
                continue
            by_path[unit.path] = unit
        return self._execute(list(by_path.values()), self.engine.check_unit, cancel_event, timeout)

    def _execute(self, items: Sequence[T], work: Callable[[T], UnitResult],
                 cancel_event: Optional[threading.Event], timeout: Optional[float]) -> Report:
        cancel = cancel_event or threading.Event()
        timer = None
        if timeout:
            timer = threading.Timer(timeout, cancel.set)
            timer.daemon = True
            timer.start()

        start_time = time.time()
        aggregator = ViolationAggregator()

        def guarded(item: T) -> Optional[UnitResult]:
            if cancel.is_set():
                return None
            return work(item)

        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
                pending = {executor.submit(guarded, item) for item in items}
                while pending:
                    try:
                        done, pending = concurrent.futures.wait(
                            pending, timeout=POLL_INTERVAL, return_when=concurrent.futures.FIRST_COMPLETED)
                    except KeyboardInterrupt:
                        logger.warning("Interrupted; finishing units already in progress")
                        cancel.set()
                        done = set()
                    self._collect(done, aggregator)

                    if cancel.is_set() and pending:
                        for future in pending:
                            future.cancel()
                        # Units already running cannot be interrupted; wait for them
                        done, _ = concurrent.futures.wait(pending)
                        self._collect(done, aggregator)
                        pending = set()
        finally:
            if timer is not None:
                timer.cancel()

        partial = cancel.is_set() and len(aggregator) < len(items)
        if partial:
            logger.warning("Run cancelled: %d of %d units checked", len(aggregator), len(items))

        self.metrics = {
            "units_requested": float(len(items)),
            "units_checked": float(len(aggregator)),
            "total_ms": (time.time() - start_time) * 1000,
        }
        return aggregator.report(partial=partial, config_warnings=self.ruleset.warnings)

    @staticmethod
    def _collect(done: Iterable[concurrent.futures.Future], aggregator: ViolationAggregator) -> None:
        for future in done:
            if future.cancelled():
                continue
            result = future.result()
            if result is not None:
                aggregator.add(result)


def check_units(ruleset: RuleSet, units: List[SourceUnit], **kwargs) -> Report:
    """Convenience wrapper: check parsed units sequentially and return the report."""
    return LintRunner(ruleset, workers=1, **kwargs).run_units(units)
