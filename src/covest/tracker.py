"""Coverage tracker that aggregates heuristic coverage across source files.

The tracker never observes execution. Callers pass in the line, function
and branch identifiers their own instrumentation saw run; the tracker
estimates totals from source text, sums them, and writes reports.

Typical use::

    tracker = CoverageTracker(TrackerConfig(threshold=90))
    tracker.track_file("src/app.js", executed_lines=[1, 2, 5])
    result = tracker.save_report()
    if not result.passing:
        ...
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from covest.analyzers.patterns import should_track
from covest.analyzers.source import SourceAnalysis, analyze_source
from covest.config import TrackerConfig
from covest.models.coverage import AggregateTotals, CoveragePercentages, FileRecord
from covest.models.report import (
    STATUS_FAILING,
    STATUS_PASSING,
    CoverageReportSnapshot,
    FileMetric,
    FileReport,
    MetricSummary,
    ReportSummary,
)
from covest.reporters import get_writer
from covest.reporters.terminal import reporter as default_reporter

if TYPE_CHECKING:
    import os
    from collections.abc import Hashable, Iterable

    from covest.reporters.terminal import CLIReporter

logger = logging.getLogger(__name__)

DEFAULT_REPORT_NAME = "coverage-report"


@dataclass
class SaveResult:
    """Outcome of ``CoverageTracker.save_report``."""

    report: CoverageReportSnapshot
    saved_files: list[Path] = field(default_factory=list)
    passing: bool = False


class CoverageTracker:
    """Track per-file heuristic coverage and produce reports.

    One instance is meant to be driven by a single caller; concurrent
    ``track_file`` calls on the same instance are not supported.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        console_reporter: CLIReporter | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            config: Tracker options. Defaults to ``TrackerConfig()``.
            console_reporter: Terminal reporter used for the save summary.
        """
        self._config = config or TrackerConfig()
        self._console = console_reporter or default_reporter
        self._files: dict[str, FileRecord] = {}
        self._totals = AggregateTotals()
        self._execution_map: dict[str, int] = {}
        self._start_time = time.monotonic()

    # ── State accessors ──────────────────────────────────────────

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def files(self) -> dict[str, FileRecord]:
        """Tracked records keyed by path (a copy)."""
        return dict(self._files)

    @property
    def totals(self) -> AggregateTotals:
        return self._totals

    @property
    def execution_counts(self) -> dict[str, int]:
        """How many times each path has been (re)tracked since the last reset."""
        return dict(self._execution_map)

    @property
    def duration_ms(self) -> int:
        """Milliseconds since construction or the last ``reset``."""
        return int((time.monotonic() - self._start_time) * 1000)

    # ── Tracking ─────────────────────────────────────────────────

    def should_track_file(self, file_path: str | os.PathLike[str]) -> bool:
        """Return True if ``file_path`` passes the exclude and include patterns."""
        return should_track(
            file_path, self._config.include_patterns, self._config.exclude_patterns
        )

    def analyze_file(self, content: str, file_path: str = "") -> SourceAnalysis:
        """Estimate totals and complexity for ``content``."""
        return analyze_source(content, file_path)

    def track_file(
        self,
        file_path: str | os.PathLike[str],
        executed_lines: Iterable[int] = (),
        executed_functions: Iterable[Hashable] = (),
        executed_branches: Iterable[Hashable] = (),
        *,
        source_path: str | os.PathLike[str] | None = None,
    ) -> FileRecord | None:
        """Record coverage for one file, replacing any earlier record for it.

        Args:
            file_path: Path used as the record key and matched against the
                include and exclude patterns.
            executed_lines: Line numbers (1-based) the caller saw executed.
            executed_functions: Opaque identifiers of executed functions.
            executed_branches: Opaque identifiers of executed branches.
            source_path: Where to read the file from (UTF-8). Defaults to
                ``file_path``.

        Returns:
            The stored record, or ``None`` if the path was filtered out or
            could not be read. Read failures are logged, never raised.
        """
        key = str(file_path)
        if not self.should_track_file(key):
            return None

        try:
            content = Path(source_path or key).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to track coverage for %s: %s", key, e)
            return None

        analysis = self.analyze_file(content, key)
        record = FileRecord.from_analysis(
            analysis,
            executed_lines=executed_lines,
            executed_functions=executed_functions,
            executed_branches=executed_branches,
        )

        if record.covered_lines > record.total_lines:
            logger.warning(
                "%s: %d executed lines reported but only %d counted; keeping caller data",
                key,
                record.covered_lines,
                record.total_lines,
            )
        if key in self._files:
            logger.debug("Re-tracking %s (replacing previous record)", key)

        self._files[key] = record
        self._execution_map[key] = self._execution_map.get(key, 0) + 1
        self._update_totals()
        return record

    def _update_totals(self) -> None:
        self._totals = AggregateTotals.from_records(self._files.values())

    # ── Reporting ────────────────────────────────────────────────

    def get_percentages(self) -> CoveragePercentages:
        """Return line, function and branch percentages for the current totals."""
        return CoveragePercentages.from_totals(self._totals)

    def generate_report(self) -> CoverageReportSnapshot:
        """Build a read-only report snapshot of the current state."""
        threshold = self._config.threshold
        percentages = self.get_percentages()
        totals = self._totals

        summary = ReportSummary(
            timestamp=datetime.now(tz=UTC).isoformat(),
            duration_ms=self.duration_ms,
            total_files=len(self._files),
            lines=MetricSummary(
                total=totals.total_lines,
                covered=totals.covered_lines,
                percentage=percentages.lines,
                threshold=threshold,
            ),
            functions=MetricSummary(
                total=totals.total_functions,
                covered=totals.covered_functions,
                percentage=percentages.functions,
                threshold=threshold,
            ),
            branches=MetricSummary(
                total=totals.total_branches,
                covered=totals.covered_branches,
                percentage=percentages.branches,
                threshold=threshold,
            ),
        )

        files = {
            path: self._build_file_report(record, threshold)
            for path, record in self._files.items()
        }
        return CoverageReportSnapshot(summary=summary, files=files)

    def _build_file_report(self, record: FileRecord, threshold: float) -> FileReport:
        line_percentage = record.line_percentage
        return FileReport(
            file_path=record.file_path,
            lines=FileMetric(record.total_lines, record.covered_lines, line_percentage),
            functions=FileMetric(
                record.total_functions, record.covered_functions, record.function_percentage
            ),
            branches=FileMetric(
                record.total_branches, record.covered_branches, record.branch_percentage
            ),
            complexity=record.complexity,
            uncovered_lines=tuple(record.uncovered_lines()),
            status=STATUS_PASSING if line_percentage >= threshold else STATUS_FAILING,
        )

    def save_report(self, output_path: str | os.PathLike[str] | None = None) -> SaveResult:
        """Write the report in every configured format and print a summary.

        Args:
            output_path: Base path without extension. Defaults to
                ``<output_dir>/coverage-report``.

        Returns:
            The report, the written file paths, and the overall status.

        Raises:
            UnsupportedFormatError: If a configured format is unknown.
            OSError: If the directory or a file cannot be written.
        """
        report = self.generate_report()
        base_path = (
            Path(output_path)
            if output_path is not None
            else Path(self._config.output_dir) / DEFAULT_REPORT_NAME
        )
        base_path.parent.mkdir(parents=True, exist_ok=True)

        saved_files = [
            get_writer(format_name).generate(report, base_path)
            for format_name in self._config.report_formats
        ]

        self._console.print_coverage_summary(report)
        return SaveResult(report=report, saved_files=saved_files, passing=report.overall_passing)

    # ── Lifecycle ────────────────────────────────────────────────

    def reset(self) -> None:
        """Drop all records and totals and restart the duration clock."""
        self._files.clear()
        self._totals = AggregateTotals()
        self._execution_map.clear()
        self._start_time = time.monotonic()
