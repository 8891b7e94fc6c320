"""Coverage report snapshot and its JSON document schema.

A snapshot is built once by ``CoverageTracker.generate_report`` and never
mutated afterwards. ``to_dict`` produces the document written to
``coverage-report.json``; ``from_dict`` reads it back.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from covest.models.coverage import format_percentage

STATUS_PASSING = "passing"
STATUS_FAILING = "failing"

METRIC_NAMES = ("lines", "functions", "branches")


def _parse_percentage(value: Any) -> float:
    """Parse ``"NN.NN%"`` (or a bare number) into a float."""
    if isinstance(value, int | float):
        return float(value)
    return float(str(value).rstrip("%") or 0)


def _parse_duration_ms(value: Any) -> int:
    if isinstance(value, int | float):
        return int(value)
    return int(float(str(value).removesuffix("ms") or 0))


@dataclass(frozen=True)
class MetricSummary:
    """Project-wide totals for one metric, judged against the threshold."""

    total: int
    covered: int
    percentage: float
    threshold: float

    @property
    def passing(self) -> bool:
        return self.percentage >= self.threshold

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "covered": self.covered,
            "percentage": format_percentage(self.percentage),
            "threshold": f"{self.threshold:g}%",
            "passing": self.passing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricSummary:
        return cls(
            total=int(data.get("total", 0)),
            covered=int(data.get("covered", 0)),
            percentage=_parse_percentage(data.get("percentage", 0)),
            threshold=_parse_percentage(data.get("threshold", 0)),
        )


@dataclass(frozen=True)
class ReportSummary:
    """Summary block of a coverage report."""

    timestamp: str
    duration_ms: int
    total_files: int
    lines: MetricSummary
    functions: MetricSummary
    branches: MetricSummary

    @property
    def threshold(self) -> float:
        return self.lines.threshold

    @property
    def overall_passing(self) -> bool:
        """True only when lines, functions and branches all meet the threshold."""
        return self.lines.passing and self.functions.passing and self.branches.passing

    def metrics(self) -> list[tuple[str, MetricSummary]]:
        """Return ``(name, metric)`` pairs in display order."""
        return [(name, getattr(self, name)) for name in METRIC_NAMES]

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "duration": f"{self.duration_ms}ms",
            "totalFiles": self.total_files,
            "coverage": {name: metric.to_dict() for name, metric in self.metrics()},
            "overallPassing": self.overall_passing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportSummary:
        coverage = data.get("coverage", {})
        return cls(
            timestamp=str(data.get("timestamp", "")),
            duration_ms=_parse_duration_ms(data.get("duration", 0)),
            total_files=int(data.get("totalFiles", 0)),
            lines=MetricSummary.from_dict(coverage.get("lines", {})),
            functions=MetricSummary.from_dict(coverage.get("functions", {})),
            branches=MetricSummary.from_dict(coverage.get("branches", {})),
        )


@dataclass(frozen=True)
class FileMetric:
    """Totals for one metric within a single file."""

    total: int
    covered: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "covered": self.covered,
            "percentage": format_percentage(self.percentage),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileMetric:
        return cls(
            total=int(data.get("total", 0)),
            covered=int(data.get("covered", 0)),
            percentage=_parse_percentage(data.get("percentage", 0)),
        )


@dataclass(frozen=True)
class FileReport:
    """Per-file block of a coverage report.

    ``status`` is decided by line coverage alone; function and branch
    figures are informational at file level.
    """

    file_path: str
    lines: FileMetric
    functions: FileMetric
    branches: FileMetric
    complexity: int
    uncovered_lines: tuple[int, ...] = ()
    status: str = STATUS_FAILING

    @property
    def passing(self) -> bool:
        return self.status == STATUS_PASSING

    def to_dict(self) -> dict[str, Any]:
        lines = self.lines.to_dict()
        lines["uncoveredLines"] = list(self.uncovered_lines)
        return {
            "lines": lines,
            "functions": self.functions.to_dict(),
            "branches": self.branches.to_dict(),
            "complexity": self.complexity,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, file_path: str, data: dict[str, Any]) -> FileReport:
        lines = data.get("lines", {})
        return cls(
            file_path=file_path,
            lines=FileMetric.from_dict(lines),
            functions=FileMetric.from_dict(data.get("functions", {})),
            branches=FileMetric.from_dict(data.get("branches", {})),
            complexity=int(data.get("complexity", 1)),
            uncovered_lines=tuple(int(line) for line in lines.get("uncoveredLines", [])),
            status=str(data.get("status", STATUS_FAILING)),
        )


@dataclass(frozen=True)
class CoverageReportSnapshot:
    """Read-only coverage report: a summary plus one block per tracked file."""

    summary: ReportSummary
    files: dict[str, FileReport] = field(default_factory=dict)

    @property
    def overall_passing(self) -> bool:
        return self.summary.overall_passing

    def with_threshold(self, threshold: float) -> CoverageReportSnapshot:
        """Return a copy whose summary metrics are judged against ``threshold``.

        Per-file statuses are left as they were recorded.
        """
        summary = replace(
            self.summary,
            lines=replace(self.summary.lines, threshold=threshold),
            functions=replace(self.summary.functions, threshold=threshold),
            branches=replace(self.summary.branches, threshold=threshold),
        )
        return replace(self, summary=summary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "files": {path: file_report.to_dict() for path, file_report in self.files.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoverageReportSnapshot:
        """Rebuild a snapshot from a parsed ``coverage-report.json`` document."""
        files_raw = data.get("files", {})
        if not isinstance(files_raw, dict):
            files_raw = {}
        return cls(
            summary=ReportSummary.from_dict(data.get("summary", {})),
            files={
                path: FileReport.from_dict(path, file_data)
                for path, file_data in files_raw.items()
                if isinstance(file_data, dict)
            },
        )
