"""Plain-text reporter mirroring the HTML report in fixed-width form."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covest.models.coverage import format_percentage
from covest.reporters.base import ReportWriter

if TYPE_CHECKING:
    from covest.models.report import CoverageReportSnapshot, FileReport

_RULE_WIDTH = 50
_PASS_GLYPH = "✓"
_FAIL_GLYPH = "✗"


def _glyph(*, passing: bool) -> str:
    return _PASS_GLYPH if passing else _FAIL_GLYPH


class TextReporter(ReportWriter):
    """Render a coverage report as plain text."""

    @property
    def format_name(self) -> str:
        return "text"

    @property
    def extension(self) -> str:
        return "txt"

    def render(self, report: CoverageReportSnapshot) -> str:
        summary = report.summary
        lines = [
            "Test Coverage Report",
            "=" * _RULE_WIDTH,
            f"Generated: {summary.timestamp}",
            f"Duration: {summary.duration_ms}ms",
            f"Files Analyzed: {summary.total_files}",
            "",
            "Overall Coverage Summary:",
        ]
        for name, metric in summary.metrics():
            lines.append(
                f"- {name.capitalize()}: {format_percentage(metric.percentage)} "
                f"({metric.covered}/{metric.total}) {_glyph(passing=metric.passing)}"
            )
        lines.extend(
            [
                "",
                f"Threshold: {summary.threshold:g}%",
                f"Overall Status: {'PASSING' if summary.overall_passing else 'FAILING'}",
                "",
                "File Details:",
                "-" * _RULE_WIDTH,
            ]
        )

        for file_report in report.files.values():
            lines.append("")
            lines.extend(self._render_file(file_report))

        return "\n".join(lines) + "\n"

    def _render_file(self, file_report: FileReport) -> list[str]:
        block = [f"{file_report.file_path} [{file_report.status.upper()}]"]
        for label, metric in (
            ("Lines", file_report.lines),
            ("Functions", file_report.functions),
            ("Branches", file_report.branches),
        ):
            block.append(
                f"  {label}: {format_percentage(metric.percentage)} "
                f"({metric.covered}/{metric.total})"
            )
        block.append(f"  Complexity: {file_report.complexity}")
        if file_report.uncovered_lines:
            joined = ", ".join(str(line) for line in file_report.uncovered_lines)
            block.append(f"  Uncovered lines: {joined}")
        return block
