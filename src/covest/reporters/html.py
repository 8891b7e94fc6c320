"""HTML reporter for a self-contained coverage page.

Everything (styles included) is inlined, so the file can be opened
straight from disk or attached to a CI run.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from covest.models.coverage import format_percentage
from covest.models.report import STATUS_FAILING, STATUS_PASSING
from covest.reporters.base import ReportWriter

if TYPE_CHECKING:
    from covest.models.report import CoverageReportSnapshot, FileReport, MetricSummary

_METRIC_TITLES = {
    "lines": ("Line Coverage", "lines"),
    "functions": ("Function Coverage", "functions"),
    "branches": ("Branch Coverage", "branches"),
}


def _status_class(*, passing: bool) -> str:
    return STATUS_PASSING if passing else STATUS_FAILING


class HTMLReporter(ReportWriter):
    """Render a coverage report as a standalone HTML document."""

    @property
    def format_name(self) -> str:
        return "html"

    @property
    def extension(self) -> str:
        return "html"

    def render(self, report: CoverageReportSnapshot) -> str:
        summary = report.summary
        cards = "".join(
            self._render_metric_card(name, metric) for name, metric in summary.metrics()
        )
        files = "".join(self._render_file(file_report) for file_report in report.files.values())
        overall = "PASSING" if summary.overall_passing else "FAILING"

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Test Coverage Report</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; color: #24292f; }}
        .header {{ background: #f5f5f5; padding: 20px; border-radius: 5px; }}
        .summary {{ display: flex; gap: 20px; margin: 20px 0; }}
        .metric {{
            background: white;
            border: 1px solid #ddd;
            padding: 15px;
            border-radius: 5px;
            flex: 1;
        }}
        .passing {{ border-left: 5px solid #4caf50; }}
        .failing {{ border-left: 5px solid #f44336; }}
        .files {{ margin-top: 30px; }}
        .file {{
            background: white;
            border: 1px solid #ddd;
            margin: 10px 0;
            padding: 15px;
            border-radius: 5px;
        }}
        .percentage {{ font-size: 24px; font-weight: bold; }}
        .uncovered {{ color: #f44336; font-size: 12px; }}
        .note {{ color: #8b949e; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>Test Coverage Report</h1>
        <p>Generated: {html.escape(summary.timestamp)}</p>
        <p>Duration: {summary.duration_ms}ms</p>
        <p>Files: {summary.total_files}</p>
        <p>Threshold: {summary.threshold:g}%</p>
        <p class="{_status_class(passing=summary.overall_passing)}">Overall Status: {overall}</p>
        <p class="note">Totals are estimated from source text, not instrumentation.</p>
    </div>

    <div class="summary">{cards}
    </div>

    <div class="files">
        <h2>File Coverage</h2>{files}
    </div>
</body>
</html>
"""

    def _render_metric_card(self, name: str, metric: MetricSummary) -> str:
        title, unit = _METRIC_TITLES[name]
        return f"""
        <div class="metric {_status_class(passing=metric.passing)}">
            <h3>{title}</h3>
            <div class="percentage">{format_percentage(metric.percentage)}</div>
            <p>{metric.covered}/{metric.total} {unit}</p>
        </div>"""

    def _render_file(self, file_report: FileReport) -> str:
        uncovered = ""
        if file_report.uncovered_lines:
            joined = ", ".join(str(line) for line in file_report.uncovered_lines)
            uncovered = f'\n            <div class="uncovered">Uncovered lines: {joined}</div>'

        rows = "".join(
            f"\n            <p>{label}: {format_percentage(metric.percentage)} "
            f"({metric.covered}/{metric.total})</p>"
            for label, metric in (
                ("Lines", file_report.lines),
                ("Functions", file_report.functions),
                ("Branches", file_report.branches),
            )
        )

        return f"""
        <div class="file {html.escape(file_report.status)}">
            <h4>{html.escape(file_report.file_path)}</h4>{rows}
            <p>Complexity: {file_report.complexity}</p>{uncovered}
        </div>"""
