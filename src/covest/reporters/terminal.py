"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from covest.models.coverage import format_percentage

if TYPE_CHECKING:
    from covest.analyzers.source import SourceAnalysis
    from covest.models.report import CoverageReportSnapshot, MetricSummary

console = Console()


_GOOD_COVERAGE = 80.0
_MEDIUM_COVERAGE = 50.0
_MS_PER_SECOND = 1000.0
_SECONDS_PER_MINUTE = 60.0

_METRIC_LABELS = {
    "lines": "Lines",
    "functions": "Functions",
    "branches": "Branches",
}


def _format_duration(duration_ms: float) -> str:
    """Format a duration in milliseconds to a human-readable string."""
    seconds = duration_ms / _MS_PER_SECOND
    if seconds >= _SECONDS_PER_MINUTE:
        return f"{seconds / _SECONDS_PER_MINUTE:.1f}m"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    return f"{duration_ms:.0f}ms"


class CLIReporter:
    """Rich terminal output for coverage summaries and analysis tables."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    # ── Coverage summary ───────────────────────────────────────────────

    def print_coverage_summary(self, report: CoverageReportSnapshot) -> None:
        """Print the overall coverage summary for a report.

        Shows file count, duration, each metric against the threshold,
        the overall status and a warning block when coverage is too low.
        """
        summary = report.summary

        self.console.print()
        self.console.print(
            Panel(
                "[bold white]Test Coverage Summary[/bold white]",
                border_style="cyan",
                padding=(0, 2),
            )
        )
        self.console.print(f"  Files analyzed: [bold]{summary.total_files}[/bold]")
        self.console.print(f"  Duration: [dim]{_format_duration(summary.duration_ms)}[/dim]")
        self.console.print()

        table = Table(title_style="bold cyan", show_edge=False)
        table.add_column("Metric", style="bold")
        table.add_column("Coverage", justify="right")
        table.add_column("Covered", justify="right")
        table.add_column("Status", justify="center")

        for name, metric in summary.metrics():
            table.add_row(*self._metric_row(name, metric))

        self.console.print(table)
        self.console.print()
        self.console.print(f"  Threshold: [bold]{summary.threshold:g}%[/bold]")

        if summary.overall_passing:
            self.console.print("  Overall Status: [bold green]✓ PASSING[/bold green]")
        else:
            self.console.print("  Overall Status: [bold red]✗ FAILING[/bold red]")
            self.console.print()
            self.print_warning("Coverage below threshold!")
            self.print_info("Consider adding more tests to improve coverage.")

        self.console.print()

    def _metric_row(self, name: str, metric: MetricSummary) -> tuple[str, str, str, str]:
        color = self._get_coverage_color(metric.percentage)
        status = "[green]✓[/green]" if metric.passing else "[red]✗[/red]"
        return (
            _METRIC_LABELS.get(name, name),
            f"[{color}]{format_percentage(metric.percentage)}[/{color}]",
            f"{metric.covered}/{metric.total}",
            status,
        )

    def print_file_table(self, report: CoverageReportSnapshot) -> None:
        """Print one row per tracked file."""
        table = Table(title="File Coverage", title_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Lines", justify="right")
        table.add_column("Functions", justify="right")
        table.add_column("Branches", justify="right")
        table.add_column("Complexity", justify="right")
        table.add_column("Status", justify="center")

        for path, file_report in report.files.items():
            cells = []
            for metric in (file_report.lines, file_report.functions, file_report.branches):
                color = self._get_coverage_color(metric.percentage)
                cells.append(f"[{color}]{format_percentage(metric.percentage)}[/{color}]")
            status_color = "green" if file_report.passing else "red"
            table.add_row(
                self._strip_workdir(path),
                *cells,
                str(file_report.complexity),
                f"[{status_color}]{file_report.status}[/{status_color}]",
            )

        self.console.print(table)

    # ── Static analysis ────────────────────────────────────────────────

    def print_analysis_table(self, analyses: list[SourceAnalysis]) -> None:
        """Print estimated totals for each analysed file."""
        table = Table(title="Static Analysis (estimated)", title_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Lines", justify="right")
        table.add_column("Functions", justify="right")
        table.add_column("Branches", justify="right")
        table.add_column("Complexity", justify="right")

        for analysis in analyses:
            table.add_row(
                self._strip_workdir(analysis.file_path),
                str(analysis.total_lines),
                str(analysis.total_functions),
                str(analysis.total_branches),
                str(analysis.complexity),
            )

        self.console.print(table)

    def _get_coverage_color(self, percentage: float) -> str:
        """Get a color based on coverage percentage."""
        if percentage >= _GOOD_COVERAGE:
            return "green"
        if percentage >= _MEDIUM_COVERAGE:
            return "yellow"
        return "red"

    def _strip_workdir(self, file_path: str) -> str:
        """Strip the current working directory from file path for cleaner display."""
        cwd = Path.cwd()
        try:
            return str(Path(file_path).relative_to(cwd))
        except ValueError:
            return file_path


# Singleton instance for easy import
reporter = CLIReporter()
