"""LCOV trace reporter.

Only per-file totals and covered counts are known, so the per-line,
per-function and per-branch records written here are synthesized from
those counts:

- ``DA`` marks a line 0 when its number is in the uncovered list, 1 otherwise.
- Functions get placeholder names ``function1..N``; the first ``covered``
  are reported hit.
- Each counted branch yields two outcomes; branches ``1..covered`` are hit.

Tools consuming this file see plausible totals, not ground truth.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from covest.reporters.base import ReportWriter

if TYPE_CHECKING:
    from covest.models.report import CoverageReportSnapshot, FileReport

# LCOV record keys
_LCOV_SF = "SF"
_LCOV_FN = "FN"
_LCOV_FNDA = "FNDA"
_LCOV_FNF = "FNF"
_LCOV_FNH = "FNH"
_LCOV_DA = "DA"
_LCOV_LF = "LF"
_LCOV_LH = "LH"
_LCOV_BDA = "BDA"
_LCOV_BRF = "BRF"
_LCOV_BRH = "BRH"
_LCOV_END = "end_of_record"

_OUTCOMES_PER_BRANCH = 2


def _placeholder_function_name(index: int) -> str:
    return f"function{index}"


class LcovReporter(ReportWriter):
    """Render a coverage report as an LCOV trace file."""

    @property
    def format_name(self) -> str:
        return "lcov"

    @property
    def extension(self) -> str:
        return "lcov"

    def render(self, report: CoverageReportSnapshot) -> str:
        records: list[str] = []
        for file_report in report.files.values():
            records.extend(self._render_record(file_report))
        return "".join(f"{line}\n" for line in records)

    def _render_record(self, file_report: FileReport) -> list[str]:
        record = [f"{_LCOV_SF}:{file_report.file_path}"]
        record.extend(self._function_lines(file_report))
        record.extend(self._line_lines(file_report))
        record.extend(self._branch_lines(file_report))
        record.append(_LCOV_END)
        return record

    def _function_lines(self, file_report: FileReport) -> list[str]:
        functions = file_report.functions
        lines = [
            f"{_LCOV_FN}:{index},{_placeholder_function_name(index)}"
            for index in range(1, functions.total + 1)
        ]
        lines.extend(
            f"{_LCOV_FNDA}:{1 if index <= functions.covered else 0},"
            f"{_placeholder_function_name(index)}"
            for index in range(1, functions.total + 1)
        )
        lines.append(f"{_LCOV_FNF}:{functions.total}")
        lines.append(f"{_LCOV_FNH}:{functions.covered}")
        return lines

    def _line_lines(self, file_report: FileReport) -> list[str]:
        uncovered = set(file_report.uncovered_lines)
        lines = [
            f"{_LCOV_DA}:{line},{0 if line in uncovered else 1}"
            for line in range(1, file_report.lines.total + 1)
        ]
        lines.append(f"{_LCOV_LF}:{file_report.lines.total}")
        lines.append(f"{_LCOV_LH}:{file_report.lines.covered}")
        return lines

    def _branch_lines(self, file_report: FileReport) -> list[str]:
        branches = file_report.branches
        lines: list[str] = []
        for index in range(1, branches.total + 1):
            hits = 1 if index <= branches.covered else 0
            lines.extend(
                f"{_LCOV_BDA}:{index},{outcome},{hits}"
                for outcome in range(_OUTCOMES_PER_BRANCH)
            )
        lines.append(f"{_LCOV_BRF}:{branches.total * _OUTCOMES_PER_BRANCH}")
        lines.append(f"{_LCOV_BRH}:{branches.covered * _OUTCOMES_PER_BRANCH}")
        return lines
