"""Per-file coverage records and aggregate totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable

    from covest.analyzers.source import SourceAnalysis

_PERCENT_DECIMALS = 2


def percentage(covered: int, total: int) -> float:
    """Return ``covered / total * 100`` rounded to 2 decimals, 0.0 for empty totals."""
    if total <= 0:
        return 0.0
    return round(covered / total * 100, _PERCENT_DECIMALS)


def format_percentage(value: float) -> str:
    """Format a percentage as ``NN.NN%``."""
    return f"{value:.2f}%"


@dataclass
class FileRecord:
    """Static totals for one file plus the caller's executed identifiers.

    Covered counts are the sizes of the executed sets and are not checked
    against the totals, so they can exceed them.
    """

    file_path: str
    total_lines: int
    total_functions: int
    total_branches: int
    complexity: int
    executed_lines: frozenset[int] = field(default_factory=frozenset)
    executed_functions: frozenset[Hashable] = field(default_factory=frozenset)
    executed_branches: frozenset[Hashable] = field(default_factory=frozenset)

    @classmethod
    def from_analysis(
        cls,
        analysis: SourceAnalysis,
        executed_lines: Iterable[int] = (),
        executed_functions: Iterable[Hashable] = (),
        executed_branches: Iterable[Hashable] = (),
    ) -> FileRecord:
        """Combine a static analysis with the caller-supplied executed sets."""
        return cls(
            file_path=analysis.file_path,
            total_lines=analysis.total_lines,
            total_functions=analysis.total_functions,
            total_branches=analysis.total_branches,
            complexity=analysis.complexity,
            executed_lines=frozenset(executed_lines),
            executed_functions=frozenset(executed_functions),
            executed_branches=frozenset(executed_branches),
        )

    @property
    def covered_lines(self) -> int:
        return len(self.executed_lines)

    @property
    def covered_functions(self) -> int:
        return len(self.executed_functions)

    @property
    def covered_branches(self) -> int:
        return len(self.executed_branches)

    @property
    def line_percentage(self) -> float:
        return percentage(self.covered_lines, self.total_lines)

    @property
    def function_percentage(self) -> float:
        return percentage(self.covered_functions, self.total_functions)

    @property
    def branch_percentage(self) -> float:
        return percentage(self.covered_branches, self.total_branches)

    def uncovered_lines(self) -> list[int]:
        """Return line numbers in ``1..total_lines`` missing from the executed set.

        This is plain set subtraction. It does not know which physical lines
        were filtered out as blank or comment lines.
        """
        return [
            line for line in range(1, self.total_lines + 1) if line not in self.executed_lines
        ]


@dataclass
class AggregateTotals:
    """Sums of totals and covered counts across every tracked file."""

    total_lines: int = 0
    covered_lines: int = 0
    total_functions: int = 0
    covered_functions: int = 0
    total_branches: int = 0
    covered_branches: int = 0

    @classmethod
    def from_records(cls, records: Iterable[FileRecord]) -> AggregateTotals:
        """Recompute totals from scratch over ``records``."""
        totals = cls()
        for record in records:
            totals.total_lines += record.total_lines
            totals.covered_lines += record.covered_lines
            totals.total_functions += record.total_functions
            totals.covered_functions += record.covered_functions
            totals.total_branches += record.total_branches
            totals.covered_branches += record.covered_branches
        return totals


@dataclass(frozen=True)
class CoveragePercentages:
    """Line, function and branch percentages (0.0-100.0, 2 decimals)."""

    lines: float
    functions: float
    branches: float

    @classmethod
    def from_totals(cls, totals: AggregateTotals) -> CoveragePercentages:
        return cls(
            lines=percentage(totals.covered_lines, totals.total_lines),
            functions=percentage(totals.covered_functions, totals.total_functions),
            branches=percentage(totals.covered_branches, totals.total_branches),
        )
