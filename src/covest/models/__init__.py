"""Data models for coverage records and reports."""

from covest.models.coverage import (
    AggregateTotals,
    CoveragePercentages,
    FileRecord,
    format_percentage,
    percentage,
)
from covest.models.report import (
    CoverageReportSnapshot,
    FileMetric,
    FileReport,
    MetricSummary,
    ReportSummary,
)

__all__ = [
    "AggregateTotals",
    "CoveragePercentages",
    "CoverageReportSnapshot",
    "FileMetric",
    "FileRecord",
    "FileReport",
    "MetricSummary",
    "ReportSummary",
    "format_percentage",
    "percentage",
]
