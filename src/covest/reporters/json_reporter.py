"""JSON reporter — full structural dump of a coverage report."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from covest.models.report import CoverageReportSnapshot
from covest.reporters.base import ReportWriter

if TYPE_CHECKING:
    from pathlib import Path


class JSONReporter(ReportWriter):
    """Serialize the report to pretty-printed JSON for downstream tooling."""

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def extension(self) -> str:
        return "json"

    def render(self, report: CoverageReportSnapshot) -> str:
        return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def load_json_report(report_path: Path) -> CoverageReportSnapshot:
    """Read a ``coverage-report.json`` file back into a snapshot.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the document is not a JSON object.
    """
    data: Any = json.loads(report_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        msg = f"{report_path} does not contain a coverage report object"
        raise ValueError(msg)
    return CoverageReportSnapshot.from_dict(data)
