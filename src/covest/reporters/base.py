"""Base class shared by the file-format reporters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from covest.models.report import CoverageReportSnapshot

logger = logging.getLogger(__name__)


class UnsupportedFormatError(ValueError):
    """Raised when a report format has no registered reporter."""

    def __init__(self, format_name: str) -> None:
        super().__init__(f"Unsupported report format: {format_name}")
        self.format_name = format_name


class ReportWriter(ABC):
    """Serialize a coverage report snapshot to one file format."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Format identifier used in ``report_formats`` (e.g. 'json')."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without the dot (e.g. 'txt')."""

    @abstractmethod
    def render(self, report: CoverageReportSnapshot) -> str:
        """Return the report rendered as a string. Must not touch the filesystem."""

    def output_path_for(self, base_path: Path) -> Path:
        """Return ``<base>.<extension>``, keeping any dots already in the base name."""
        return base_path.with_name(f"{base_path.name}.{self.extension}")

    def generate(self, report: CoverageReportSnapshot, base_path: Path) -> Path:
        """Write the rendered report next to ``base_path`` and return its path.

        The parent directory must already exist; write errors propagate.
        """
        output_path = self.output_path_for(base_path)
        output_path.write_text(self.render(report), encoding="utf-8")
        logger.info("%s report written to %s", self.format_name.upper(), output_path)
        return output_path
