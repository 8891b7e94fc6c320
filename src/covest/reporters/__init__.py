"""Reporters for writing coverage reports to files and the terminal."""

from __future__ import annotations

from covest.reporters.base import ReportWriter, UnsupportedFormatError
from covest.reporters.html import HTMLReporter
from covest.reporters.json_reporter import JSONReporter, load_json_report
from covest.reporters.lcov import LcovReporter
from covest.reporters.terminal import CLIReporter, reporter
from covest.reporters.text import TextReporter

_WRITERS: dict[str, type[ReportWriter]] = {
    "json": JSONReporter,
    "html": HTMLReporter,
    "text": TextReporter,
    "lcov": LcovReporter,
}


def get_writer(format_name: str) -> ReportWriter:
    """Return the reporter registered for ``format_name``.

    Raises:
        UnsupportedFormatError: If no reporter handles the format.
    """
    writer_cls = _WRITERS.get(format_name)
    if writer_cls is None:
        raise UnsupportedFormatError(format_name)
    return writer_cls()


__all__ = [
    "CLIReporter",
    "HTMLReporter",
    "JSONReporter",
    "LcovReporter",
    "ReportWriter",
    "TextReporter",
    "UnsupportedFormatError",
    "get_writer",
    "load_json_report",
    "reporter",
]
