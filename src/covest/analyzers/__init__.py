"""Static analyzers: source heuristics and path filtering."""

from covest.analyzers.patterns import glob_to_regex, matches_pattern, normalize_path, should_track
from covest.analyzers.source import (
    SourceAnalysis,
    analyze_source,
    calculate_complexity,
    count_branches,
    count_functions,
    count_lines,
)

__all__ = [
    "SourceAnalysis",
    "analyze_source",
    "calculate_complexity",
    "count_branches",
    "count_functions",
    "count_lines",
    "glob_to_regex",
    "matches_pattern",
    "normalize_path",
    "should_track",
]
