"""Heuristic static analysis of JavaScript-like source text.

These counts are estimates taken from regular expressions over raw text.
They are not a parse and never a substitute for instrumentation data:
string literals, comments and regex literals can all inflate the numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ── Constants ────────────────────────────────────────────────────

_COMMENT_PREFIXES = ("//", "/*", "*")

# Named declarations, arrow bodies and ``key: function`` shorthand.
_FUNCTION_RE = re.compile(r"function\s+\w+|=>\s*\{|:\s*function")
# Arrow functions assigned to an identifier. Counted in a second pass,
# so ``const f = () => {`` contributes to both patterns.
_ASSIGNED_ARROW_RE = re.compile(r"\w+\s*=\s*\([^)]*\)\s*=>")

_IF_RE = re.compile(r"\bif\s*\(")
_ELSE_IF_RE = re.compile(r"\belse\s+if\s*\(")
_WHILE_RE = re.compile(r"\bwhile\s*\(")
_FOR_RE = re.compile(r"\bfor\s*\(")
_SWITCH_RE = re.compile(r"\bswitch\s*\(")
_CASE_RE = re.compile(r"\bcase\s+")
_CATCH_RE = re.compile(r"\bcatch\s*\(")
_TRY_RE = re.compile(r"\btry\s*\{")
_TERNARY_RE = re.compile(r"\?\s*[^:]+\s*:")
_AND_RE = re.compile(r"&&")
_OR_RE = re.compile(r"\|\|")

_BRANCH_PATTERNS = (_IF_RE, _SWITCH_RE, _TERNARY_RE, _TRY_RE)

_DECISION_POINT_PATTERNS = (
    _IF_RE,
    _ELSE_IF_RE,
    _WHILE_RE,
    _FOR_RE,
    _SWITCH_RE,
    _CASE_RE,
    _CATCH_RE,
    _TERNARY_RE,
    _AND_RE,
    _OR_RE,
)

BASE_COMPLEXITY = 1


# ── Data models ──────────────────────────────────────────────────


@dataclass(frozen=True)
class SourceAnalysis:
    """Static totals estimated for one source file."""

    file_path: str
    total_lines: int
    total_functions: int
    total_branches: int
    complexity: int


# ── Heuristics ───────────────────────────────────────────────────


def _count(pattern: re.Pattern[str], content: str) -> int:
    return sum(1 for _ in pattern.finditer(content))


def count_lines(content: str) -> int:
    """Count lines that are neither blank nor start with a comment marker.

    Continuation lines inside a block comment that do not start with ``*``
    are still counted.
    """
    total = 0
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith(_COMMENT_PREFIXES):
            total += 1
    return total


def count_functions(content: str) -> int:
    """Count function-like constructs (assigned arrows are counted twice)."""
    return _count(_FUNCTION_RE, content) + _count(_ASSIGNED_ARROW_RE, content)


def count_branches(content: str) -> int:
    """Count ``if``, ``switch``, ternary and ``try`` occurrences."""
    return sum(_count(pattern, content) for pattern in _BRANCH_PATTERNS)


def calculate_complexity(content: str) -> int:
    """Estimate cyclomatic complexity as 1 plus textual decision points."""
    return BASE_COMPLEXITY + sum(_count(pattern, content) for pattern in _DECISION_POINT_PATTERNS)


def analyze_source(content: str, file_path: str = "") -> SourceAnalysis:
    """Run every heuristic over ``content``. Never raises on odd input."""
    return SourceAnalysis(
        file_path=file_path,
        total_lines=count_lines(content),
        total_functions=count_functions(content),
        total_branches=count_branches(content),
        complexity=calculate_complexity(content),
    )
