"""Glob-style include/exclude filtering for tracked file paths.

Patterns are translated to regular expressions and tested with ``re.search``,
so a pattern may match anywhere inside a path rather than the whole path.
"""

from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_GLOB_TOKEN_RE = re.compile(r"\*\*/|\*\*|\*|\?")

_GLOB_TRANSLATIONS = {
    "**/": "(?:.*/)?",
    "**": ".*",
    "*": "[^/]*",
    "?": "[^/]",
}


def normalize_path(file_path: str | os.PathLike[str]) -> str:
    """Collapse ``.``/``..`` segments and use forward slashes."""
    return os.path.normpath(os.fspath(file_path)).replace(os.sep, "/")


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern into an unanchored regular expression.

    ``**`` matches across separators (``**/`` also matches no directory at
    all), ``*`` stays within one path segment and ``?`` matches a single
    non-separator character. Everything else is literal.
    """
    parts: list[str] = []
    position = 0
    for match in _GLOB_TOKEN_RE.finditer(pattern):
        parts.append(re.escape(pattern[position : match.start()]))
        parts.append(_GLOB_TRANSLATIONS[match.group(0)])
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("".join(parts))


def matches_pattern(file_path: str, pattern: str) -> bool:
    """Return True if ``pattern`` matches anywhere in ``file_path``."""
    return glob_to_regex(pattern).search(file_path) is not None


def should_track(
    file_path: str | os.PathLike[str],
    include_patterns: Iterable[str],
    exclude_patterns: Iterable[str],
) -> bool:
    """Apply exclude patterns first, then require an include match."""
    normalized = normalize_path(file_path)

    for pattern in exclude_patterns:
        if matches_pattern(normalized, pattern):
            logger.debug("Skipping %s (excluded by %s)", normalized, pattern)
            return False

    for pattern in include_patterns:
        if matches_pattern(normalized, pattern):
            return True

    logger.debug("Skipping %s (no include pattern matched)", normalized)
    return False
