"""Configuration parsing from ``.covest.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

CONFIG_FILE_NAME = ".covest.yml"

SUPPORTED_FORMATS = ("json", "html", "text", "lcov")

DEFAULT_THRESHOLD = 80.0
DEFAULT_OUTPUT_DIR = "coverage"
DEFAULT_INCLUDE_PATTERNS = ("src/**/*.js",)
DEFAULT_EXCLUDE_PATTERNS = ("node_modules/**", "tests/**")
DEFAULT_REPORT_FORMATS = ("json", "html", "text")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class TrackerConfig:
    """Coverage tracker options, fixed once a tracker is constructed."""

    threshold: float = DEFAULT_THRESHOLD
    """Minimum acceptable percentage for each metric (default: 80%)."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    """Directory that receives ``coverage-report.*`` files."""

    include_patterns: tuple[str, ...] = DEFAULT_INCLUDE_PATTERNS
    """Glob-style patterns a path must match to be tracked."""

    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    """Glob-style patterns that prevent tracking; checked before includes."""

    report_formats: tuple[str, ...] = field(default=DEFAULT_REPORT_FORMATS)
    """Output formats written by ``save_report`` (json, html, text, lcov)."""

    @classmethod
    def from_options(
        cls,
        *,
        threshold: float | None = None,
        output_dir: str | Path | None = None,
        include_patterns: list[str] | tuple[str, ...] | None = None,
        exclude_patterns: list[str] | tuple[str, ...] | None = None,
        report_formats: list[str] | tuple[str, ...] | None = None,
    ) -> TrackerConfig:
        """Build a config from keyword options, using defaults for ``None``."""
        return cls(
            threshold=float(threshold) if threshold is not None else DEFAULT_THRESHOLD,
            output_dir=str(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR,
            include_patterns=(
                tuple(include_patterns)
                if include_patterns is not None
                else DEFAULT_INCLUDE_PATTERNS
            ),
            exclude_patterns=(
                tuple(exclude_patterns)
                if exclude_patterns is not None
                else DEFAULT_EXCLUDE_PATTERNS
            ),
            report_formats=(
                tuple(report_formats) if report_formats is not None else DEFAULT_REPORT_FORMATS
            ),
        )

    def replace(self, **changes: Any) -> TrackerConfig:
        """Return a copy with the non-``None`` ``changes`` applied."""
        current = {
            "threshold": self.threshold,
            "output_dir": self.output_dir,
            "include_patterns": self.include_patterns,
            "exclude_patterns": self.exclude_patterns,
            "report_formats": self.report_formats,
        }
        current.update({key: value for key, value in changes.items() if value is not None})
        return TrackerConfig.from_options(**current)


def _parse_list(raw: Any, default: tuple[str, ...], key: str) -> tuple[str, ...]:
    """Accept a list or a single string for ``key``; anything else keeps the default."""
    if raw is None:
        return default
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, list):
        return tuple(raw)
    logger.warning("Ignoring non-list %s value in config: %r", key, raw)
    return default


def _parse_threshold(raw: Any) -> float:
    if raw is None:
        raw = os.environ.get("COVEST_THRESHOLD", DEFAULT_THRESHOLD)
    if isinstance(raw, bool) or not isinstance(raw, int | float | str):
        msg = f"threshold must be a number (got: {raw!r})"
        raise ValueError(msg)
    try:
        return float(raw)
    except ValueError as e:
        msg = f"threshold must be a number (got: {raw!r})"
        raise ValueError(msg) from e


def _parse_output_dir(raw: Any) -> str:
    if raw is None:
        return os.environ.get("COVEST_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
    if isinstance(raw, dict | list):
        msg = f"output_dir must be a string (got: {raw!r})"
        raise ValueError(msg)
    return str(raw)


def load_config(root: str | Path) -> TrackerConfig:
    """Load and parse ``.covest.yml`` from ``root``.

    Falls back to defaults and ``COVEST_*`` environment variables when
    the YAML file is missing or incomplete. Keys left blank count as absent.

    Raises:
        ValueError: If ``threshold`` is not a number or ``output_dir`` is
            not a scalar.
        yaml.YAMLError: If the file is not valid YAML.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        text = config_file.read_text(encoding="utf-8")
        parsed = yaml.safe_load(text)
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        elif parsed is not None:
            logger.warning("%s does not contain a mapping; using defaults", config_file)

    return TrackerConfig(
        threshold=_parse_threshold(raw.get("threshold")),
        output_dir=_parse_output_dir(raw.get("output_dir")),
        include_patterns=_parse_list(
            raw.get("include_patterns"), DEFAULT_INCLUDE_PATTERNS, "include_patterns"
        ),
        exclude_patterns=_parse_list(
            raw.get("exclude_patterns"), DEFAULT_EXCLUDE_PATTERNS, "exclude_patterns"
        ),
        report_formats=_parse_list(
            raw.get("report_formats"), DEFAULT_REPORT_FORMATS, "report_formats"
        ),
    )


def validate_config(config: TrackerConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    max_percentage = 100.0
    errors: list[str] = []

    if not 0.0 <= config.threshold <= max_percentage:
        errors.append(f"threshold must be between 0 and 100 (got: {config.threshold})")

    if not config.output_dir:
        errors.append("output_dir is required")

    for name in ("include_patterns", "exclude_patterns"):
        patterns = getattr(config, name)
        errors.extend(
            f"{name} entries must be strings (got: {pattern!r})"
            for pattern in patterns
            if not isinstance(pattern, str)
        )

    if not config.include_patterns:
        errors.append("include_patterns must not be empty (nothing would be tracked)")

    errors.extend(
        f"report_formats contains unsupported format '{fmt}' "
        f"(expected one of: {', '.join(SUPPORTED_FORMATS)})"
        for fmt in config.report_formats
        if fmt not in SUPPORTED_FORMATS
    )

    return errors
