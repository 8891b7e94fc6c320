"""covest CLI — top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from covest import __version__
from covest.analyzers.source import analyze_source
from covest.config import SUPPORTED_FORMATS, TrackerConfig, load_config, validate_config
from covest.reporters import UnsupportedFormatError, load_json_report
from covest.reporters.terminal import reporter
from covest.tracker import CoverageTracker

logger = logging.getLogger(__name__)
console = Console()


def _config_to_dict(config: TrackerConfig) -> dict[str, Any]:
    """Convert TrackerConfig to a plain dict for display."""
    result = asdict(config)
    for key, value in result.items():
        if isinstance(value, tuple):
            result[key] = list(value)
    return result


def _identifier(item: Any) -> Any:
    """Return a hashable form of a manifest identifier.

    Objects and arrays become their canonical JSON text so that equal
    identifiers compare equal.
    """
    if isinstance(item, dict | list):
        return json.dumps(item, sort_keys=True)
    return item


def _load_manifest(manifest_path: Path) -> dict[str, dict[str, list[Any]]]:
    """Load an executed-identifier manifest.

    Accepts ``{"files": {path: {...}}}`` or a bare ``{path: {...}}`` mapping,
    where each entry may hold ``lines``, ``functions`` and ``branches`` lists.

    Raises:
        ValueError: If the document is not an object or a line is not an integer.
    """
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        msg = "manifest must be a JSON object"
        raise ValueError(msg)

    files = data.get("files", data)
    if not isinstance(files, dict):
        msg = "manifest 'files' must be a JSON object"
        raise ValueError(msg)

    manifest: dict[str, dict[str, list[Any]]] = {}
    for file_path, entry in files.items():
        if not isinstance(entry, dict):
            logger.warning("Ignoring manifest entry for %s: expected an object", file_path)
            continue
        executed = {
            key: entry[key] if isinstance(entry.get(key), list) else []
            for key in ("lines", "functions", "branches")
        }
        bad_lines = [
            line
            for line in executed["lines"]
            if not isinstance(line, int) or isinstance(line, bool)
        ]
        if bad_lines:
            msg = f"manifest lines for {file_path} must be integers (got: {bad_lines[0]!r})"
            raise ValueError(msg)
        manifest[str(file_path)] = {
            "lines": list(executed["lines"]),
            "functions": [_identifier(item) for item in executed["functions"]],
            "branches": [_identifier(item) for item in executed["branches"]],
        }
    return manifest


def _resolve_manifest_path(file_path: str, root: Path) -> Path:
    """Return where to read a manifest entry from; relative paths are anchored at ``root``."""
    return root / file_path


@click.group()
@click.version_option(version=__version__, prog_name="covest")
def cli() -> None:
    """Estimate line, function and branch coverage from source text."""


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (holds .covest.yml).",
)
@click.option("--threshold", type=float, default=None, help="Override the coverage threshold.")
@click.option("--output-dir", default=None, help="Override the report output directory.")
@click.option(
    "--format",
    "formats",
    multiple=True,
    type=click.Choice(SUPPORTED_FORMATS),
    help="Report format to write (repeatable). Defaults to the configured formats.",
)
@click.option(
    "--output",
    "output_base",
    default=None,
    help="Base path for report files, without extension.",
)
@click.option("--ci", is_flag=True, help="Exit with status 1 when coverage is below threshold.")
@click.option("--files", "show_files", is_flag=True, help="Also print a per-file table.")
def report(
    manifest: Path,
    path: str,
    threshold: float | None,
    output_dir: str | None,
    formats: tuple[str, ...],
    output_base: str | None,
    *,
    ci: bool,
    show_files: bool,
) -> None:
    """Track every file in MANIFEST and write coverage reports.

    MANIFEST is a JSON file mapping source paths to the executed
    ``lines``, ``functions`` and ``branches`` your test harness recorded.

    Example:
      covest report executed.json --format json --format lcov --ci
    """
    root = Path(path)
    try:
        config = load_config(root)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config = config.replace(
        threshold=threshold,
        output_dir=output_dir,
        report_formats=formats or None,
    )

    try:
        entries = _load_manifest(manifest)
    except (OSError, ValueError) as e:
        reporter.print_error(f"Failed to read manifest {manifest}: {e}")
        raise click.Abort from e

    tracker = CoverageTracker(config)
    skipped = 0
    for file_path, executed in entries.items():
        record = tracker.track_file(
            file_path,
            executed_lines=executed["lines"],
            executed_functions=executed["functions"],
            executed_branches=executed["branches"],
            source_path=_resolve_manifest_path(file_path, root),
        )
        if record is None:
            skipped += 1

    if skipped:
        reporter.print_info(f"{skipped} manifest entr{'y' if skipped == 1 else 'ies'} skipped")

    try:
        result = tracker.save_report(output_base)
    except UnsupportedFormatError as e:
        reporter.print_error(str(e))
        raise click.Abort from e
    except OSError as e:
        reporter.print_error(f"Failed to write reports: {e}")
        raise click.Abort from e

    if show_files:
        reporter.print_file_table(result.report)

    for saved in result.saved_files:
        reporter.print_success(f"Wrote {saved}")

    if ci and not result.passing:
        raise SystemExit(1)


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON.")
def analyze(files: tuple[Path, ...], *, as_json: bool) -> None:
    """Show estimated lines, functions, branches and complexity for FILES."""
    analyses = []
    for file_path in files:
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            reporter.print_warning(f"Skipping {file_path}: {e}")
            continue
        analyses.append(analyze_source(content, str(file_path)))

    if as_json:
        click.echo(json.dumps([asdict(analysis) for analysis in analyses], indent=2))
        return

    reporter.print_analysis_table(analyses)


@cli.command()
@click.argument("report_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--threshold",
    type=float,
    default=None,
    help="Re-judge the saved totals against a different threshold.",
)
def check(report_file: Path, threshold: float | None) -> None:
    """Check a saved coverage-report.json and exit 1 when it is failing."""
    try:
        snapshot = load_json_report(report_file)
    except (OSError, ValueError) as e:
        reporter.print_error(f"Failed to read report {report_file}: {e}")
        raise click.Abort from e

    if threshold is not None:
        snapshot = snapshot.with_threshold(threshold)

    reporter.print_coverage_summary(snapshot)
    if not snapshot.overall_passing:
        raise SystemExit(1)


@cli.group("config")
def config_group() -> None:
    """Inspect `.covest.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration."""
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.covest.yml` and list any problems."""
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort
