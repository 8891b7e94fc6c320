"""Tests for the covest CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner

from covest.cli import _config_to_dict, _load_manifest, _resolve_manifest_path, cli
from covest.config import TrackerConfig

_SOURCE = "\n".join(
    [
        "function main(flag) {",
        "  if (flag) {",
        "    return 1;",
        "  }",
        "  return 0;",
        "}",
    ]
)


def _write_manifest(root: Path, data: dict[str, Any]) -> Path:
    manifest = root / "executed.json"
    manifest.write_text(json.dumps(data), encoding="utf-8")
    return manifest


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project with one six-line source file, used as the working directory."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.js").write_text(_SOURCE + "\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("COVEST_THRESHOLD", raising=False)
    monkeypatch.delenv("COVEST_OUTPUT_DIR", raising=False)
    return tmp_path


# ── Helpers ───────────────────────────────────────────────────────────


class TestHelpers:
    def test_config_to_dict_uses_lists(self) -> None:
        data = _config_to_dict(TrackerConfig())
        assert data["include_patterns"] == ["src/**/*.js"]
        assert data["threshold"] == 80.0

    def test_load_manifest_with_files_key(self, tmp_path: Path) -> None:
        manifest = _write_manifest(
            tmp_path, {"files": {"src/a.js": {"lines": [1, 2], "functions": ["main"]}}}
        )
        assert _load_manifest(manifest) == {
            "src/a.js": {"lines": [1, 2], "functions": ["main"], "branches": []}
        }

    def test_load_manifest_bare_mapping(self, tmp_path: Path) -> None:
        manifest = _write_manifest(tmp_path, {"src/a.js": {"branches": ["b1"]}})
        assert _load_manifest(manifest)["src/a.js"]["branches"] == ["b1"]

    def test_load_manifest_skips_bad_entries(self, tmp_path: Path) -> None:
        manifest = _write_manifest(tmp_path, {"files": {"src/a.js": 3, "src/b.js": {}}})
        assert list(_load_manifest(manifest)) == ["src/b.js"]

    def test_load_manifest_rejects_list(self, tmp_path: Path) -> None:
        manifest = tmp_path / "executed.json"
        manifest.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            _load_manifest(manifest)

    def test_resolve_manifest_path(self, tmp_path: Path) -> None:
        assert _resolve_manifest_path("src/a.js", tmp_path) == tmp_path / "src" / "a.js"
        assert _resolve_manifest_path("/abs/a.js", tmp_path) == Path("/abs/a.js")

    def test_load_manifest_canonicalizes_object_identifiers(self, tmp_path: Path) -> None:
        manifest = _write_manifest(
            tmp_path,
            {
                "src/a.js": {
                    "functions": [{"name": "f", "line": 1}, {"line": 1, "name": "f"}],
                    "branches": [["if", 2], "plain"],
                }
            },
        )
        entry = _load_manifest(manifest)["src/a.js"]
        assert entry["functions"] == ['{"line": 1, "name": "f"}', '{"line": 1, "name": "f"}']
        assert entry["branches"] == ['["if", 2]', "plain"]

    @pytest.mark.parametrize("line", ["3", 1.5, None, True])
    def test_load_manifest_rejects_non_integer_lines(self, tmp_path: Path, line: Any) -> None:
        manifest = _write_manifest(tmp_path, {"src/a.js": {"lines": [1, line]}})
        with pytest.raises(ValueError, match="must be integers"):
            _load_manifest(manifest)


# ── report ────────────────────────────────────────────────────────────


class TestReportCommand:
    def test_writes_reports(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {"files": {"src/main.js": {"lines": [1, 2, 3]}}})
        result = runner.invoke(cli, ["report", str(manifest)])
        assert result.exit_code == 0, result.output
        out = project / "coverage"
        assert (out / "coverage-report.json").is_file()
        assert (out / "coverage-report.html").is_file()
        assert (out / "coverage-report.txt").is_file()

        data = json.loads((out / "coverage-report.json").read_text(encoding="utf-8"))
        assert data["summary"]["totalFiles"] == 1
        assert data["summary"]["coverage"]["lines"]["covered"] == 3

    def test_format_and_output_options(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(
            cli,
            ["report", str(manifest), "--format", "lcov", "--output", "build/cov"],
        )
        assert result.exit_code == 0, result.output
        assert (project / "build" / "cov.lcov").is_file()
        assert not (project / "build" / "cov.json").exists()

    def test_ci_exits_nonzero_when_failing(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(cli, ["report", str(manifest), "--ci"])
        assert result.exit_code == 1

    def test_ci_passes_with_zero_threshold(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(cli, ["report", str(manifest), "--ci", "--threshold", "0"])
        assert result.exit_code == 0, result.output

    def test_config_file_is_used(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text(
            yaml.dump({"output_dir": "cov-out", "report_formats": ["json"]}), encoding="utf-8"
        )
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(cli, ["report", str(manifest)])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in (project / "cov-out").iterdir()) == [
            "coverage-report.json"
        ]

    def test_unsupported_configured_format_aborts(
        self, runner: CliRunner, project: Path
    ) -> None:
        (project / ".covest.yml").write_text(
            yaml.dump({"report_formats": ["pdf"]}), encoding="utf-8"
        )
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(cli, ["report", str(manifest)])
        assert result.exit_code == 1

    def test_invalid_manifest_aborts(self, runner: CliRunner, project: Path) -> None:
        manifest = project / "executed.json"
        manifest.write_text("not json", encoding="utf-8")
        result = runner.invoke(cli, ["report", str(manifest)])
        assert result.exit_code == 1

    def test_unknown_format_option_rejected(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {})
        result = runner.invoke(cli, ["report", str(manifest), "--format", "xml"])
        assert result.exit_code == 2

    def test_root_under_tests_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        root = tmp_path / "tests" / "proj"
        (root / "src").mkdir(parents=True)
        (root / "src" / "main.js").write_text(_SOURCE + "\n", encoding="utf-8")
        manifest = _write_manifest(tmp_path, {"files": {"src/main.js": {"lines": [1]}}})
        out = tmp_path / "out"

        result = runner.invoke(
            cli,
            ["report", str(manifest), "--path", str(root), "--output-dir", str(out)],
        )

        assert result.exit_code == 0, result.output
        data = json.loads((out / "coverage-report.json").read_text(encoding="utf-8"))
        assert data["summary"]["totalFiles"] == 1
        assert list(data["files"]) == ["src/main.js"]

    def test_object_identifiers_are_counted(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(
            project,
            {"src/main.js": {"lines": [1], "functions": [{"name": "main"}, {"name": "main"}]}},
        )
        result = runner.invoke(cli, ["report", str(manifest), "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads((project / "coverage" / "coverage-report.json").read_text("utf-8"))
        assert data["summary"]["coverage"]["functions"]["covered"] == 1

    def test_non_integer_lines_abort(self, runner: CliRunner, project: Path) -> None:
        manifest = _write_manifest(project, {"src/main.js": {"lines": ["one"]}})
        result = runner.invoke(cli, ["report", str(manifest)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)


# ── analyze ───────────────────────────────────────────────────────────


class TestAnalyzeCommand:
    def test_json_output(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["analyze", "src/main.js", "--json-output"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data == [
            {
                "file_path": "src/main.js",
                "total_lines": 6,
                "total_functions": 1,
                "total_branches": 1,
                "complexity": 2,
            }
        ]

    def test_table_output(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["analyze", "src/main.js"])
        assert result.exit_code == 0, result.output

    def test_requires_files(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["analyze"])
        assert result.exit_code == 2


# ── check ─────────────────────────────────────────────────────────────


class TestCheckCommand:
    @pytest.fixture
    def saved_report(self, runner: CliRunner, project: Path) -> Path:
        manifest = _write_manifest(project, {"src/main.js": {"lines": [1]}})
        result = runner.invoke(cli, ["report", str(manifest), "--format", "json"])
        assert result.exit_code == 0, result.output
        return project / "coverage" / "coverage-report.json"

    def test_failing_report_exits_one(self, runner: CliRunner, saved_report: Path) -> None:
        result = runner.invoke(cli, ["check", str(saved_report)])
        assert result.exit_code == 1

    def test_threshold_override(self, runner: CliRunner, saved_report: Path) -> None:
        result = runner.invoke(cli, ["check", str(saved_report), "--threshold", "0"])
        assert result.exit_code == 0, result.output

    def test_unreadable_report_aborts(self, runner: CliRunner, project: Path) -> None:
        bad = project / "bad.json"
        bad.write_text("[]", encoding="utf-8")
        result = runner.invoke(cli, ["check", str(bad)])
        assert result.exit_code == 1


# ── config ────────────────────────────────────────────────────────────


class TestConfigCommands:
    def test_show_json(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text(yaml.dump({"threshold": 90}), encoding="utf-8")
        result = runner.invoke(cli, ["config", "show", "--json-output"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["threshold"] == 90.0
        assert data["report_formats"] == ["json", "html", "text"]

    def test_show_yaml(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["config", "show", "--path", str(project)])
        assert result.exit_code == 0, result.output
        assert "output_dir: coverage" in result.output

    def test_validate_ok(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["config", "validate"])
        assert result.exit_code == 0, result.output

    def test_validate_reports_errors(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text(yaml.dump({"threshold": 150}), encoding="utf-8")
        result = runner.invoke(cli, ["config", "validate"])
        assert result.exit_code == 1

    def test_broken_yaml_aborts(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text("threshold: [oops\n", encoding="utf-8")
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1

    def test_blank_threshold_is_valid(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text("threshold:\n", encoding="utf-8")
        result = runner.invoke(cli, ["config", "validate"])
        assert result.exit_code == 0, result.output

    def test_non_numeric_threshold_reported(self, runner: CliRunner, project: Path) -> None:
        (project / ".covest.yml").write_text("threshold: [80]\n", encoding="utf-8")
        result = runner.invoke(cli, ["config", "validate"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
