"""Tests for the keepsake CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from keepsake.cli import app

runner = CliRunner()

HISTORY_YAML = """
projects:
  - id: Project-1
environments:
  - id: Environment-1
  - id: Environment-2
releases:
  - id: Release-1
    projectId: Project-1
  - id: Release-2
    projectId: Project-1
  - id: Release-3
    projectId: Project-1
deployments:
  - id: Deployment-1
    releaseId: Release-1
    environmentId: Environment-1
    deployedOn: 2000-01-01T10:00:00
  - id: Deployment-2
    releaseId: Release-2
    environmentId: Environment-1
    deployedOn: 2000-01-02T10:00:00
  - id: Deployment-3
    releaseId: Release-3
    environmentId: Environment-2
    deployedOn: 2000-01-02T11:00:00
  - id: Deployment-4
    releaseId: Release-404
    environmentId: Environment-1
    deployedOn: 2000-01-03T10:00:00
"""


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    path = tmp_path / "history.yaml"
    path.write_text(HISTORY_YAML)
    return path


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "keepsake version" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "keep" in result.stdout
        assert "validate" in result.stdout


class TestKeepCommand:
    def test_console_output(self, history_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep", "--history", str(history_file), "-n", "1"])

        assert result.exit_code == 0, result.output
        assert "Release-2 kept because it was deployed to Environment-1" in result.stdout
        assert "Release-3 kept because it was deployed to Environment-2" in result.stdout
        assert "Release-1 kept" not in result.stdout
        assert "2 release(s) kept" in result.stdout

    def test_json_output(self, history_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep", "-H", str(history_file), "-n", "2", "--format", "json"])

        assert result.exit_code == 0, result.output
        events = [json.loads(line) for line in result.stdout.strip().splitlines()]
        kept = {e["release_id"] for e in events if e["event"] == "release_kept"}
        skipped = [e for e in events if e["event"] == "deployment_skipped"]
        [summary] = [e for e in events if e["event"] == "retention_completed"]
        assert kept == {"Release-1", "Release-2", "Release-3"}
        assert skipped == [
            {"event": "deployment_skipped", "deployment_id": "Deployment-4", "reason": "unknown_release", "reference": "Release-404"}
        ]
        assert summary["releases_to_keep"] == 2
        assert summary["group_count"] == 2

    def test_releases_to_keep_from_settings(self, tmp_path: Path, history_file: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text(f"retention:\n  releases_to_keep: 1\nhistory:\n  path: {history_file}\n")

        result = runner.invoke(app, ["--no-dotenv", "keep", "--settings", str(settings_path), "--format", "json"])

        assert result.exit_code == 0, result.output
        events = [json.loads(line) for line in result.stdout.strip().splitlines()]
        kept = {e["release_id"] for e in events if e["event"] == "release_kept"}
        assert kept == {"Release-2", "Release-3"}

    def test_cli_option_overrides_settings(self, tmp_path: Path, history_file: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("retention:\n  releases_to_keep: 1\n")

        result = runner.invoke(
            app,
            ["--no-dotenv", "keep", "-s", str(settings_path), "-H", str(history_file), "-n", "5", "--format", "json"],
        )

        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout.strip().splitlines()[-1])
        assert summary["releases_to_keep"] == 5

    def test_show_skipped_reports_on_stderr(self, history_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep", "-H", str(history_file), "--show-skipped"])

        assert result.exit_code == 0, result.output
        assert "skipped deployment Deployment-4: unknown_release (Release-404)" in result.output
        assert "skipped deployment" not in result.stdout

    def test_missing_history_argument(self) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep"])

        assert result.exit_code == 1
        assert "No deployment history given" in result.output

    def test_missing_history_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep", "-H", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "Cannot read deployment history" in result.output

    def test_non_positive_releases_to_keep(self, history_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "keep", "-H", str(history_file), "-n", "0"])

        assert result.exit_code == 1
        assert "positive integer" in result.output

    def test_invalid_settings_exit_code(self, tmp_path: Path, history_file: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("retention:\n  releases_to_keep: -2\n")

        result = runner.invoke(app, ["--no-dotenv", "keep", "-s", str(settings_path), "-H", str(history_file)])

        assert result.exit_code == 1


class TestValidateCommand:
    def test_valid_settings(self, tmp_path: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("retention:\n  releases_to_keep: 4\n")

        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(settings_path)])

        assert result.exit_code == 0, result.output
        assert "Settings valid" in result.stdout
        assert "Releases to keep: 4" in result.stdout

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "File Not Found" in result.output

    def test_invalid_settings(self, tmp_path: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("retention:\n  releases_to_keep: 0\n")

        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(settings_path)])

        assert result.exit_code == 1
        assert "Configuration Validation Failed" in result.output


class TestDotenv:
    def test_missing_explicit_env_file_fails(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "missing.env"), "validate", "-s", "x.yaml"])

        assert result.exit_code == 1
        assert ".env file not found" in result.output
