# tests/unit/cli/test_scmpulse_cli.py
"""Tests for the scmpulse CLI."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from scmpulse.cli import app

runner = CliRunner()

SETTINGS_YAML = """
hostname: "build-01"
global_tags:
  - "team:ci"
blacklist:
  - "demo/sandbox"
jobs:
  - pattern: "demo/.*"
    emit_on_checkout: true
  - pattern: "docs/.*"
    emit_on_checkout: false
sink:
  name: "console"
"""

CI_ENV = {
    "JOB_NAME": "demo/main",
    "BUILD_NUMBER": "42",
    "BUILD_ID": "42",
    "BUILD_URL": "https://ci.example.com/job/demo/job/main/42/",
    "GIT_BRANCH": "origin/main",
    "NODE_NAME": "agent-1",
}


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """configure_logging() swaps root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "scmpulse.yaml"
    path.write_text(SETTINGS_YAML)
    return path


def _json_lines(output: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.splitlines() if line.startswith('{"type"')]


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "scmpulse version" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "emit" in result.stdout
        assert "validate" in result.stdout

    def test_missing_env_file_fails(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "missing.env"), "validate", "-s", "x.yaml"])

        assert result.exit_code == 1


class TestValidateCommand:
    def test_valid_settings(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", "--settings", str(settings_file)])

        assert result.exit_code == 0
        assert "Configuration valid" in result.stdout
        assert "Sink: console" in result.stdout
        assert "Job rules: 2 (1 emitting on checkout)" in result.stdout
        assert "Whitelist: 0 pattern(s), blacklist: 1 pattern(s)" in result.stdout

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1

    def test_invalid_settings(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text('whitelist:\n  - "demo/("\n')

        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(path)])

        assert result.exit_code == 1

    def test_unknown_sink(self, tmp_path: Path) -> None:
        path = tmp_path / "sink.yaml"
        path.write_text('sink:\n  name: "carrier-pigeon"\n')

        result = runner.invoke(app, ["--no-dotenv", "validate", "-s", str(path)])

        assert result.exit_code == 1


class TestEmitCommand:
    def test_emits_event_then_counter(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "emit", "-s", str(settings_file)], env=CI_ENV)

        assert result.exit_code == 0
        event, counter = _json_lines(result.stdout)
        assert event["type"] == "event"
        assert event["title"] == "Job demo/main build #42 checkout finished on build-01"
        assert event["host"] == "build-01"
        assert {"job:demo/main", "branch:main", "node:agent-1", "team:ci"} <= set(event["tags"])
        assert counter == {
            "type": "counter",
            "metric": "jenkins.scm.checkout",
            "host": "build-01",
            "tags": event["tags"],
            "value": 1,
        }

    def test_job_option_overrides_environment(self, settings_file: Path) -> None:
        result = runner.invoke(
            app,
            ["--no-dotenv", "emit", "-s", str(settings_file), "--job", "demo/release"],
            env=CI_ENV,
        )

        assert result.exit_code == 0
        event, _ = _json_lines(result.stdout)
        assert "job:demo/release" in event["tags"]

    @pytest.mark.parametrize("job", ["docs/site", "demo/sandbox", "unconfigured/job"])
    def test_ineligible_job_emits_nothing(self, settings_file: Path, job: str) -> None:
        result = runner.invoke(app, ["--no-dotenv", "emit", "-s", str(settings_file), "-j", job], env=CI_ENV)

        assert result.exit_code == 0
        assert _json_lines(result.stdout) == []

    def test_missing_job_name(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "emit", "-s", str(settings_file)], env={"JOB_NAME": None})

        assert result.exit_code == 1

    def test_invalid_build_number(self, settings_file: Path) -> None:
        env = {**CI_ENV, "BUILD_NUMBER": "forty-two"}

        result = runner.invoke(app, ["--no-dotenv", "emit", "-s", str(settings_file)], env=env)

        assert result.exit_code == 1

    def test_sink_failure_does_not_fail_command(self, tmp_path: Path) -> None:
        path = tmp_path / "datadog.yaml"
        path.write_text(
            'jobs:\n  - pattern: ".*"\n    emit_on_checkout: true\n'
            'sink:\n  name: "datadog"\n  options:\n'
            '    api_key: "test-key"\n    site: "http://127.0.0.1:9"\n    timeout_seconds: 1\n'
        )

        result = runner.invoke(app, ["--no-dotenv", "emit", "-s", str(path)], env=CI_ENV)

        assert result.exit_code == 0
