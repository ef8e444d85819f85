"""Tests for the Click command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from keyguard.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _json(stdout: str):
    start = min(i for i in (stdout.find("{"), stdout.find("[")) if i >= 0)
    return json.loads(stdout[start:])


class TestAnalyze:
    def test_json_output(self, runner):
        result = runner.invoke(cli, ["-q", "-o", "json", "analyze", "Tr0ub4dor&3"])
        assert result.exit_code == 0, result.output
        report = _json(result.stdout)
        assert report["analysis"]["hasSpecial"] is True
        assert report["analysis"]["score"] >= 3
        assert "Tr0ub4dor&3" not in result.stdout

    def test_prompts_when_password_omitted(self, runner):
        result = runner.invoke(cli, ["-q", "-o", "json", "analyze"], input="password\n")
        assert result.exit_code == 0, result.output
        analysis = _json(result.stdout)["analysis"]
        assert analysis["isCommon"] is True
        assert analysis["score"] == 0

    def test_console_output(self, runner):
        result = runner.invoke(cli, ["analyze", "summer12"])
        assert result.exit_code == 0, result.output
        assert "Strength Meter" in result.stdout

    def test_html_report_file(self, runner, tmp_path):
        path = tmp_path / "report.html"
        result = runner.invoke(cli, ["-q", "-o", "html", "-f", str(path), "analyze", "abc"])
        assert result.exit_code == 0, result.output
        assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_config_file(self, runner, tmp_path):
        config = tmp_path / "keyguard.toml"
        config.write_text("[analyzer]\npassphrase_suggestion_count = 1\n", encoding="utf-8")
        result = runner.invoke(
            cli, ["-q", "-c", str(config), "-o", "json", "analyze", "hello"]
        )
        assert result.exit_code == 0, result.output
        assert len(_json(result.stdout)["analysis"]["passphraseSuggestions"]) == 1

    def test_json_output_is_strict_for_long_password(self, runner):
        password = "abcXYZ019!@#" * 50
        result = runner.invoke(cli, ["-q", "-o", "json", "analyze", password])
        assert result.exit_code == 0, result.output
        assert "Infinity" in result.stdout

        def reject(name):
            raise ValueError(name)

        start = result.stdout.find("{")
        report = json.loads(result.stdout[start:], parse_constant=reject)
        assert report["analysis"]["length"] == 600


class TestEnhance:
    def test_strong_password_passes_through(self, runner):
        result = runner.invoke(
            cli, ["-q", "-o", "json", "enhance", "xkqzvmwpQ!7", "--score", "4"]
        )
        assert result.exit_code == 0, result.output
        assert _json(result.stdout)["enhancedPassword"] == "xkqzvmwpQ!7"

    def test_score_is_computed_when_omitted(self, runner):
        result = runner.invoke(cli, ["-q", "--seed", "1", "-o", "json", "enhance", "summer"])
        assert result.exit_code == 0, result.output
        assert _json(result.stdout)["enhancedPassword"] != "summer"

    def test_score_out_of_range(self, runner):
        result = runner.invoke(cli, ["enhance", "hello", "--score", "7"])
        assert result.exit_code == 2


class TestPassphrase:
    def test_seeded_output_is_reproducible(self, runner):
        args = [
            "-q", "--seed", "7", "-o", "json", "passphrase",
            "--words", "3", "--count", "2", "--no-number", "--no-special",
        ]
        first = runner.invoke(cli, args)
        second = runner.invoke(cli, args)
        assert first.exit_code == 0, first.output
        phrases = _json(first.stdout)
        assert phrases == _json(second.stdout)
        assert len(phrases) == 2
        assert all(p.isalpha() for p in phrases)

    def test_memorable(self, runner):
        result = runner.invoke(
            cli, ["-q", "-o", "json", "passphrase", "--memorable", "--count", "2"]
        )
        assert result.exit_code == 0, result.output
        items = _json(result.stdout)
        assert all(item["hint"].startswith("Imagine a ") for item in items)

    def test_word_count_bounds(self, runner):
        assert runner.invoke(cli, ["passphrase", "--words", "1"]).exit_code == 2

    def test_console(self, runner):
        result = runner.invoke(cli, ["passphrase", "--count", "2"])
        assert result.exit_code == 0, result.output
        assert "Generated Passphrases" in result.stdout


class TestCollaborators:
    def test_chat_without_api_key(self, runner, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        result = runner.invoke(cli, ["chat", "How long should it be?"])
        assert result.exit_code == 1
        assert "API key" in result.output

    def test_history_without_endpoint(self, runner, monkeypatch):
        monkeypatch.delenv("KEYGUARD_HISTORY_TOKEN", raising=False)
        monkeypatch.delenv("KEYGUARD_HISTORY_API_KEY", raising=False)
        result = runner.invoke(cli, ["-q", "history", "list"])
        assert result.exit_code == 1


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output
