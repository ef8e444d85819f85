"""Tests for the shared configuration, logging and HTTP layers."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from shared.config import KeyguardConfig, get_config
from shared.logger import KeyguardLogger
from shared.math_utils import clamp, mean, pow2, round_half_up
from shared.network import CircuitBreaker, CircuitState, KeyguardHTTPError


# --------------------------------------------------------------------- #
#  Configuration
# --------------------------------------------------------------------- #


class TestConfig:
    def test_defaults(self):
        config = KeyguardConfig()
        assert config.chat.model == "gpt-4o-mini"
        assert config.chat.max_message_length == 500
        assert config.history.table == "password_history"
        assert config.analyzer.enhance_below_score == 3

    def test_load_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / "keyguard.toml"
        path.write_text(
            "[global]\n"
            'log_level = "DEBUG"\n'
            "shiny_new_option = true\n"
            "[analyzer]\n"
            "passphrase_suggestion_count = 5\n"
            "[chat]\n"
            'model = "local-model"\n'
            "[history]\n"
            'base_url = "https://db.test"\n'
            "[unknown_section]\n"
            "x = 1\n",
            encoding="utf-8",
        )
        config = KeyguardConfig.load(path)
        assert config.global_settings.log_level == "DEBUG"
        assert config.analyzer.passphrase_suggestion_count == 5
        assert config.chat.model == "local-model"
        assert config.chat.temperature == 0.7
        assert config.history.base_url == "https://db.test"

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            KeyguardConfig.load(tmp_path / "absent.toml")

    def test_secrets_come_from_environment(self, monkeypatch):
        monkeypatch.setenv("KEYGUARD_TEST_CHAT_KEY", "sk-env")
        config = KeyguardConfig()
        config.chat.api_key_env = "KEYGUARD_TEST_CHAT_KEY"
        assert config.chat.api_key == "sk-env"
        assert "sk-env" not in json.dumps(config.to_dict())

    def test_history_token_falls_back_to_api_key(self, monkeypatch):
        monkeypatch.delenv("KEYGUARD_HISTORY_TOKEN", raising=False)
        monkeypatch.setenv("KEYGUARD_HISTORY_API_KEY", "anon")
        assert KeyguardConfig().history.token == "anon"

    def test_get_config_caches(self, tmp_path):
        path = tmp_path / "keyguard.toml"
        path.write_text("[chat]\nmax_tokens = 100\n", encoding="utf-8")
        loaded = get_config(path)
        assert get_config() is loaded
        assert loaded.chat.max_tokens == 100


# --------------------------------------------------------------------- #
#  Logging
# --------------------------------------------------------------------- #


class TestLogger:
    def test_json_file_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "keyguard.log"
        log = KeyguardLogger(
            "test-json", log_level="INFO", log_file=log_file,
            json_logs=True, console_output=False,
        )
        with log.operation("analyze"):
            log.info("Analysis complete", length=12, score=3)
        for handler in log.underlying.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["level"] == "INFO"
        assert entry["logger"] == "keyguard.test-json"
        assert entry["component"] == "test-json"
        assert entry["operation"] == "analyze"
        assert entry["extra"] == {"length": 12, "score": 3}

    def test_level_and_handlers(self):
        log = KeyguardLogger("test-level", log_level="error", console_output=False)
        assert log.underlying.level == logging.ERROR
        assert log.underlying.handlers == []
        assert log.component == "test-level"

    def test_operation_scope_is_restored(self):
        log = KeyguardLogger("test-scope", console_output=False)
        with log.operation("outer"):
            with log.operation("inner"):
                assert log._operation == "inner"
            assert log._operation == "outer"
        assert log._operation is None


# --------------------------------------------------------------------- #
#  HTTP client
# --------------------------------------------------------------------- #


class TestKeyguardHTTP:
    @pytest.mark.asyncio
    async def test_retries_transient_status(self, make_http):
        responses = iter([httpx.Response(503), httpx.Response(200, json={"ok": True})])
        async with make_http(lambda r: next(responses), max_retries=2) as http:
            assert await http.request_json("/ping") == {"ok": True}
            assert http.circuit_breaker.state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_non_retryable_status(self, make_http):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        async with make_http(handler, max_retries=3) as http:
            with pytest.raises(KeyguardHTTPError) as excinfo:
                await http.request("/missing")
        assert excinfo.value.status_code == 404
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_transport_errors_exhaust_retries(self, make_http):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        async with make_http(handler, max_retries=1) as http:
            with pytest.raises(KeyguardHTTPError, match="attempts exhausted"):
                await http.request("/ping")
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_circuit_opens(self, make_http):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        async with make_http(handler, cb_failure_threshold=1) as http:
            with pytest.raises(KeyguardHTTPError):
                await http.request("/flaky")
            with pytest.raises(KeyguardHTTPError, match="Circuit breaker OPEN"):
                await http.request("/flaky")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, make_http):
        async with make_http(lambda r: httpx.Response(204)) as http:
            assert await http.request_json("/empty") is None

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_http):
        async with make_http(lambda r: httpx.Response(200, text="<html>")) as http:
            with pytest.raises(KeyguardHTTPError, match="JSON decode error"):
                await http.request_json("/html")


class TestCircuitBreaker:
    def test_half_open_after_recovery(self):
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=0.0)
        breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED
        breaker.record_failure()
        assert breaker.state is CircuitState.OPEN
        assert breaker.allow_request()
        assert breaker.state is CircuitState.HALF_OPEN
        breaker.record_success()
        assert breaker.state is CircuitState.CLOSED


# --------------------------------------------------------------------- #
#  Math helpers
# --------------------------------------------------------------------- #


class TestMathUtils:
    @pytest.mark.parametrize(
        "value, expected", [(2.5, 3), (3.5, 4), (2.4999, 2), (-0.5, 0), (0.0, 0)]
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_pow2_saturates(self):
        assert pow2(10) == 1024.0
        assert pow2(5_000) == float("inf")

    def test_mean_and_clamp(self):
        assert mean([]) == 0.0
        assert mean([1, 2, 3]) == 2.0
        assert clamp(1.5, 0.0, 0.99) == 0.99
        assert clamp(-1.0, 0.0, 1.0) == 0.0
