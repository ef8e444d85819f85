"""Tests for the chat assistant and history store, stubbed with httpx.MockTransport."""

from __future__ import annotations

import hashlib
import json
import random

import httpx
import pytest

from shared.config import ChatConfig, HistoryConfig, KeyguardConfig
from shared.logger import KeyguardLogger
from shared.network import KeyguardHTTPError

import keyguard.integrations.chat as chat_module
import keyguard.integrations.history as history_module
from keyguard.analyzers.password_analyzer import analyze_password
from keyguard.core.engine import KeyguardEngine
from keyguard.core.errors import (
    CollaboratorConfigError,
    InvalidInputError,
    MessageTooLongError,
)
from keyguard.integrations.chat import (
    FALLBACK_REPLY,
    ChatAssistant,
    build_chat_summary,
    render_context,
)
from keyguard.integrations.history import (
    HistoryStore,
    build_history_record,
    hash_password,
)

PASSWORD = "Tr0ub4dor&3"


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def analysis():
    return analyze_password(PASSWORD, random.Random(5))


# --------------------------------------------------------------------- #
#  Chat
# --------------------------------------------------------------------- #


class TestChatSummary:
    def test_summary_fields(self, analysis):
        summary = build_chat_summary(analysis)
        assert isinstance(summary.entropy, int)
        assert summary.time_to_crack == analysis.time_to_crack["Brute Force (Offline)"]
        assert summary.score == analysis.score
        assert PASSWORD not in summary.model_dump_json()

    def test_context_without_analysis(self):
        assert render_context(None) == "The user hasn't provided a password for analysis yet."

    def test_context_lists_characteristics(self, analysis):
        context = render_context(build_chat_summary(analysis))
        assert f"- Length: {len(PASSWORD)} characters" in context
        assert f"- Password strength score: {analysis.score}/4" in context


class TestChatAssistant:
    @pytest.mark.asyncio
    async def test_ask_sends_summary_not_password(self, make_http, analysis):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion("Use a longer passphrase."))

        async with make_http(handler, base_url="https://llm.test/v1") as http:
            async with ChatAssistant(ChatConfig(), http=http, api_key="sk-test") as bot:
                reply = await bot.ask("  Is my password good?  ", analysis)

        assert reply == "Use a longer passphrase."
        (request,) = seen
        assert request.method == "POST"
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o-mini"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 800
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert body["messages"][1]["content"].endswith("\n\nIs my password good?")
        assert PASSWORD not in request.content.decode()

    @pytest.mark.asyncio
    async def test_oversized_message_is_rejected_before_request(self, make_http):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_completion("hi"))

        async with make_http(handler) as http:
            async with ChatAssistant(http=http, api_key="sk-test") as bot:
                with pytest.raises(MessageTooLongError) as excinfo:
                    await bot.ask("x" * 501)
                assert await bot.ask("x" * 500) == "hi"

        assert str(excinfo.value) == "Message is too long (501 characters, max 500)"
        assert len(calls) == 1

    @pytest.mark.parametrize("message", ["", "   ", None, 42])
    def test_invalid_messages(self, message):
        with pytest.raises(InvalidInputError):
            ChatAssistant(api_key="sk-test").validate_message(message)

    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("KEYGUARD_TEST_MISSING_KEY", raising=False)
        config = ChatConfig(api_key_env="KEYGUARD_TEST_MISSING_KEY")
        with pytest.raises(CollaboratorConfigError):
            async with ChatAssistant(config):
                pass

    @pytest.mark.asyncio
    async def test_empty_reply_uses_fallback(self, make_http):
        async with make_http(lambda r: httpx.Response(200, json={"choices": []})) as http:
            async with ChatAssistant(http=http, api_key="sk-test") as bot:
                assert await bot.ask("hello") == FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_api_error_payload(self, make_http):
        payload = {"error": {"message": "quota exceeded"}}
        async with make_http(lambda r: httpx.Response(200, json=payload)) as http:
            async with ChatAssistant(http=http, api_key="sk-test") as bot:
                with pytest.raises(KeyguardHTTPError, match="quota exceeded"):
                    await bot.ask("hello")

    @pytest.mark.asyncio
    async def test_http_failure(self, make_http):
        async with make_http(lambda r: httpx.Response(401)) as http:
            async with ChatAssistant(http=http, api_key="sk-test") as bot:
                with pytest.raises(KeyguardHTTPError) as excinfo:
                    await bot.ask("hello")
        assert excinfo.value.status_code == 401

    @pytest.mark.asyncio
    async def test_ask_outside_context(self):
        with pytest.raises(RuntimeError):
            await ChatAssistant(api_key="sk-test").ask("hello")


# --------------------------------------------------------------------- #
#  History
# --------------------------------------------------------------------- #


@pytest.fixture
def history_config(monkeypatch) -> HistoryConfig:
    monkeypatch.setenv("KEYGUARD_TEST_HISTORY_TOKEN", "user-token")
    monkeypatch.setenv("KEYGUARD_TEST_HISTORY_KEY", "anon-key")
    return HistoryConfig(
        base_url="https://db.test",
        user_id="user-1",
        token_env="KEYGUARD_TEST_HISTORY_TOKEN",
        api_key_env="KEYGUARD_TEST_HISTORY_KEY",
    )


class TestHistoryRecord:
    def test_hash(self):
        assert hash_password("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_record_has_no_raw_password(self, analysis):
        record = build_history_record(analysis, PASSWORD, "user-1")
        dumped = record.model_dump_json()
        assert PASSWORD not in dumped
        assert record.password_hash == hash_password(PASSWORD)
        assert record.score == analysis.score
        assert record.entropy == analysis.entropy


class TestHistoryStore:
    @pytest.mark.asyncio
    async def test_save(self, make_http, history_config, analysis):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            row = json.loads(request.content)
            row.update(id=7, created_at="2024-05-01T12:00:00+00:00")
            return httpx.Response(201, json=[row])

        async with make_http(handler, base_url="https://db.test") as http:
            async with HistoryStore(history_config, http=http) as store:
                saved = await store.save(analysis, PASSWORD)

        assert saved.id == 7
        assert saved.created_at is not None
        (request,) = seen
        assert request.url.path == "/rest/v1/password_history"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer user-token"
        assert request.headers["Prefer"] == "return=representation"
        body = json.loads(request.content)
        assert body["user_id"] == "user-1"
        assert body["password_hash"] == hash_password(PASSWORD)
        assert "id" not in body
        assert PASSWORD not in request.content.decode()

    @pytest.mark.asyncio
    async def test_save_without_body_returns_submitted_record(
        self, make_http, history_config, analysis
    ):
        async with make_http(lambda r: httpx.Response(201)) as http:
            async with HistoryStore(history_config, http=http) as store:
                saved = await store.save(analysis, PASSWORD)
        assert saved.id is None
        assert saved.password_hash == hash_password(PASSWORD)

    @pytest.mark.asyncio
    async def test_list(self, make_http, history_config, analysis):
        seen: list[httpx.Request] = []
        row = build_history_record(analysis, PASSWORD, "user-1").model_dump(mode="json")

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{**row, "id": 2}, {**row, "id": 1}])

        async with make_http(handler) as http:
            async with HistoryStore(history_config, http=http) as store:
                records = await store.list()

        assert [r.id for r in records] == [2, 1]
        params = seen[0].url.params
        assert params["order"] == "created_at.desc"
        assert params["user_id"] == "eq.user-1"
        assert seen[0].method == "GET"

    @pytest.mark.asyncio
    async def test_delete(self, make_http, history_config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        async with make_http(handler) as http:
            async with HistoryStore(history_config, http=http) as store:
                await store.delete(7)

        assert seen[0].method == "DELETE"
        assert seen[0].url.params["id"] == "eq.7"

    @pytest.mark.asyncio
    async def test_malformed_rows(self, make_http, history_config):
        async with make_http(lambda r: httpx.Response(200, json=[{"score": 9}])) as http:
            async with HistoryStore(history_config, http=http) as store:
                with pytest.raises(KeyguardHTTPError):
                    await store.list()

    @pytest.mark.asyncio
    async def test_requires_endpoint_and_token(self, monkeypatch):
        monkeypatch.delenv("KEYGUARD_HISTORY_TOKEN", raising=False)
        monkeypatch.delenv("KEYGUARD_HISTORY_API_KEY", raising=False)
        with pytest.raises(CollaboratorConfigError):
            async with HistoryStore(HistoryConfig(base_url="https://db.test")):
                pass
        with pytest.raises(CollaboratorConfigError):
            async with HistoryStore(HistoryConfig()):
                pass


# --------------------------------------------------------------------- #
#  Engine
# --------------------------------------------------------------------- #


class TestEngine:
    def test_seeded_engines_agree(self):
        first = KeyguardEngine(rng=random.Random(11)).analyze("summer12")
        second = KeyguardEngine(rng=random.Random(11)).analyze("summer12")
        assert first == second

    def test_passphrases(self):
        engine = KeyguardEngine(rng=random.Random(4))
        phrases = engine.passphrases(count=3, word_count=2, add_special=False)
        assert len(phrases) == 3
        assert all(p[-1].isdigit() for p in phrases)
        assert len(engine.memorable_passphrases(2)) == 2
        assert len(engine.passphrase_suggestions(4)) == 4

    def test_analyzer_settings_come_from_config(self):
        config = KeyguardConfig()
        config.analyzer.passphrase_suggestion_count = 1
        analysis = KeyguardEngine(config, rng=random.Random(1)).analyze("hello")
        assert len(analysis.passphrase_suggestions) == 1

    @pytest.mark.asyncio
    async def test_chat_failure_leaves_analysis_intact(self, make_http, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        async with make_http(lambda r: httpx.Response(503)) as http:
            engine = KeyguardEngine(rng=random.Random(1), http=http)
            analysis = engine.analyze(PASSWORD)
            snapshot = analysis.model_dump()
            with pytest.raises(KeyguardHTTPError):
                await engine.chat("What now?", analysis)
        assert analysis.model_dump() == snapshot

    @pytest.mark.asyncio
    async def test_chat_reply(self, make_http, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        async with make_http(lambda r: httpx.Response(200, json=_completion("ok"))) as http:
            engine = KeyguardEngine(rng=random.Random(1), http=http)
            assert await engine.chat("hello") == "ok"


# --------------------------------------------------------------------- #
#  Logging
# --------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "module, component",
    [(chat_module, "integrations.chat"), (history_module, "integrations.history")],
)
def test_collaborators_use_keyguard_logger(module, component):
    assert isinstance(module.logger, KeyguardLogger)
    assert module.logger.component == component
    assert module.logger.underlying.name == f"keyguard.{component}"
