"""
Password Security Chat Assistant
=================================

Client for a conversational assistant backed by any OpenAI-compatible
``/chat/completions`` endpoint. The assistant receives the user's message
and, optionally, a read-only summary of the current analysis; it never
sees the raw password.

Messages are trimmed and length-checked before any request is made.
Network and HTTP failures surface as :class:`KeyguardHTTPError` and
never affect the analysis they refer to.

References:
    - OpenAI API Reference: Chat Completions.
      https://platform.openai.com/docs/api-reference/chat
"""

from __future__ import annotations

from typing import Any, Optional

from shared.config import ChatConfig
from shared.logger import KeyguardLogger
from shared.math_utils import round_half_up
from shared.network import KeyguardHTTP, KeyguardHTTPError

from keyguard.analyzers.password_analyzer import TIME_TO_CRACK_LABELS
from keyguard.core.errors import (
    CollaboratorConfigError,
    InvalidInputError,
    MessageTooLongError,
)
from keyguard.core.models import ChatSummary, PasswordAnalysis, PatternSummary

logger = KeyguardLogger("integrations.chat")

FALLBACK_REPLY = "I'm sorry, I couldn't generate a response at this time."

SYSTEM_PROMPT = """\
You are a friendly and helpful AI password security assistant with knowledge \
about password security best practices and the RockYou data breach containing \
14+ million leaked passwords.

When responding to users:
1. Be conversational and personable - talk like a helpful friend, not a formal document
2. Respond directly to the user's specific question first, then provide additional context if needed
3. If the user asks about their current password, refer to the password statistics provided
4. Keep responses concise (2-3 paragraphs maximum)
5. Use simple, plain language without any markdown formatting
6. If suggesting passwords, provide 1-2 concrete examples that follow best practices
7. If the user is confused or asks an unclear question, ask for clarification
8. Always prioritize the user's specific question over giving generic advice

Important RockYou breach facts you can reference when relevant:
- The most common passwords were "123456", "12345", "123456789", "password", and "iloveyou"
- 40.3% of passwords were purely lowercase letters
- Only 3.8% used special characters
- 59.7% were 8 characters or less
- Less than 4% were 12+ characters long"""

_NO_ANALYSIS_CONTEXT = "The user hasn't provided a password for analysis yet."


def build_chat_summary(analysis: PasswordAnalysis) -> ChatSummary:
    """Reduce *analysis* to the read-only summary shared with the assistant.

    Entropy is rounded to whole bits and only the offline brute-force
    crack time is forwarded. Pattern offsets are dropped.
    """
    return ChatSummary(
        score=analysis.score,
        length=analysis.length,
        has_upper=analysis.has_upper,
        has_lower=analysis.has_lower,
        has_digit=analysis.has_digit,
        has_special=analysis.has_special,
        common_patterns=list(analysis.common_patterns),
        entropy=round_half_up(analysis.entropy),
        time_to_crack=analysis.time_to_crack[TIME_TO_CRACK_LABELS[0]],
        attack_resistance=analysis.attack_resistance,
        hackability_score=analysis.hackability_score,
        is_common=analysis.is_common,
        has_common_pattern=analysis.has_common_pattern,
        ml_patterns=[
            PatternSummary(
                type=p.type, confidence=p.confidence, description=p.description
            )
            for p in analysis.ml_patterns
        ],
    )


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def render_context(summary: Optional[ChatSummary]) -> str:
    """Plain-text description of *summary* prepended to the user turn."""
    if summary is None:
        return _NO_ANALYSIS_CONTEXT

    lines = [
        "The user has entered a password with these characteristics:",
        f"- Length: {summary.length} characters",
        f"- Contains uppercase letters: {_yes_no(summary.has_upper)}",
        f"- Contains lowercase letters: {_yes_no(summary.has_lower)}",
        f"- Contains numbers: {_yes_no(summary.has_digit)}",
        f"- Contains special characters: {_yes_no(summary.has_special)}",
        f"- Password strength score: {summary.score}/4",
        f"- Estimated time to crack: {summary.time_to_crack}",
        f"- Entropy: {summary.entropy} bits",
        f"- Hackability: {summary.hackability_score.score}/100 "
        f"({summary.hackability_score.risk_level.value} risk)",
    ]
    if summary.common_patterns:
        lines.append(f"- Common patterns: {', '.join(summary.common_patterns)}")
    if summary.ml_patterns:
        described = ", ".join(p.description for p in summary.ml_patterns)
        lines.append(f"- Detected structures: {described}")
    lines.append("")
    lines.append(
        "When answering, refer to these specifics where relevant, and address "
        "any issues with their current password."
    )
    return "\n".join(lines)


class ChatAssistant:
    """Async client for the password security assistant.

    Usage::

        async with ChatAssistant(config.chat) as assistant:
            reply = await assistant.ask("Is my password OK?", analysis)

    Args:
        config: Chat section of the Keyguard configuration.
        http: Pre-built HTTP client (tests inject one backed by
            :class:`httpx.MockTransport`). Created on entry otherwise.
        api_key: Overrides the key read from the configured environment
            variable.
    """

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        http: Optional[KeyguardHTTP] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self.config = config or ChatConfig()
        self._api_key = api_key or self.config.api_key
        self._owns_http = http is None
        self._http_instance = http
        self._http: Optional[KeyguardHTTP] = None

    async def __aenter__(self) -> ChatAssistant:
        if not self._api_key:
            raise CollaboratorConfigError(
                f"Chat assistant needs an API key in ${self.config.api_key_env}"
            )

        if self._http_instance is not None:
            self._http = self._http_instance
        else:
            self._http = KeyguardHTTP(
                base_url=self.config.api_url,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
        self._http = None

    def _get_http(self) -> KeyguardHTTP:
        if self._http is None:
            raise RuntimeError(
                "ChatAssistant must be used as an async context manager. "
                "Use 'async with ChatAssistant(...) as assistant:'"
            )
        return self._http

    def validate_message(self, message: str) -> str:
        """Return the trimmed *message*.

        Raises:
            InvalidInputError: Not a string, or blank.
            MessageTooLongError: Longer than ``max_message_length``.
        """
        if not isinstance(message, str):
            raise InvalidInputError(
                f"message must be a string, not {type(message).__name__}"
            )
        cleaned = message.strip()
        if not cleaned:
            raise InvalidInputError("Message is required")
        if len(cleaned) > self.config.max_message_length:
            raise MessageTooLongError(len(cleaned), self.config.max_message_length)
        return cleaned

    def build_payload(
        self, message: str, summary: Optional[ChatSummary]
    ) -> dict[str, Any]:
        """Chat-completions request body for *message*."""
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"{render_context(summary)}\n\n{message}"},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def ask(
        self, message: str, analysis: Optional[PasswordAnalysis] = None
    ) -> str:
        """Send *message* (with an optional analysis summary) and return the reply.

        Raises:
            InvalidInputError: Invalid or oversized message; no request is made.
            KeyguardHTTPError: Transport, HTTP or upstream API failure.
        """
        cleaned = self.validate_message(message)
        summary = build_chat_summary(analysis) if analysis is not None else None
        http = self._get_http()

        logger.debug(
            "Sending chat message (%d chars, analysis=%s)",
            len(cleaned),
            "provided" if summary else "none",
        )
        data = await http.request_json(
            "/chat/completions",
            method="POST",
            json_body=self.build_payload(cleaned, summary),
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        return self._extract_reply(data)

    @staticmethod
    def _extract_reply(data: Any) -> str:
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            detail = error.get("message") if isinstance(error, dict) else str(error)
            raise KeyguardHTTPError(f"Chat API error: {detail or 'Unknown error'}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            logger.warning("Chat API returned no content; using fallback reply")
            return FALLBACK_REPLY
        return content
