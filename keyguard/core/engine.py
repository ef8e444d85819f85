"""
Keyguard Engine
================

Application-level facade over the analysis engine and its remote
collaborators. The CLI talks only to :class:`KeyguardEngine`.

The analysis operations are synchronous and side-effect free; the chat
and history operations are async and go through :mod:`shared.network`.
A collaborator failure is logged and re-raised; it never touches an
analysis that was already produced.

Architecture follows the Facade pattern (Gamma et al., 1994).

References:
    - Gamma, E., Helm, R., Johnson, R., & Vlissides, J. (1994).
      Design Patterns: Elements of Reusable Object-Oriented Software.
      Addison-Wesley.
"""

from __future__ import annotations

import random
from typing import Any, Optional, Union

from shared.config import KeyguardConfig
from shared.logger import KeyguardLogger
from shared.network import KeyguardHTTP, KeyguardHTTPError

from keyguard.analyzers.enhancer import PasswordEnhancer
from keyguard.analyzers.passphrase import OptionsLike, PassphraseGenerator
from keyguard.analyzers.password_analyzer import PasswordAnalyzer
from keyguard.core.errors import KeyguardError
from keyguard.core.models import (
    EnhancementResult,
    HistoryRecord,
    MemorablePassphrase,
    PasswordAnalysis,
)
from keyguard.integrations.chat import ChatAssistant
from keyguard.integrations.history import HistoryStore


class KeyguardEngine:
    """Coordinates analysis, rewriting, passphrase generation and the
    remote collaborators.

    Usage::

        engine = KeyguardEngine()
        analysis = engine.analyze("Tr0ub4dor&3")
        reply = await engine.chat("How can I improve it?", analysis)

    Args:
        config: Keyguard configuration; defaults are used when omitted.
        rng: Random source for the rewriter and passphrase generator.
            Pass a seeded :class:`random.Random` for reproducible output.
        http: HTTP client handed to both collaborators (tests inject one
            backed by :class:`httpx.MockTransport`).

    Attributes:
        config: Active configuration.
        logger: Logger for the engine component.
    """

    def __init__(
        self,
        config: Optional[KeyguardConfig] = None,
        rng: Optional[random.Random] = None,
        http: Optional[KeyguardHTTP] = None,
    ) -> None:
        self.config = config or KeyguardConfig()
        settings = self.config.global_settings
        self.logger = KeyguardLogger(
            "engine",
            log_level="DEBUG" if settings.debug else settings.log_level,
            log_file=settings.log_file or None,
            json_logs=settings.log_json,
        )

        rng = rng if rng is not None else random.SystemRandom()
        self._analyzer = PasswordAnalyzer(
            rng,
            passphrase_count=self.config.analyzer.passphrase_suggestion_count,
            enhance_below_score=self.config.analyzer.enhance_below_score,
        )
        self._enhancer = PasswordEnhancer(rng)
        self._passphrases = PassphraseGenerator(rng)
        self._http = http

    # ------------------------------------------------------------------ #
    #  Analysis
    # ------------------------------------------------------------------ #

    def analyze(self, password: str) -> PasswordAnalysis:
        """Run the full analysis pipeline over *password*."""
        with self.logger.operation("analyze"):
            # Only the length is ever logged
            with self.logger.timed("password analysis"):
                analysis = self._analyzer.analyze(password)
            self.logger.info(
                "Analysis complete",
                length=analysis.length,
                score=analysis.score,
                patterns=len(analysis.ml_patterns),
            )
        return analysis

    def enhance(self, password: str, current_score: int) -> EnhancementResult:
        """Rewrite *password* into a stronger variant."""
        with self.logger.operation("enhance"):
            result = self._enhancer.enhance(password, current_score)
            self.logger.debug(
                "Applied %d improvements", len(result.improvements),
                strength_increase=result.strength_increase,
            )
        return result

    def passphrases(
        self, options: OptionsLike = None, count: int = 1, **overrides: Any
    ) -> list[str]:
        """Generate *count* passphrases with the same options."""
        with self.logger.operation("passphrase"):
            return [
                self._passphrases.generate(options, **overrides) for _ in range(count)
            ]

    def passphrase_suggestions(self, count: int = 3) -> list[str]:
        return self._passphrases.generate_suggestions(count)

    def memorable_passphrases(self, count: int = 3) -> list[MemorablePassphrase]:
        return self._passphrases.memorable(count)

    # ------------------------------------------------------------------ #
    #  Collaborators
    # ------------------------------------------------------------------ #

    async def chat(
        self, message: str, analysis: Optional[PasswordAnalysis] = None
    ) -> str:
        """Ask the chat assistant *message*, with *analysis* as context."""
        with self.logger.operation("chat"):
            try:
                async with ChatAssistant(self.config.chat, http=self._http) as assistant:
                    reply = await assistant.ask(message, analysis)
            except KeyguardHTTPError as exc:
                self.logger.error("Chat request failed: %s", exc, status=exc.status_code)
                raise
            self.logger.info("Chat reply received", reply_length=len(reply))
        return reply

    async def save_history(
        self, analysis: PasswordAnalysis, password: str
    ) -> HistoryRecord:
        """Store the flattened subset of *analysis* in the history table."""
        with self.logger.operation("history.save"):
            return await self._with_history(lambda store: store.save(analysis, password))

    async def list_history(self) -> list[HistoryRecord]:
        """Stored analyses for the configured user, newest first."""
        with self.logger.operation("history.list"):
            return await self._with_history(lambda store: store.list())

    async def delete_history(self, record_id: Union[int, str]) -> None:
        """Remove one stored analysis."""
        with self.logger.operation("history.delete"):
            await self._with_history(lambda store: store.delete(record_id))

    async def _with_history(self, call: Any) -> Any:
        try:
            async with HistoryStore(self.config.history, http=self._http) as store:
                return await call(store)
        except KeyguardHTTPError as exc:
            self.logger.error("History request failed: %s", exc, status=exc.status_code)
            raise
        except KeyguardError as exc:
            self.logger.warning("History store unavailable: %s", exc)
            raise
