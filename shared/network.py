"""
Keyguard Async Network Client
==============================

The one place Keyguard talks to the network. The chat assistant and the
analysis history store both go through :class:`KeyguardHTTP`; the
analyzers themselves are pure and never import this module.

Every call is guarded twice: transient failures (rate limiting, 5xx,
dropped connections) are retried with jittered exponential backoff, and
a circuit breaker fails fast once an upstream keeps failing.

References:
    - Nygard, M. T. (2018). Release It! 2nd ed. Chapter 5: Stability Patterns.
    - Brooker, M. (2015). Exponential Backoff and Jitter. AWS Architecture Blog.
    - HTTPX documentation: Transports. https://www.python-httpx.org/advanced/transports/
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx

logger = logging.getLogger("keyguard.network")


# ===================================================================== #
#  Errors
# ===================================================================== #


class KeyguardHTTPError(Exception):
    """A collaborator request failed (transport, timeout or HTTP status).

    The analysis being sent is never affected; callers may simply retry.

    Attributes:
        status_code: Status of the failing response, if one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class _Transient(Exception):
    """Internal marker for an attempt that may be retried."""

    def __init__(self, error: KeyguardHTTPError) -> None:
        super().__init__(str(error))
        self.error = error


# ===================================================================== #
#  Circuit Breaker
# ===================================================================== #


class CircuitState(str, Enum):
    """Breaker state: CLOSED passes calls, OPEN rejects them, HALF_OPEN probes."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass
class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    After *failure_threshold* failed calls in a row every request is
    refused until *recovery_timeout* seconds have passed; the next call is
    then let through as a probe and its outcome closes or re-opens the
    circuit.
    """

    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    state: CircuitState = CircuitState.CLOSED
    fail_count: int = 0
    last_failure_time: float = 0.0

    def record_success(self) -> None:
        if self.state is not CircuitState.CLOSED:
            logger.info("Circuit breaker CLOSED")
        self.state = CircuitState.CLOSED
        self.fail_count = 0

    def record_failure(self) -> None:
        self.last_failure_time = time.monotonic()
        self.fail_count += 1
        if self.state is CircuitState.HALF_OPEN or self.fail_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning("Circuit breaker OPEN (%d failures)", self.fail_count)

    def allow_request(self) -> bool:
        if self.state is not CircuitState.OPEN:
            return True
        if time.monotonic() - self.last_failure_time < self.recovery_timeout:
            return False
        self.state = CircuitState.HALF_OPEN
        logger.info("Circuit breaker HALF_OPEN, sending probe")
        return True


# ===================================================================== #
#  HTTP Client
# ===================================================================== #


class KeyguardHTTP:
    """Retrying, circuit-protected wrapper around :class:`httpx.AsyncClient`.

    Usage::

        async with KeyguardHTTP(base_url="https://api.openai.com/v1") as http:
            reply = await http.request_json(
                "/chat/completions", method="POST", json_body=payload
            )

    Args:
        base_url:             Prefix for relative request paths.
        timeout:              Per-request timeout in seconds.
        max_retries:          Extra attempts after the first on transient failure.
        backoff_base:         First backoff step in seconds (doubles per retry).
        backoff_max:          Upper bound on a single backoff step.
        cb_failure_threshold: Consecutive failures that open the circuit.
        cb_recovery_timeout:  Seconds the circuit stays open before probing.
        headers:              Headers sent with every request.
        user_agent:           ``User-Agent`` header value.
        transport:            Custom httpx transport, e.g. :class:`httpx.MockTransport`.
    """

    RETRY_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout: float = 30.0,
        max_retries: int = 2,
        backoff_base: float = 0.5,
        backoff_max: float = 10.0,
        cb_failure_threshold: int = 5,
        cb_recovery_timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        user_agent: str = "Keyguard/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._attempts = max_retries + 1
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._breaker = CircuitBreaker(cb_failure_threshold, cb_recovery_timeout)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent, **(headers or {})},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> KeyguardHTTP:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    # ------------------------------------------------------------------ #
    #  Requests
    # ------------------------------------------------------------------ #

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            KeyguardHTTPError: The circuit is open, the server answered with
                a non-retryable error status, or every attempt failed.
        """
        if not self._breaker.allow_request():
            raise KeyguardHTTPError(f"Circuit breaker OPEN, not calling {url}")

        method = method.upper()
        for attempt in range(1, self._attempts + 1):
            try:
                response = await self._attempt(method, url, params, json_body, headers)
            except _Transient as transient:
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s",
                    method, url, attempt, self._attempts, transient,
                )
                if attempt == self._attempts:
                    self._breaker.record_failure()
                    raise transient.error from transient.__cause__
                await self._sleep_before_retry(attempt)
            except KeyguardHTTPError:
                self._breaker.record_failure()
                raise
            else:
                self._breaker.record_success()
                return response
        raise AssertionError("unreachable")

    async def _attempt(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        json_body: Any,
        headers: dict[str, str] | None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, url, params=params, json=json_body, headers=headers
            )
        except httpx.TransportError as exc:
            raise _Transient(
                KeyguardHTTPError(f"All {self._attempts} attempts exhausted for {url}: {exc}")
            ) from exc

        status = response.status_code
        if status in self.RETRY_STATUSES:
            raise _Transient(KeyguardHTTPError(f"HTTP {status} from {url}", status))
        if response.is_error:
            raise KeyguardHTTPError(f"HTTP {status} from {url}", status)
        return response

    async def request_json(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """:meth:`request`, decoding the JSON body. An empty body gives ``None``."""
        response = await self.request(
            url, method=method, params=params, json_body=json_body, headers=headers
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise KeyguardHTTPError(f"JSON decode error from {url}") from exc

    async def _sleep_before_retry(self, attempt: int) -> None:
        # Full jitter: uniform(0, min(cap, base * 2**(attempt-1)))
        ceiling = min(self._backoff_max, self._backoff_base * 2 ** (attempt - 1))
        delay = random.uniform(0.0, ceiling)
        logger.debug("Retrying in %.2fs", delay)
        await asyncio.sleep(delay)
