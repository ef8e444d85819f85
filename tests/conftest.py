"""Shared fixtures for the Keyguard test suite."""

from __future__ import annotations

import random
from typing import Any, Callable

import httpx
import pytest

from shared.network import KeyguardHTTP


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_http() -> Callable[..., KeyguardHTTP]:
    """Build a :class:`KeyguardHTTP` whose requests go to *handler*.

    Retries sleep for zero seconds so retry tests stay fast.
    """

    def factory(handler: Handler, **kwargs: Any) -> KeyguardHTTP:
        kwargs.setdefault("base_url", "https://collaborator.test")
        kwargs.setdefault("max_retries", 0)
        kwargs.setdefault("backoff_base", 0.0)
        return KeyguardHTTP(transport=httpx.MockTransport(handler), **kwargs)

    return factory
