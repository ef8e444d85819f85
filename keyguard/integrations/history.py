"""
Analysis History Store
=======================

Client for the remote ``password_history`` table, spoken in the
PostgREST dialect (``/rest/v1/<table>``) used by hosted Postgres
back ends.

Only a flattened subset of an analysis is stored: the score, the
class-coverage flags, the leaked/pattern flags, the entropy and a
one-way SHA-256 digest of the password. The raw password and the full
analysis record never leave the process.

References:
    - PostgREST API documentation. https://postgrest.org/en/stable/api.html
    - NIST FIPS 180-4 (2015). Secure Hash Standard.
"""

from __future__ import annotations

import hashlib
from typing import Any, Optional, Union

from pydantic import ValidationError

from shared.config import HistoryConfig
from shared.logger import KeyguardLogger
from shared.network import KeyguardHTTP, KeyguardHTTPError

from keyguard.core.errors import CollaboratorConfigError
from keyguard.core.models import HistoryRecord, PasswordAnalysis

logger = KeyguardLogger("integrations.history")


def hash_password(password: str) -> str:
    """Hex SHA-256 digest of *password* (UTF-8)."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def build_history_record(
    analysis: PasswordAnalysis, password: str, user_id: str = ""
) -> HistoryRecord:
    """Flatten *analysis* into the row stored by :class:`HistoryStore`."""
    return HistoryRecord(
        user_id=user_id,
        password_hash=hash_password(password),
        score=analysis.score,
        length=analysis.length,
        has_upper=analysis.has_upper,
        has_lower=analysis.has_lower,
        has_digit=analysis.has_digit,
        has_special=analysis.has_special,
        is_common=analysis.is_common,
        has_common_pattern=analysis.has_common_pattern,
        entropy=analysis.entropy,
    )


class HistoryStore:
    """Async client for the analysis-history table.

    Usage::

        async with HistoryStore(config.history) as store:
            saved = await store.save(analysis, password)
            rows = await store.list()
            await store.delete(saved.id)

    Args:
        config: History section of the Keyguard configuration.
        http: Pre-built HTTP client (tests inject one backed by
            :class:`httpx.MockTransport`). Created on entry otherwise.
    """

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        http: Optional[KeyguardHTTP] = None,
    ) -> None:
        self.config = config or HistoryConfig()
        self._owns_http = http is None
        self._http_instance = http
        self._http: Optional[KeyguardHTTP] = None

    async def __aenter__(self) -> HistoryStore:
        token = self.config.token
        if not self.config.base_url or not token:
            raise CollaboratorConfigError(
                "History store needs [history].base_url and a token in "
                f"${self.config.token_env} or ${self.config.api_key_env}"
            )

        if self._http_instance is not None:
            self._http = self._http_instance
        else:
            self._http = KeyguardHTTP(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
                headers=self._auth_headers(token),
            )
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
        self._http = None

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {
            "apikey": self.config.api_key or token,
            "Authorization": f"Bearer {token}",
            "Prefer": "return=representation",
        }

    def _get_http(self) -> KeyguardHTTP:
        if self._http is None:
            raise RuntimeError(
                "HistoryStore must be used as an async context manager. "
                "Use 'async with HistoryStore(...) as store:'"
            )
        return self._http

    @property
    def _path(self) -> str:
        return f"/rest/v1/{self.config.table}"

    # ------------------------------------------------------------------ #
    #  Operations
    # ------------------------------------------------------------------ #

    async def save(self, analysis: PasswordAnalysis, password: str) -> HistoryRecord:
        """Store the flattened subset of *analysis*.

        *password* is hashed here and then discarded.

        Returns:
            The stored row as echoed back by the server (with ``id`` and
            ``created_at``), or the submitted record when the server
            returns no body.
        """
        record = build_history_record(analysis, password, self.config.user_id)
        http = self._get_http()

        data = await http.request_json(
            self._path,
            method="POST",
            json_body=record.model_dump(mode="json", exclude_none=True),
            headers=self._auth_headers(self.config.token or ""),
        )
        logger.info("Saved analysis to history", score=record.score)

        rows = self._parse_rows(data)
        return rows[0] if rows else record

    async def list(self) -> list[HistoryRecord]:
        """Stored rows for the configured user, newest first."""
        params: dict[str, Any] = {"select": "*", "order": "created_at.desc"}
        if self.config.user_id:
            params["user_id"] = f"eq.{self.config.user_id}"

        http = self._get_http()
        data = await http.request_json(
            self._path,
            params=params,
            headers=self._auth_headers(self.config.token or ""),
        )
        return self._parse_rows(data)

    async def delete(self, record_id: Union[int, str]) -> None:
        """Delete the row with id *record_id*."""
        http = self._get_http()
        await http.request(
            self._path,
            method="DELETE",
            params={"id": f"eq.{record_id}"},
            headers=self._auth_headers(self.config.token or ""),
        )
        logger.info("Deleted history record", record_id=record_id)

    @staticmethod
    def _parse_rows(data: Any) -> list[HistoryRecord]:
        if data is None:
            return []
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise KeyguardHTTPError("Unexpected history response shape")
        try:
            return [HistoryRecord.model_validate(row) for row in data]
        except ValidationError as exc:
            raise KeyguardHTTPError(f"Malformed history row: {exc}") from exc
