# -*- coding: utf-8 -*-
"""HTTP client for the Sora2API service.

Every call produces a tagged outcome (:class:`Ok`, :class:`NetworkError`,
:class:`ProtocolError` or :class:`DecodeError`).  The public helpers
``login`` / ``check_health`` / ``get_stats`` / ``get_tokens`` fold those
outcomes into plain sentinels (``False`` / ``None`` / ``[]``), so nothing
is ever raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar, Union

import httpx

from ..constant import HEALTH_CHECK_TIMEOUT
from .models import SoraStats, SoraToken

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class NetworkError:
    """Timeout, refused connection, DNS failure, bad URL."""

    reason: str


@dataclass(frozen=True)
class ProtocolError:
    """The service answered with a non-2xx status."""

    status: int


@dataclass(frozen=True)
class DecodeError:
    """The body was not JSON or did not have the expected shape."""

    reason: str


@dataclass(frozen=True)
class NotAuthenticated:
    """No session credential is held; the request was never sent."""


Failure = Union[NetworkError, ProtocolError, DecodeError, NotAuthenticated]
Outcome = Union[Ok[T], Failure]


def strip_trailing_slash(url: str) -> str:
    """Drop exactly one trailing ``/`` (``http://x//`` -> ``http://x/``)."""
    return url[:-1] if url.endswith("/") else url


def describe(outcome: Outcome) -> str:
    """Short human-readable form of an outcome, for logs."""
    if isinstance(outcome, Ok):
        return "ok"
    if isinstance(outcome, NetworkError):
        return f"network error: {outcome.reason}"
    if isinstance(outcome, ProtocolError):
        return f"HTTP {outcome.status}"
    if isinstance(outcome, DecodeError):
        return f"malformed response: {outcome.reason}"
    return "not logged in"


class ProviderClient:
    """Stateful Sora2API client: a base URL plus a bearer session token."""

    def __init__(
        self,
        base_url: str = "",
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = ""
        self._token: Optional[str] = None
        self._http = httpx.AsyncClient(transport=transport)
        if base_url:
            self.set_base_url(base_url)

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_base_url(self, url: str) -> None:
        """Store *url* without its trailing slash.  The token is kept."""
        self._base_url = strip_trailing_slash(url)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
    ) -> Outcome[httpx.Response]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.request(
                method,
                url,
                json=json,
                headers=self._headers(),
                timeout=timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            return NetworkError(str(exc) or type(exc).__name__)
        if not response.is_success:
            return ProtocolError(response.status_code)
        return Ok(response)

    # ------------------------------------------------------------------
    # Tagged operations
    # ------------------------------------------------------------------

    async def probe_health(self) -> Outcome[None]:
        outcome = await self._send("GET", "/", timeout=HEALTH_CHECK_TIMEOUT)
        if isinstance(outcome, Ok):
            return Ok(None)
        return outcome

    async def authenticate(self, username: str, password: str) -> Outcome[str]:
        """POST credentials; on success the token becomes the session."""
        outcome = await self._send(
            "POST",
            "/api/login",
            json={"username": username, "password": password},
        )
        if not isinstance(outcome, Ok):
            return outcome
        try:
            data = outcome.value.json()
        except ValueError as exc:
            return DecodeError(str(exc))
        if not isinstance(data, dict) or not data.get("success"):
            return DecodeError("login was not accepted")
        token = data.get("token")
        if not isinstance(token, str) or not token:
            return DecodeError("login response carries no token")
        if not token.isascii():
            return DecodeError("token cannot be sent in a header")
        self._token = token
        return Ok(token)

    async def fetch_stats(self) -> Outcome[SoraStats]:
        if not self._token:
            return NotAuthenticated()
        outcome = await self._send("GET", "/api/stats")
        if not isinstance(outcome, Ok):
            return outcome
        try:
            return Ok(SoraStats.model_validate(outcome.value.json()))
        except ValueError as exc:
            return DecodeError(str(exc))

    async def fetch_tokens(self) -> Outcome[List[SoraToken]]:
        if not self._token:
            return NotAuthenticated()
        outcome = await self._send("GET", "/api/tokens")
        if not isinstance(outcome, Ok):
            return outcome
        try:
            data = outcome.value.json()
            if not isinstance(data, list):
                return DecodeError("expected a JSON array")
        except ValueError as exc:
            return DecodeError(str(exc))
        return Ok(_parse_tokens(data))

    # ------------------------------------------------------------------
    # Sentinel API
    # ------------------------------------------------------------------

    async def check_health(self) -> bool:
        outcome = await self.probe_health()
        if not isinstance(outcome, Ok):
            logger.warning(
                "Sora2API health check failed (%s): %s",
                self._base_url,
                describe(outcome),
            )
            return False
        return True

    async def login(self, username: str, password: str) -> bool:
        outcome = await self.authenticate(username, password)
        if not isinstance(outcome, Ok):
            logger.warning("Sora2API login failed: %s", describe(outcome))
            return False
        logger.info("Logged in to Sora2API at %s", self._base_url)
        return True

    async def get_stats(self) -> Optional[SoraStats]:
        outcome = await self.fetch_stats()
        if not isinstance(outcome, Ok):
            if not isinstance(outcome, NotAuthenticated):
                logger.warning(
                    "Failed to fetch Sora2API stats: %s",
                    describe(outcome),
                )
            return None
        return outcome.value

    async def get_tokens(self) -> List[SoraToken]:
        outcome = await self.fetch_tokens()
        if not isinstance(outcome, Ok):
            if not isinstance(outcome, NotAuthenticated):
                logger.warning(
                    "Failed to fetch Sora2API tokens: %s",
                    describe(outcome),
                )
            return []
        return outcome.value


def _parse_tokens(items: list) -> List[SoraToken]:
    """Validate each record on its own; malformed ones are skipped."""
    tokens: List[SoraToken] = []
    for index, item in enumerate(items):
        try:
            tokens.append(SoraToken.model_validate(item))
        except ValueError as exc:
            record_id = item.get("id") if isinstance(item, dict) else None
            logger.warning(
                "Skipping malformed Sora2API token record #%d (id=%s): %s",
                index,
                record_id,
                exc,
            )
    return tokens
