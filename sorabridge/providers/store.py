# -*- coding: utf-8 -*-
"""Persisted Sora2API configuration and the connection test flow."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..constant import SORA_CONFIG_KEY
from .client import ProviderClient, strip_trailing_slash
from .models import (
    ConnectionResult,
    ConnectionState,
    ProviderLinks,
    SoraConfig,
    SoraStats,
    SoraToken,
)
from .storage import LocalStorage

logger = logging.getLogger(__name__)

MSG_CONNECTED = "连接成功"
MSG_UNAVAILABLE = "Sora2API 服务不可用"
MSG_LOGIN_FAILED = "登录失败，请检查用户名和密码"
MSG_IN_PROGRESS = "连接测试正在进行中"
MSG_SYNC_NOT_IMPLEMENTED = "Manual sync not implemented yet"

ClientFactory = Callable[[], ProviderClient]


class ConfigStore:
    """Owns the stored config record and the client of the last good test.

    A fresh :class:`ProviderClient` is built for every connection test.
    Only a client that got through health check and login is kept for
    later stats / token refreshes.
    """

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.storage = storage if storage is not None else LocalStorage()
        self._client_factory: ClientFactory = client_factory or ProviderClient
        self._client: Optional[ProviderClient] = None
        self._state = ConnectionState.IDLE
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def client(self) -> Optional[ProviderClient]:
        return self._client

    # ------------------------------------------------------------------
    # Config record
    # ------------------------------------------------------------------

    def get_config(self) -> Optional[SoraConfig]:
        """Return the stored record, the default one if none was saved,
        or ``None`` when the stored value cannot be read.
        """
        try:
            stored = self.storage.get_item(SORA_CONFIG_KEY)
            if stored is None:
                return SoraConfig()
            return SoraConfig.model_validate_json(stored)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read Sora config: %s", exc)
            return None

    def save_config(self, config: SoraConfig) -> bool:
        try:
            self.storage.set_item(
                SORA_CONFIG_KEY,
                config.model_dump_json(by_alias=True),
            )
        except OSError:
            logger.exception("Failed to save Sora config")
            return False
        return True

    def get_links(
        self,
        config: Optional[SoraConfig] = None,
    ) -> Optional[ProviderLinks]:
        """Compose the provider's management and generation page URLs."""
        if config is None:
            config = self.get_config()
        if config is None:
            return None
        base = strip_trailing_slash(config.base_url)
        return ProviderLinks(
            manage_url=f"{base}/manage.html",
            generate_url=f"{base}/generate.html",
        )

    # ------------------------------------------------------------------
    # Connection test
    # ------------------------------------------------------------------

    async def test_connection(
        self,
        base_url: str,
        username: str,
        password: str,
    ) -> ConnectionResult:
        """Health check, then login, then a best-effort stats fetch.

        Only one test runs at a time; overlapping calls are rejected.
        """
        if self._lock.locked():
            return ConnectionResult(success=False, message=MSG_IN_PROGRESS)

        async with self._lock:
            previous_state = self._state
            self._state = ConnectionState.TESTING
            client = self._client_factory()
            result: Optional[ConnectionResult] = None
            try:
                result = await self._verify(
                    client,
                    base_url,
                    username,
                    password,
                )
            except asyncio.CancelledError:
                self._state = previous_state
                raise
            finally:
                if result is None:
                    if self._state is ConnectionState.TESTING:
                        self._state = ConnectionState.ERROR
                    await client.aclose()
                else:
                    await self._replace_client(
                        client if result.success else None,
                    )
                    if not result.success:
                        await client.aclose()
            return result

    async def connect_if_enabled(
        self,
        config: Optional[SoraConfig] = None,
    ) -> Optional[ConnectionResult]:
        """Test the connection with the stored settings when enabled.

        Returns ``None`` (no network call) when the integration is
        disabled or the stored config cannot be read.
        """
        if config is None:
            config = self.get_config()
        if config is None or not config.enabled:
            return None
        return await self.test_connection(
            config.base_url,
            config.admin_user,
            config.admin_pass,
        )

    async def _verify(
        self,
        client: ProviderClient,
        base_url: str,
        username: str,
        password: str,
    ) -> ConnectionResult:
        client.set_base_url(base_url)

        if not await client.check_health():
            self._state = ConnectionState.ERROR
            return ConnectionResult(success=False, message=MSG_UNAVAILABLE)

        if not await client.login(username, password):
            self._state = ConnectionState.ERROR
            return ConnectionResult(success=False, message=MSG_LOGIN_FAILED)

        stats = await client.get_stats()
        self._state = ConnectionState.CONNECTED
        logger.info("Sora2API connection test succeeded: %s", client.base_url)
        return ConnectionResult(success=True, message=MSG_CONNECTED, stats=stats)

    async def _replace_client(self, client: Optional[ProviderClient]) -> None:
        previous, self._client = self._client, client
        if previous is not None:
            await previous.aclose()

    # ------------------------------------------------------------------
    # Refresh through the connected client
    # ------------------------------------------------------------------

    async def get_stats(self) -> Optional[SoraStats]:
        if self._client is None:
            return None
        return await self._client.get_stats()

    async def get_tokens(self) -> List[SoraToken]:
        if self._client is None:
            return []
        return await self._client.get_tokens()

    async def trigger_sync(self) -> ConnectionResult:
        return ConnectionResult(
            success=False,
            message=MSG_SYNC_NOT_IMPLEMENTED,
        )

    async def aclose(self) -> None:
        await self._replace_client(None)
        self._state = ConnectionState.IDLE


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------


def mask_secret(secret: str, visible_chars: int = 2) -> str:
    """Mask a password or token for safe display.

    Example: ``"s3cr3t-pass"`` → ``"s3c******ss"``
    """
    if not secret:
        return ""
    if len(secret) <= visible_chars + 3:
        return "*" * len(secret)
    prefix = secret[:3]
    suffix = secret[-visible_chars:]
    hidden_len = len(secret) - len(prefix) - visible_chars
    return f"{prefix}{'*' * max(hidden_len, 4)}{suffix}"
