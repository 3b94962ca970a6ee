"""Tests for the Sora2API HTTP client"""
import logging

import httpx
import pytest

from sorabridge.providers import (
    DecodeError,
    NetworkError,
    NotAuthenticated,
    Ok,
    ProtocolError,
    ProviderClient,
    SoraStats,
    strip_trailing_slash,
)

from .conftest import BASE_URL, STATS_PAYLOAD, TOKEN_PAYLOAD


class TestSetBaseUrl:
    """Base URL normalisation"""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://x/", "http://x"),
            ("http://x//", "http://x/"),
            ("http://x", "http://x"),
            ("http://x:8000/sora/", "http://x:8000/sora"),
            ("", ""),
        ],
    )
    def test_strips_exactly_one_trailing_slash(self, url, expected):
        client = ProviderClient()
        client.set_base_url(url)
        assert client.base_url == expected
        assert strip_trailing_slash(url) == expected

    def test_idempotent(self):
        client = ProviderClient()
        client.set_base_url("http://x/")
        client.set_base_url(client.base_url)
        assert client.base_url == "http://x"

    @pytest.mark.asyncio
    async def test_keeps_session_token(self, healthy_provider):
        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "admin")
            client.set_base_url(BASE_URL + "/")
            assert client.is_authenticated


@pytest.mark.asyncio
class TestLogin:
    """POST /api/login"""

    async def test_success_stores_token(self, healthy_provider):
        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "secret") is True
            assert client.is_authenticated

        request = healthy_provider["login"].calls.last.request
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert b'"username"' in request.content
        assert b'"secret"' in request.content

    async def test_success_false(self, provider):
        provider.post("/api/login").respond(
            200,
            json={"success": False, "message": "bad credentials"},
        )
        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "wrong") is False
            assert not client.is_authenticated

    async def test_missing_token(self, provider):
        provider.post("/api/login").respond(200, json={"success": True})
        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "admin") is False
            assert not client.is_authenticated

    async def test_non_json_body(self, provider):
        provider.post("/api/login").respond(200, text="<html>oops</html>")
        async with ProviderClient(BASE_URL) as client:
            outcome = await client.authenticate("admin", "admin")
            assert isinstance(outcome, DecodeError)
            assert await client.login("admin", "admin") is False

    async def test_error_status(self, provider):
        provider.post("/api/login").respond(
            401,
            json={"success": True, "token": "ignored"},
        )
        async with ProviderClient(BASE_URL) as client:
            outcome = await client.authenticate("admin", "admin")
            assert outcome == ProtocolError(401)
            assert not client.is_authenticated

    async def test_network_error(self, provider):
        provider.post("/api/login").mock(
            side_effect=httpx.ConnectError("connection refused"),
        )
        async with ProviderClient(BASE_URL) as client:
            outcome = await client.authenticate("admin", "admin")
            assert isinstance(outcome, NetworkError)
            assert await client.login("admin", "admin") is False

    async def test_failed_login_keeps_previous_token(self, provider):
        login = provider.post("/api/login")
        login.side_effect = [
            httpx.Response(200, json={"success": True, "token": "tok-1"}),
            httpx.Response(200, json={"success": False}),
        ]
        stats = provider.get("/api/stats").respond(200, json=STATS_PAYLOAD)

        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "admin") is True
            assert await client.login("admin", "wrong") is False
            assert await client.get_stats() == SoraStats(**STATS_PAYLOAD)

        assert stats.calls.last.request.headers["Authorization"] == (
            "Bearer tok-1"
        )


@pytest.mark.asyncio
class TestCheckHealth:
    """GET / with a 5 second bound"""

    async def test_healthy(self, provider):
        route = provider.get("/").respond(204)
        async with ProviderClient(BASE_URL) as client:
            assert await client.check_health() is True

        request = route.calls.last.request
        assert "Authorization" not in request.headers
        assert request.extensions["timeout"]["read"] == 5.0
        assert request.extensions["timeout"]["connect"] == 5.0

    async def test_error_status(self, provider):
        provider.get("/").respond(503)
        async with ProviderClient(BASE_URL) as client:
            assert await client.probe_health() == ProtocolError(503)
            assert await client.check_health() is False

    async def test_timeout(self, provider):
        provider.get("/").mock(side_effect=httpx.ReadTimeout("timed out"))
        async with ProviderClient(BASE_URL) as client:
            assert await client.check_health() is False

    async def test_unusable_base_url(self):
        async with ProviderClient("not a url") as client:
            outcome = await client.probe_health()
            assert isinstance(outcome, NetworkError)
            assert await client.check_health() is False


@pytest.mark.asyncio
class TestAuthenticatedCalls:
    """GET /api/stats and /api/tokens"""

    async def test_no_network_calls_before_login(self, provider):
        stats = provider.get("/api/stats").respond(200, json=STATS_PAYLOAD)
        tokens = provider.get("/api/tokens").respond(200, json=[])

        async with ProviderClient(BASE_URL) as client:
            assert await client.get_stats() is None
            assert await client.get_tokens() == []
            assert isinstance(await client.fetch_stats(), NotAuthenticated)

        assert stats.call_count == 0
        assert tokens.call_count == 0
        assert provider.calls.call_count == 0

    async def test_stats(self, healthy_provider):
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            stats = await client.get_stats()

        assert stats == SoraStats(**STATS_PAYLOAD)
        request = healthy_provider["stats"].calls.last.request
        assert request.headers["Authorization"] == "Bearer tok-1"

    async def test_stats_error_status(self, healthy_provider):
        healthy_provider["stats"].respond(500)
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            assert await client.fetch_stats() == ProtocolError(500)
            assert await client.get_stats() is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"total_tokens": 1},
            {**STATS_PAYLOAD, "total_images": -1},
            {**STATS_PAYLOAD, "today_videos": "many"},
            [1, 2, 3],
        ],
    )
    async def test_stats_malformed(self, healthy_provider, payload):
        healthy_provider["stats"].respond(200, json=payload)
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            assert isinstance(await client.fetch_stats(), DecodeError)
            assert await client.get_stats() is None

    async def test_tokens(self, healthy_provider):
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            outcome = await client.fetch_tokens()

        assert isinstance(outcome, Ok)
        [token] = outcome.value
        assert token.email == "alice@example.com"
        assert token.sora2_remaining_count == 28
        assert token.is_active is True
        request = healthy_provider["tokens"].calls.last.request
        assert request.headers["Authorization"] == "Bearer tok-1"

    async def test_tokens_not_a_list(self, healthy_provider):
        healthy_provider["tokens"].respond(200, json={"tokens": [TOKEN_PAYLOAD]})
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            assert await client.get_tokens() == []

    async def test_tokens_network_error(self, healthy_provider):
        healthy_provider["tokens"].mock(
            side_effect=httpx.ConnectError("connection reset"),
        )
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            assert await client.get_tokens() == []


@pytest.mark.asyncio
class TestHeaderSafeToken:
    """Tokens that cannot be sent in an Authorization header"""

    async def test_non_ascii_token_rejected(self, healthy_provider):
        healthy_provider["login"].respond(
            200,
            json={"success": True, "token": "tök-é"},
        )
        async with ProviderClient(BASE_URL) as client:
            outcome = await client.authenticate("admin", "admin")
            assert isinstance(outcome, DecodeError)
            assert not client.is_authenticated
            assert await client.get_stats() is None
            assert await client.get_tokens() == []

        assert healthy_provider["stats"].call_count == 0

    async def test_unencodable_header_folds_into_network_error(
        self,
        healthy_provider,
    ):
        async with ProviderClient(BASE_URL) as client:
            assert await client.login("admin", "admin")
            client._token = "tök-é"
            outcome = await client.fetch_stats()
            assert isinstance(outcome, NetworkError)
            assert await client.get_stats() is None
            assert await client.get_tokens() == []


@pytest.mark.asyncio
class TestTokenRecords:
    """Per-record validation of /api/tokens"""

    async def test_null_name_and_email_accepted(self, healthy_provider):
        healthy_provider["tokens"].respond(
            200,
            json=[
                TOKEN_PAYLOAD,
                {**TOKEN_PAYLOAD, "id": 2, "name": None, "email": None},
            ],
        )
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            tokens = await client.get_tokens()

        assert [t.id for t in tokens] == [1, 2]
        assert tokens[1].name is None
        assert tokens[1].email is None

    async def test_malformed_records_skipped(self, healthy_provider, caplog):
        caplog.set_level(logging.WARNING, logger="sorabridge")
        healthy_provider["tokens"].respond(
            200,
            json=[
                {**TOKEN_PAYLOAD, "id": "not-a-number"},
                TOKEN_PAYLOAD,
                "garbage",
            ],
        )
        async with ProviderClient(BASE_URL) as client:
            await client.login("admin", "admin")
            tokens = await client.get_tokens()

        assert [t.id for t in tokens] == [1]
        skipped = [r for r in caplog.records if "Skipping" in r.getMessage()]
        assert len(skipped) == 2
        assert "id=not-a-number" in skipped[0].getMessage()
