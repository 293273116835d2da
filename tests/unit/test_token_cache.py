"""Tests for the bearer token cache."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from translator_service.auth import (
    GLOBAL_AUTH_URL,
    TOKEN_REFRESH_AFTER,
    Credential,
    TokenCache,
    auth_url_for,
)
from translator_service.errors import AuthError, ServiceError, TransportError

AUTH_URL = auth_url_for("westeurope")


class TestAuthUrl:
    """Tests for issue-token URL selection."""

    def test_region_url(self) -> None:
        assert auth_url_for("westeurope") == (
            "https://westeurope.api.cognitive.microsoft.com/sts/v1.0/issueToken"
        )

    def test_global_url(self) -> None:
        """Test a missing or blank region selects the global endpoint."""
        assert auth_url_for(None) == GLOBAL_AUTH_URL
        assert auth_url_for("  ") == GLOBAL_AUTH_URL

    def test_override(self, transport) -> None:
        """Test an explicit auth URL wins over the region."""
        cache = TokenCache(
            transport, Credential("key", "westeurope"), auth_url="https://sts.example/issue"
        )
        assert cache.auth_url == "https://sts.example/issue"


class TestTokenFetch:
    """Tests for fetching tokens."""

    @pytest.mark.asyncio
    async def test_fetch_sends_credential(self, service, transport, clock) -> None:
        """Test the issue-token request carries the key and region."""
        service.add_token("abc")
        cache = TokenCache(transport, Credential("secret-key", "westeurope"), clock=clock)

        token = await cache.get_access_token()

        assert token == "Bearer abc"
        request = service.calls("POST", AUTH_URL)[0]
        assert request.headers["Ocp-Apim-Subscription-Key"] == "secret-key"
        assert request.headers["Ocp-Apim-Subscription-Region"] == "westeurope"
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_global_fetch_has_no_region_header(self, service, transport, clock) -> None:
        """Test the global endpoint is called without a region header."""
        service.add_token("abc", url=GLOBAL_AUTH_URL)
        cache = TokenCache(transport, Credential("secret-key"), clock=clock)

        assert await cache.get_access_token() == "Bearer abc"
        request = service.calls("POST", GLOBAL_AUTH_URL)[0]
        assert "Ocp-Apim-Subscription-Region" not in request.headers

    @pytest.mark.asyncio
    async def test_missing_key(self, service, transport) -> None:
        """Test a missing key raises AuthError without a network call."""
        for credential in (Credential(), Credential("", "westeurope"), Credential("   ")):
            cache = TokenCache(transport, credential)
            with pytest.raises(AuthError):
                await cache.get_access_token()

        assert service.requests == []

    @pytest.mark.asyncio
    async def test_error_envelope(self, service, transport, clock) -> None:
        """Test a rejected key surfaces the service error code."""
        service.add(
            "POST",
            AUTH_URL,
            status_code=401,
            json={"error": {"code": 401000, "message": "Invalid subscription key"}},
        )
        cache = TokenCache(transport, Credential("bad", "westeurope"), clock=clock)

        with pytest.raises(ServiceError) as exc_info:
            await cache.get_access_token()

        assert exc_info.value.code == 401000
        assert exc_info.value.message == "Invalid subscription key"
        assert exc_info.value.status_code == 401
        assert cache.cached_token is None

    @pytest.mark.asyncio
    async def test_undecodable_error(self, service, transport, clock) -> None:
        """Test a non-envelope error body falls back to the generic error."""
        service.add("POST", AUTH_URL, status_code=403, text="<html>Forbidden</html>")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        with pytest.raises(ServiceError) as exc_info:
            await cache.get_access_token()

        assert exc_info.value.code == 500
        assert exc_info.value.message == "Unknown error"

    @pytest.mark.asyncio
    async def test_network_failure(self, service, transport, clock) -> None:
        """Test a network failure during a token fetch becomes ServiceError(500)."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        service.add("POST", AUTH_URL, refuse)
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        with pytest.raises(ServiceError) as exc_info:
            await cache.get_access_token()

        assert exc_info.value.code == 500
        assert isinstance(exc_info.value.__cause__, TransportError)


class TestTokenExpiry:
    """Tests for reuse and refresh."""

    @pytest.mark.asyncio
    async def test_reused_before_refresh_window(self, service, transport, clock) -> None:
        """Test a token is reused until it is 480 seconds old."""
        service.add_token("first")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        assert await cache.get_access_token() == "Bearer first"
        clock.advance(TOKEN_REFRESH_AFTER - 1)
        assert await cache.get_access_token() == "Bearer first"

        assert len(service.calls("POST", AUTH_URL)) == 1

    @pytest.mark.asyncio
    async def test_refreshed_at_refresh_window(self, service, transport, clock) -> None:
        """Test a token 480 seconds old is refetched."""
        service.add_token("first")
        service.add_token("second")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        assert await cache.get_access_token() == "Bearer first"
        clock.advance(TOKEN_REFRESH_AFTER)
        assert await cache.get_access_token() == "Bearer second"

        assert len(service.calls("POST", AUTH_URL)) == 2
        assert cache.cached_token is not None
        assert cache.cached_token.obtained_at == clock.now

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_nothing_stale(self, service, transport, clock) -> None:
        """Test an expired token is never returned when the refresh fails."""
        service.add_token("first")
        service.add("POST", AUTH_URL, status_code=500, text="")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        await cache.get_access_token()
        clock.advance(TOKEN_REFRESH_AFTER + 5)

        with pytest.raises(ServiceError):
            await cache.get_access_token()


class TestCredentialChange:
    """Tests for replacing the credential."""

    @pytest.mark.asyncio
    async def test_set_credential_invalidates(self, service, transport, clock) -> None:
        """Test a new credential forces a fetch at the new region."""
        service.add_token("old")
        northeurope = auth_url_for("northeurope")
        service.add_token("new", url=northeurope)
        cache = TokenCache(transport, Credential("key-1", "westeurope"), clock=clock)

        assert await cache.get_access_token() == "Bearer old"
        cache.set_credential(Credential("key-2", "northeurope"))
        assert cache.cached_token is None
        assert await cache.get_access_token() == "Bearer new"

        request = service.calls("POST", northeurope)[0]
        assert request.headers["Ocp-Apim-Subscription-Key"] == "key-2"

    @pytest.mark.asyncio
    async def test_same_credential_keeps_token(self, service, transport, clock) -> None:
        """Test setting an equal credential keeps the cached token."""
        service.add_token("only")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        await cache.get_access_token()
        cache.set_credential(Credential("key", "westeurope"))
        assert await cache.get_access_token() == "Bearer only"

        assert len(service.requests) == 1

    @pytest.mark.asyncio
    async def test_in_flight_fetch_not_committed(self, service, transport, clock) -> None:
        """Test a fetch for a replaced credential is not cached."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_token(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, text="stale")

        service.add("POST", AUTH_URL, slow_token)
        cache = TokenCache(transport, Credential("key-1", "westeurope"), clock=clock)

        task = asyncio.create_task(cache.get_access_token())
        await started.wait()
        cache.set_credential(Credential("key-2", "westeurope"))
        release.set()

        assert await task == "Bearer stale"
        assert cache.cached_token is None

    @pytest.mark.asyncio
    async def test_waiter_uses_replaced_credential(self, service, transport, clock) -> None:
        """Test a caller queued behind a fetch restarts with the new credential."""
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_token(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200, text="stale")

        eastus_url = auth_url_for("eastus")
        service.add("POST", AUTH_URL, slow_token)
        service.add_token("fresh", url=eastus_url)
        cache = TokenCache(transport, Credential("key-a", "westeurope"), clock=clock)

        first = asyncio.create_task(cache.get_access_token())
        await started.wait()
        second = asyncio.create_task(cache.get_access_token())
        for _ in range(3):
            await asyncio.sleep(0)

        cache.set_credential(Credential("key-b", "eastus"))
        release.set()

        assert await first == "Bearer stale"
        assert await second == "Bearer fresh"
        [request] = service.calls("POST", eastus_url)
        assert request.headers["Ocp-Apim-Subscription-Key"] == "key-b"
        assert request.headers["Ocp-Apim-Subscription-Region"] == "eastus"
        assert len(service.calls("POST", AUTH_URL)) == 1
        assert cache.cached_token.value == "Bearer fresh"


class TestConcurrency:
    """Tests for concurrent callers."""

    @pytest.mark.asyncio
    async def test_single_flight(self, service, transport, clock) -> None:
        """Test concurrent callers share one issue-token request."""

        async def slow_token(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.05)
            return httpx.Response(200, text="shared")

        service.add("POST", AUTH_URL, slow_token)
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        tokens = await asyncio.gather(*(cache.get_access_token() for _ in range(20)))

        assert set(tokens) == {"Bearer shared"}
        assert len(service.calls("POST", AUTH_URL)) == 1

    @pytest.mark.asyncio
    async def test_cancelled_fetch(self, service, transport, clock) -> None:
        """Test cancelling a fetch leaves no token and does not block later callers."""
        started = asyncio.Event()

        async def hang(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(3600)
            return httpx.Response(200, text="never")

        service.add("POST", AUTH_URL, hang)
        service.add_token("after")
        cache = TokenCache(transport, Credential("key", "westeurope"), clock=clock)

        task = asyncio.create_task(cache.get_access_token())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert cache.cached_token is None
        assert await cache.get_access_token() == "Bearer after"
