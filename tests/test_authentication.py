"""
Authentication Manager Tests
"""

import asyncio
import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from customer_management.domain.exceptions import (
    AuthenticationError,
    OperationTimeoutError,
    RemoteServiceError,
    ValidationError,
)
from customer_management.infrastructure.auth.authentication_manager import (
    HttpAuthenticationManager,
)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class IdentityProvider:
    """Scriptable identity provider served through httpx.MockTransport"""

    def __init__(self):
        self.requests = []
        self.refresh_status = 200
        self.login_status = 200
        self.fail_with = None
        self.issued = 0
        self.expires_in = 60

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with(request)

        body = json.loads(request.content)
        if request.url.path.endswith("/auth/login"):
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"error": "invalid_grant"})
            if body["password"] != "s3cret":
                return httpx.Response(401, json={"error": "invalid_grant"})
            return self._issue()

        # Let concurrent callers pile up behind the in-flight refresh
        await asyncio.sleep(0.01)
        if self.refresh_status != 200:
            return httpx.Response(self.refresh_status, json={"error": "invalid_token"})
        return self._issue()

    def calls_to(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path.endswith(path))

    def _issue(self) -> httpx.Response:
        self.issued += 1
        return httpx.Response(
            200,
            json={
                "accessToken": f"access-{self.issued}",
                "refreshToken": f"refresh-{self.issued}",
                "expiresIn": self.expires_in,
            },
        )


def _timeout(request):
    return httpx.ReadTimeout("timed out", request=request)


class TestHttpAuthenticationManager:
    """Test HTTP authentication manager"""

    @pytest.fixture
    def provider(self):
        return IdentityProvider()

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def manager(self, provider, clock):
        client = httpx.AsyncClient(
            base_url="https://identity.test/", transport=httpx.MockTransport(provider)
        )
        return HttpAuthenticationManager(client, refresh_skew=timedelta(seconds=10), clock=clock)

    @pytest.mark.asyncio
    async def test_login_success(self, manager, provider, clock):
        """Login stores the token and its expiry"""
        await manager.login("maria", "s3cret")

        assert manager.is_authenticated is True
        assert manager.is_token_expired is False
        assert manager.token_expiration_time == clock.now + timedelta(seconds=60)
        assert await manager.get_access_token() == "access-1"
        assert json.loads(provider.requests[0].content) == {
            "username": "maria",
            "password": "s3cret",
        }

    @pytest.mark.asyncio
    async def test_login_rejected(self, manager):
        with pytest.raises(AuthenticationError):
            await manager.login("maria", "wrong")

        assert manager.is_authenticated is False
        assert manager.token_expiration_time is None

    @pytest.mark.asyncio
    async def test_login_requires_credentials(self, manager, provider):
        with pytest.raises(ValidationError):
            await manager.login("  ", "s3cret")
        with pytest.raises(ValidationError):
            await manager.login("maria", "")

        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_login_server_failure(self, manager, provider):
        provider.login_status = 503

        with pytest.raises(RemoteServiceError) as exc_info:
            await manager.login("maria", "s3cret")

        assert exc_info.value.status_code == 503
        assert manager.is_authenticated is False

    @pytest.mark.asyncio
    async def test_get_token_requires_login(self, manager):
        with pytest.raises(AuthenticationError):
            await manager.get_access_token()

    @pytest.mark.asyncio
    async def test_logout(self, manager):
        """After logout no token is handed out"""
        await manager.login("maria", "s3cret")
        await manager.logout()

        assert manager.is_authenticated is False
        with pytest.raises(AuthenticationError):
            await manager.get_access_token()

    @pytest.mark.asyncio
    async def test_token_expires_within_skew(self, manager, clock):
        await manager.login("maria", "s3cret")

        clock.advance(49)
        assert manager.is_token_expired is False
        clock.advance(1)
        assert manager.is_token_expired is True

    @pytest.mark.asyncio
    async def test_short_lived_token_is_not_refreshed_on_every_call(self, manager, provider, clock):
        """A lifetime shorter than the refresh skew still leaves half of it usable"""
        provider.expires_in = 10
        await manager.login("maria", "s3cret")

        assert manager.is_token_expired is False
        assert await manager.get_access_token() == "access-1"
        clock.advance(4)
        assert await manager.get_access_token() == "access-1"
        assert provider.calls_to("/auth/refresh") == 0

        clock.advance(1)
        assert manager.is_token_expired is True
        assert await manager.get_access_token() == "access-2"
        assert await manager.get_access_token() == "access-2"
        assert provider.calls_to("/auth/refresh") == 1

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, manager, provider, clock):
        await manager.login("maria", "s3cret")
        clock.advance(55)

        token = await manager.get_access_token()

        assert token == "access-2"
        assert json.loads(provider.requests[-1].content) == {"refresh_token": "refresh-1"}
        assert manager.token_expiration_time == clock.now + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self, manager, provider, clock):
        """Two callers on an expired token cause a single refresh request"""
        await manager.login("maria", "s3cret")
        clock.advance(55)

        tokens = await asyncio.gather(
            manager.get_access_token(),
            manager.get_access_token(),
            manager.refresh_token(),
        )

        assert tokens == ["access-2", "access-2", True]
        assert provider.calls_to("/auth/refresh") == 1

    @pytest.mark.asyncio
    async def test_rejected_refresh_clears_session(self, manager, provider, clock):
        """A refused refresh leaves the manager unauthenticated"""
        await manager.login("maria", "s3cret")
        provider.refresh_status = 401

        assert await manager.refresh_token() is False
        assert manager.is_authenticated is False

        clock.advance(55)
        with pytest.raises(AuthenticationError):
            await manager.get_access_token()

    @pytest.mark.asyncio
    async def test_expired_session_rejected_refresh(self, manager, provider, clock):
        await manager.login("maria", "s3cret")
        provider.refresh_status = 400
        clock.advance(55)

        with pytest.raises(AuthenticationError, match="Session expired"):
            await manager.get_access_token()

    @pytest.mark.asyncio
    async def test_refresh_without_session(self, manager, provider):
        assert await manager.refresh_token() is False
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_login_timeout(self, manager, provider):
        provider.fail_with = _timeout

        with pytest.raises(OperationTimeoutError):
            await manager.login("maria", "s3cret")

        assert manager.is_authenticated is False

    @pytest.mark.asyncio
    async def test_refresh_timeout_keeps_session(self, manager, provider):
        """A timed-out refresh changes nothing"""
        await manager.login("maria", "s3cret")
        expires_at = manager.token_expiration_time
        provider.fail_with = _timeout

        with pytest.raises(OperationTimeoutError):
            await manager.refresh_token()

        assert manager.is_authenticated is True
        assert manager.token_expiration_time == expires_at

        provider.fail_with = None
        assert await manager.refresh_token() is True
        assert await manager.get_access_token() == "access-2"

    @pytest.mark.asyncio
    async def test_unreachable_provider(self, manager, provider):
        provider.fail_with = lambda request: httpx.ConnectError("refused", request=request)

        with pytest.raises(RemoteServiceError):
            await manager.login("maria", "s3cret")
