"""
HTTP Authentication Manager

Obtains and refreshes bearer tokens from the identity provider. Tokens are
held in memory only and never written to logs or error messages.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, Optional

import httpx

from ...domain.exceptions import (
    AuthenticationError,
    OperationTimeoutError,
    RemoteServiceError,
    ValidationError,
)
from ...domain.services.authentication_manager import AuthenticationManager
from ..utilities.constants import ApiSettings

logger = logging.getLogger(__name__)

_REJECTED_STATUSES = (400, 401, 403)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class HttpAuthenticationManager(AuthenticationManager):
    """
    Authentication manager backed by the identity provider's HTTP API

    Login, logout and refresh are serialized on one lock. Concurrent callers
    that find the token expired share a single refresh request.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        refresh_skew: timedelta = timedelta(seconds=ApiSettings.TOKEN_REFRESH_SKEW_SECONDS),
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._http = http_client
        self._refresh_skew = refresh_skew
        self._clock = clock

        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._lifetime = timedelta(0)

        self._lock = asyncio.Lock()
        self._refresh_task: Optional["asyncio.Future[bool]"] = None
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    @property
    def is_token_expired(self) -> bool:
        if self._expires_at is None:
            return True
        # Short-lived tokens are refreshed halfway through their lifetime at the earliest
        skew = min(self._refresh_skew, self._lifetime / 2)
        return self._clock() >= self._expires_at - skew

    @property
    def token_expiration_time(self) -> Optional[datetime]:
        return self._expires_at

    async def login(self, username: str, password: str) -> None:
        """
        Authenticate with username and password

        Raises:
            ValidationError: If a credential is missing
            AuthenticationError: If the credentials are rejected
            OperationTimeoutError: If the identity provider does not answer in time
            RemoteServiceError: On any other identity provider failure
        """
        if not username or not username.strip():
            raise ValidationError("username is required", "username")
        if not password:
            raise ValidationError("password is required", "password")

        async with self._lock:
            response = await self._post(
                ApiSettings.LOGIN_PATH,
                {"username": username.strip(), "password": password},
                "login",
            )
            if response.status_code in _REJECTED_STATUSES:
                self._logger.warning("Login rejected for user %s", username.strip())
                raise AuthenticationError("Invalid credentials")
            if not response.is_success:
                raise RemoteServiceError(
                    "Login failed", status_code=response.status_code, operation="login"
                )

            self._store_tokens(response, "login")
            self._logger.info("User %s authenticated", username.strip())

    async def logout(self) -> None:
        """Discard the token locally"""
        async with self._lock:
            self._clear()
        self._logger.info("Logged out")

    async def get_access_token(self) -> str:
        """
        Current access token, refreshing it first when expired

        Raises:
            AuthenticationError: If not authenticated or the refresh was rejected
        """
        if not self.is_authenticated:
            raise AuthenticationError()

        if self.is_token_expired:
            if not await self.refresh_token():
                raise AuthenticationError("Session expired")

        token = self._access_token
        if token is None:
            raise AuthenticationError()
        return token

    async def refresh_token(self) -> bool:
        """Refresh the access token, joining a refresh already in flight"""
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._refresh())
            self._refresh_task = task
        # Cancelling one waiter must not cancel the refresh shared by others
        return await asyncio.shield(task)

    async def _refresh(self) -> bool:
        async with self._lock:
            refresh_token = self._refresh_token
            if refresh_token is None:
                self._logger.warning("Token refresh requested without a session")
                self._clear()
                return False

            response = await self._post(
                ApiSettings.REFRESH_PATH, {"refresh_token": refresh_token}, "refresh_token"
            )
            if response.status_code in _REJECTED_STATUSES:
                self._logger.warning(
                    "Token refresh rejected (HTTP %d), session cleared", response.status_code
                )
                self._clear()
                return False
            if not response.is_success:
                raise RemoteServiceError(
                    "Token refresh failed",
                    status_code=response.status_code,
                    operation="refresh_token",
                )

            self._store_tokens(response, "refresh_token")
            self._logger.info("Access token refreshed, expires at %s", self._expires_at)
            return True

    async def _post(self, path: str, payload: Dict[str, Any], operation: str) -> httpx.Response:
        try:
            return await self._http.post(path, json=payload)
        except httpx.TimeoutException as e:
            self._logger.warning("Identity provider timed out during %s", operation)
            raise OperationTimeoutError(operation) from e
        except httpx.HTTPError as e:
            self._logger.error("Identity provider unreachable during %s: %s", operation, type(e).__name__)
            raise RemoteServiceError(
                "Identity provider unreachable", operation=operation
            ) from e

    def _store_tokens(self, response: httpx.Response, operation: str) -> None:
        try:
            payload = response.json()
            access_token = payload.get("access_token") or payload.get("accessToken")
            refresh_token = payload.get("refresh_token") or payload.get("refreshToken")
            expires_in = int(
                payload.get("expires_in")
                or payload.get("expiresIn")
                or ApiSettings.DEFAULT_TOKEN_LIFETIME_SECONDS
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise RemoteServiceError(
                "Malformed token response", status_code=response.status_code, operation=operation
            ) from e

        if not access_token:
            raise RemoteServiceError(
                "Token response without access token",
                status_code=response.status_code,
                operation=operation,
            )

        self._access_token = access_token
        if refresh_token:
            self._refresh_token = refresh_token
        self._lifetime = timedelta(seconds=max(expires_in, 0))
        self._expires_at = self._clock() + self._lifetime

    def _clear(self) -> None:
        self._access_token = None
        self._refresh_token = None
        self._expires_at = None
        self._lifetime = timedelta(0)
