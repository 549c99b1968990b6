"""
Authentication Manager interface
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class AuthenticationManager(ABC):
    """
    Credential acquisition and token lifecycle

    States: unauthenticated, authenticated with a valid token, authenticated
    with an expired token. The token is owned exclusively by the manager and
    is never logged or copied into errors.
    """

    @abstractmethod
    async def login(self, username: str, password: str) -> None:
        """
        Authenticate and store a fresh token

        Raises:
            AuthenticationError: If the credentials are rejected
        """

    @abstractmethod
    async def logout(self) -> None:
        """Discard the token immediately"""

    @abstractmethod
    async def get_access_token(self) -> str:
        """
        Current access token, refreshed transparently when expired

        Concurrent callers during a refresh share a single refresh request.

        Raises:
            AuthenticationError: If not authenticated or the refresh failed
        """

    @abstractmethod
    async def refresh_token(self) -> bool:
        """
        Refresh the access token

        Returns:
            True on success; False when the refresh was rejected, in which
            case the manager is unauthenticated afterwards
        """

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_token_expired(self) -> bool:
        """Pure comparison of the current time with the expiration time"""

    @property
    @abstractmethod
    def token_expiration_time(self) -> Optional[datetime]:
        pass
