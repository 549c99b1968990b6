"""
Dependency Injection Container

Manages the instantiation and lifecycle of the customer management
infrastructure: storage, cache, identity provider and remote service clients.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

import httpx

from ...application.use_cases.customer_management_use_case import (
    CustomerManagementUseCase,
)
from ...domain.repositories.customer_repository import CustomerRepository
from ...domain.services.authentication_manager import AuthenticationManager
from ...domain.services.cache_manager import CacheManager
from ...domain.services.customer_api_service import CustomerApiService
from ...domain.services.event_publisher import DomainEventPublisher
from ..auth.authentication_manager import HttpAuthenticationManager
from ..cache.cache_manager import InMemoryCacheManager
from ..cache.redis_cache_manager import RedisCacheManager
from ..configuration.config import Settings, get_config
from ..database.operations import DatabaseManager
from ..repositories.sqlalchemy_customer_repository import SQLAlchemyCustomerRepository
from ..services.customer_api_client import HttpCustomerApiClient
from ..services.event_publisher import LoggingEventPublisher

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency injection container

    Manages the instantiation and lifecycle of:
    - Database manager and repositories (Infrastructure layer)
    - Cache, authentication and remote service clients
    - Use Cases (Application layer)

    Repositories hold staged changes, so a new one is built per unit of work.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_config()
        self._instances: Dict[str, Any] = {}
        self._logger = logging.getLogger(self.__class__.__name__)
        self._setup_dependencies()

    def _setup_dependencies(self):
        """Setup all dependencies and their relationships"""
        self._logger.info("Setting up dependency injection container...")

        self._register_database()
        self._register_services()

        self._logger.info("Dependency injection container setup complete")

    def _register_database(self):
        """Register the database manager"""
        self._instances["database_manager"] = DatabaseManager(config=self._settings)
        self._logger.debug("Database manager registered successfully")

    def _register_services(self):
        """Register service implementations"""
        settings = self._settings

        if settings.cache_backend == "redis":
            cache_manager: CacheManager = RedisCacheManager.from_url(
                settings.redis_url,
                default_ttl=timedelta(seconds=settings.cache_default_ttl_seconds),
                operation_timeout=settings.cache_operation_timeout_seconds,
            )
        else:
            cache_manager = InMemoryCacheManager(
                default_ttl=timedelta(seconds=settings.cache_default_ttl_seconds)
            )
        self._instances["cache_manager"] = cache_manager

        timeout = httpx.Timeout(settings.request_timeout_seconds)
        self._instances["auth_http_client"] = httpx.AsyncClient(
            base_url=settings.auth_base_url, timeout=timeout
        )
        self._instances["api_http_client"] = httpx.AsyncClient(
            base_url=settings.customer_api_base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

        self._instances["authentication_manager"] = HttpAuthenticationManager(
            http_client=self._instances["auth_http_client"],
            refresh_skew=timedelta(seconds=settings.token_refresh_skew_seconds),
        )
        self._instances["customer_api_service"] = HttpCustomerApiClient(
            http_client=self._instances["api_http_client"],
            auth_manager=self.get_authentication_manager(),
            cache_manager=cache_manager,
            customer_ttl=timedelta(seconds=settings.customer_cache_ttl_seconds),
            listing_ttl=timedelta(seconds=settings.listing_cache_ttl_seconds),
        )
        self._instances["event_publisher"] = LoggingEventPublisher()

        self._logger.debug(
            "Services registered successfully (cache backend: %s)", settings.cache_backend
        )

    # Getters
    def get_settings(self) -> Settings:
        return self._settings

    def get_database_manager(self) -> DatabaseManager:
        """Get database manager instance"""
        return self._instances["database_manager"]

    def get_cache_manager(self) -> CacheManager:
        """Get cache manager instance"""
        return self._instances["cache_manager"]

    def get_authentication_manager(self) -> AuthenticationManager:
        """Get authentication manager instance"""
        return self._instances["authentication_manager"]

    def get_customer_api_service(self) -> CustomerApiService:
        """Get remote customer service client"""
        return self._instances["customer_api_service"]

    def get_event_publisher(self) -> DomainEventPublisher:
        """Get domain event publisher instance"""
        return self._instances["event_publisher"]

    # Factories
    def create_customer_repository(self) -> CustomerRepository:
        """New repository, i.e. a new unit of work"""
        return SQLAlchemyCustomerRepository(
            self.get_database_manager().get_session_factory()
        )

    def create_customer_management_use_case(self) -> CustomerManagementUseCase:
        """Use case bound to a fresh unit of work"""
        return CustomerManagementUseCase(
            customer_repository=self.create_customer_repository(),
            event_publisher=self.get_event_publisher(),
        )

    async def aclose(self):
        """Release network clients and connections"""
        await self._instances["api_http_client"].aclose()
        await self._instances["auth_http_client"].aclose()
        cache_manager = self._instances["cache_manager"]
        if isinstance(cache_manager, RedisCacheManager):
            await cache_manager.close()
        self.cleanup()

    def cleanup(self):
        """Cleanup resources when shutting down"""
        self._logger.info("Cleaning up dependency container...")
        database_manager = self._instances.get("database_manager")
        if database_manager is not None:
            database_manager.close()
        self._instances.clear()


# Global container instance
_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global dependency container instance"""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def initialize_container(settings: Optional[Settings] = None) -> DependencyContainer:
    """Initialize the global dependency container with explicit settings"""
    global _container
    if _container:
        _container.cleanup()
    _container = DependencyContainer(settings=settings)
    return _container


def reset_container():
    """Reset the global container (useful for testing)"""
    global _container
    if _container:
        _container.cleanup()
    _container = None
