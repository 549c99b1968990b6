"""
Domain service interfaces

Contracts for the cache, authentication, remote customer service and event
publishing collaborators.
"""

from .authentication_manager import AuthenticationManager
from .cache_manager import CacheManager
from .customer_api_service import CustomerApiService
from .event_publisher import DomainEventPublisher

__all__ = [
    'AuthenticationManager',
    'CacheManager',
    'CustomerApiService',
    'DomainEventPublisher',
]
