"""
External service implementations
"""

from .customer_api_client import HttpCustomerApiClient
from .event_publisher import LoggingEventPublisher

__all__ = ["HttpCustomerApiClient", "LoggingEventPublisher"]
