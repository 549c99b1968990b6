"""
Domain event publisher interface
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..events.customer_events import CustomerEvent


class DomainEventPublisher(ABC):
    """Hands committed domain events to downstream consumers"""

    @abstractmethod
    async def publish(self, events: Sequence[CustomerEvent]) -> None:
        """Publish events in the given order"""
