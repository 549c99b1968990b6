"""
Logging domain event publisher
"""

from typing import List, Sequence

from ...domain.events.customer_events import CustomerEvent, event_name
from ...domain.services.event_publisher import DomainEventPublisher
from ..logging.logger_config import get_structured_logger


class LoggingEventPublisher(DomainEventPublisher):
    """Publishes events as structured log entries and keeps the last ones in memory"""

    def __init__(self, history_size: int = 100):
        self._logger = get_structured_logger(self.__class__.__name__)
        self._history: List[CustomerEvent] = []
        self._history_size = max(history_size, 0)

    @property
    def published_events(self) -> List[CustomerEvent]:
        return list(self._history)

    async def publish(self, events: Sequence[CustomerEvent]) -> None:
        for event in events:
            self._logger.info(
                "domain_event_published",
                event_type=event_name(event),
                event_id=str(event.event_id),
                customer_id=str(event.customer_id),
                occurred_on=event.occurred_on.isoformat(),
            )
            self._history.append(event)
        excess = len(self._history) - self._history_size
        if excess > 0:
            del self._history[:excess]
