"""
Domain events package
"""

from .customer_events import (
    CUSTOMER_EVENT_TYPES,
    CustomerActivated,
    CustomerCreated,
    CustomerDeactivated,
    CustomerDeleted,
    CustomerEvent,
    CustomerRestored,
    CustomerTypeChanged,
    CustomerUpdated,
    event_name,
)

__all__ = [
    "CUSTOMER_EVENT_TYPES",
    "CustomerActivated",
    "CustomerCreated",
    "CustomerDeactivated",
    "CustomerDeleted",
    "CustomerEvent",
    "CustomerRestored",
    "CustomerTypeChanged",
    "CustomerUpdated",
    "event_name",
]
