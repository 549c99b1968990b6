"""
Customer domain events

Immutable records of state transitions on the Customer aggregate. The set of
event kinds is closed: CustomerEvent is the union of every variant, so
consumers can match on it exhaustively.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Union

from ..value_objects.customer_id import CustomerId
from ..value_objects.customer_type import CustomerType


def new_event_id() -> uuid.UUID:
    """Identifier for a freshly raised event"""
    return uuid.uuid4()


def utc_now() -> datetime:
    """Timestamp for a freshly raised event"""
    return datetime.now(UTC)


@dataclass(frozen=True)
class CustomerCreated:
    """Raised when a customer is created"""

    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerUpdated:
    """Raised when the customer's profile data changes"""

    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerTypeChanged:
    """Raised when the customer type changes"""

    customer_id: CustomerId
    email: str
    old_type: CustomerType
    new_type: CustomerType
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerActivated:
    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerDeactivated:
    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerDeleted:
    """Raised on soft delete"""

    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class CustomerRestored:
    """Raised when a soft-deleted customer is brought back"""

    customer_id: CustomerId
    email: str
    event_id: uuid.UUID = field(default_factory=new_event_id)
    occurred_on: datetime = field(default_factory=utc_now)


CustomerEvent = Union[
    CustomerCreated,
    CustomerUpdated,
    CustomerTypeChanged,
    CustomerActivated,
    CustomerDeactivated,
    CustomerDeleted,
    CustomerRestored,
]

CUSTOMER_EVENT_TYPES = (
    CustomerCreated,
    CustomerUpdated,
    CustomerTypeChanged,
    CustomerActivated,
    CustomerDeactivated,
    CustomerDeleted,
    CustomerRestored,
)


def event_name(event: CustomerEvent) -> str:
    """Stable name of an event kind, e.g. 'customer.type_changed'"""
    names = {
        CustomerCreated: "customer.created",
        CustomerUpdated: "customer.updated",
        CustomerTypeChanged: "customer.type_changed",
        CustomerActivated: "customer.activated",
        CustomerDeactivated: "customer.deactivated",
        CustomerDeleted: "customer.deleted",
        CustomerRestored: "customer.restored",
    }
    return names[type(event)]
