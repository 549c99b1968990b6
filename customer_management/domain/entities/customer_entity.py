# pylint: disable=too-many-instance-attributes,too-many-arguments
"""
Customer aggregate root

Represents a customer in the customer management domain. State only changes
through the intention-revealing operations below; each successful operation
appends exactly one domain event to the pending list.
"""

from datetime import UTC, datetime
from typing import List, Optional, Tuple

from ..events.customer_events import (
    CustomerActivated,
    CustomerCreated,
    CustomerDeactivated,
    CustomerDeleted,
    CustomerEvent,
    CustomerRestored,
    CustomerTypeChanged,
    CustomerUpdated,
)
from ..exceptions import InvalidStateTransitionError, ValidationError
from ..value_objects.address import Address
from ..value_objects.customer_id import CustomerId
from ..value_objects.customer_status import CustomerStatus
from ..value_objects.customer_type import CustomerType
from ..value_objects.email import Email
from ..value_objects.phone_number import PhoneNumber

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50


def _validate_name(value: Optional[str], field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field)
    trimmed = value.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        raise ValidationError(
            f"{field} must have at least {MIN_NAME_LENGTH} characters", field
        )
    if len(trimmed) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"{field} cannot be longer than {MAX_NAME_LENGTH} characters", field
        )
    return trimmed


class Customer:
    """
    Customer aggregate root

    Build new customers with Customer.create(); the plain constructor
    reconstitutes an existing customer (e.g. from storage) without raising
    events.
    """

    def __init__(
        self,
        *,
        id: CustomerId,  # pylint: disable=redefined-builtin
        first_name: str,
        last_name: str,
        email: Email,
        phone: PhoneNumber,
        address: Address,
        customer_type: CustomerType = CustomerType.STANDARD,
        status: CustomerStatus = CustomerStatus.ACTIVE,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        version: int = 0,
    ):
        if not isinstance(id, CustomerId):
            raise ValidationError("Customer ID is required", "id")
        self._id = id
        self._first_name = _validate_name(first_name, "first_name")
        self._last_name = _validate_name(last_name, "last_name")
        self._email = email
        self._phone = phone
        self._address = address
        self._customer_type = CustomerType(customer_type)
        self._status = CustomerStatus(status)
        self._created_at = created_at or datetime.now(UTC)
        self._updated_at = updated_at
        self._version = version
        self._domain_events: List[CustomerEvent] = []

    @classmethod
    def create(
        cls,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        address: Address,
        customer_type: CustomerType = CustomerType.STANDARD,
    ) -> "Customer":
        """Create a new active customer and record CustomerCreated"""
        if not isinstance(address, Address):
            raise ValidationError("address is required", "address")

        customer = cls(
            id=CustomerId.new(),
            first_name=first_name,
            last_name=last_name,
            email=Email(email),
            phone=PhoneNumber(phone),
            address=address,
            customer_type=customer_type,
            status=CustomerStatus.ACTIVE,
        )
        customer._record(CustomerCreated(customer.id, customer.email.value))
        return customer

    # Read-only state

    @property
    def id(self) -> CustomerId:
        return self._id

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @property
    def full_name(self) -> str:
        return f"{self._first_name} {self._last_name}"

    @property
    def email(self) -> Email:
        return self._email

    @property
    def phone(self) -> PhoneNumber:
        return self._phone

    @property
    def address(self) -> Address:
        return self._address

    @property
    def city(self) -> str:
        return self._address.city

    @property
    def state(self) -> str:
        return self._address.state

    @property
    def customer_type(self) -> CustomerType:
        return self._customer_type

    @property
    def status(self) -> CustomerStatus:
        return self._status

    @property
    def is_deleted(self) -> bool:
        return self._status is CustomerStatus.DELETED

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def version(self) -> int:
        """Optimistic concurrency token, advanced by the repository on commit"""
        return self._version

    @property
    def domain_events(self) -> Tuple[CustomerEvent, ...]:
        """Pending events in the order their operations were invoked"""
        return tuple(self._domain_events)

    # Operations

    def update_profile(
        self, first_name: str, last_name: str, phone: str, address: Address
    ) -> bool:
        """
        Update name, phone and address

        Returns:
            True if anything changed (and CustomerUpdated was recorded),
            False if the data was identical
        """
        self._ensure_not_deleted("update")
        if not isinstance(address, Address):
            raise ValidationError("address is required", "address")

        new_first_name = _validate_name(first_name, "first_name")
        new_last_name = _validate_name(last_name, "last_name")
        new_phone = PhoneNumber(phone)

        changed = (
            new_first_name != self._first_name
            or new_last_name != self._last_name
            or new_phone != self._phone
            or address != self._address
        )
        if not changed:
            return False

        self._first_name = new_first_name
        self._last_name = new_last_name
        self._phone = new_phone
        self._address = address
        self._touch()
        self._record(CustomerUpdated(self._id, self._email.value))
        return True

    def change_type(self, new_type: CustomerType) -> None:
        """Change the customer type"""
        self._ensure_not_deleted("change the type of")
        new_type = CustomerType(new_type)
        if new_type is self._customer_type:
            raise InvalidStateTransitionError(
                f"Customer is already of type {new_type.value}", self._status.value
            )

        old_type = self._customer_type
        self._customer_type = new_type
        self._touch()
        self._record(
            CustomerTypeChanged(self._id, self._email.value, old_type, new_type)
        )

    def activate(self) -> None:
        """INACTIVE -> ACTIVE"""
        self._ensure_not_deleted("activate")
        if self._status is CustomerStatus.ACTIVE:
            raise InvalidStateTransitionError(
                "Customer is already active", self._status.value
            )

        self._status = CustomerStatus.ACTIVE
        self._touch()
        self._record(CustomerActivated(self._id, self._email.value))

    def deactivate(self) -> None:
        """ACTIVE -> INACTIVE"""
        self._ensure_not_deleted("deactivate")
        if self._status is CustomerStatus.INACTIVE:
            raise InvalidStateTransitionError(
                "Customer is already inactive", self._status.value
            )

        self._status = CustomerStatus.INACTIVE
        self._touch()
        self._record(CustomerDeactivated(self._id, self._email.value))

    def delete(self) -> None:
        """Soft delete: ACTIVE | INACTIVE -> DELETED"""
        self._ensure_not_deleted("delete")

        self._status = CustomerStatus.DELETED
        self._touch()
        self._record(CustomerDeleted(self._id, self._email.value))

    def restore(self) -> None:
        """DELETED -> ACTIVE"""
        if self._status is not CustomerStatus.DELETED:
            raise InvalidStateTransitionError(
                "Only deleted customers can be restored", self._status.value
            )

        self._status = CustomerStatus.ACTIVE
        self._touch()
        self._record(CustomerRestored(self._id, self._email.value))

    def is_premium_customer(self) -> bool:
        """Check if customer is premium or corporate"""
        return self._customer_type.is_premium()

    # Domain events

    def pull_domain_events(self) -> List[CustomerEvent]:
        """Return pending events and clear the list"""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def clear_domain_events(self) -> None:
        self._domain_events.clear()

    def mark_persisted(self, version: int) -> None:
        """Called by repositories once a commit stored this state"""
        self._version = version

    def _ensure_not_deleted(self, action: str) -> None:
        if self._status is CustomerStatus.DELETED:
            raise InvalidStateTransitionError(
                f"Cannot {action} a deleted customer", self._status.value
            )

    def _touch(self) -> None:
        self._updated_at = datetime.now(UTC)

    def _record(self, event: CustomerEvent) -> None:
        self._domain_events.append(event)

    def __str__(self) -> str:
        return (
            f"Customer(id={self._id}, name={self.full_name}, "
            f"email={self._email}, status={self._status.value})"
        )

    def __repr__(self) -> str:
        return self.__str__()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Customer):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)
