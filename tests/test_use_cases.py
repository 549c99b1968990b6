"""
Use Case Tests - customer administration against the SQLite repository
"""

from unittest.mock import AsyncMock

import pytest

from customer_management.application.dtos.customer_dtos import (
    AddressDto,
    CustomerSearchFilter,
    UpdateCustomerDto,
)
from customer_management.application.use_cases.customer_management_use_case import (
    CustomerManagementUseCase,
)
from customer_management.domain.events.customer_events import (
    CustomerActivated,
    CustomerCreated,
    CustomerDeactivated,
    CustomerDeleted,
    CustomerRestored,
    CustomerTypeChanged,
    CustomerUpdated,
)
from customer_management.domain.exceptions import (
    CustomerNotFoundError,
    InvalidStateTransitionError,
    StorageError,
    UniqueConstraintViolationError,
    ValidationError,
)
from customer_management.domain.value_objects.customer_id import CustomerId
from customer_management.domain.value_objects.customer_status import CustomerStatus
from customer_management.domain.value_objects.customer_type import CustomerType
from customer_management.infrastructure.repositories.sqlalchemy_customer_repository import (
    SQLAlchemyCustomerRepository,
)

from .factories import make_address, make_create_dto


def _published(publisher: AsyncMock) -> list:
    return [event for call in publisher.publish.await_args_list for event in call.args[0]]


class TestCustomerManagementUseCase:
    """Test customer management use case"""

    @pytest.fixture
    def publisher(self):
        publisher = AsyncMock()
        publisher.publish = AsyncMock()
        return publisher

    @pytest.fixture
    def use_case(self, session_factory, publisher):
        return CustomerManagementUseCase(SQLAlchemyCustomerRepository(session_factory), publisher)

    @pytest.mark.asyncio
    async def test_register_customer(self, use_case, publisher):
        """Registration stores the customer and publishes CustomerCreated"""
        customer = await use_case.register_customer(make_create_dto(email="Maria@Example.com"))

        assert customer.email == "maria@example.com"
        assert customer.status is CustomerStatus.ACTIVE
        assert customer.full_name == "Maria Silva"

        events = _published(publisher)
        assert len(events) == 1
        assert isinstance(events[0], CustomerCreated)
        assert str(events[0].customer_id) == str(customer.id)

        stored = await use_case.get_customer(CustomerId(customer.id))
        assert stored.id == customer.id
        assert stored.email == customer.email
        assert stored.address == customer.address

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, use_case, publisher):
        await use_case.register_customer(make_create_dto(email="maria@example.com"))
        publisher.publish.reset_mock()

        with pytest.raises(UniqueConstraintViolationError):
            await use_case.register_customer(make_create_dto(email="MARIA@example.com"))

        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_invalid_data(self, use_case, publisher):
        request = make_create_dto().model_copy(update={"phone": "123"})

        with pytest.raises(ValidationError):
            await use_case.register_customer(request)

        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_events_not_published_when_save_fails(self, publisher):
        """A failed commit publishes nothing"""
        repository = AsyncMock()
        repository.email_exists.return_value = False
        repository.save_changes.side_effect = StorageError("database is locked", "save_changes")
        use_case = CustomerManagementUseCase(repository, publisher)

        with pytest.raises(StorageError):
            await use_case.register_customer(make_create_dto())

        repository.add.assert_awaited_once()
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_customer(self, use_case, publisher):
        customer = await use_case.register_customer(make_create_dto())
        customer_id = CustomerId(customer.id)
        publisher.publish.reset_mock()

        updated = await use_case.update_customer(
            customer_id,
            UpdateCustomerDto(
                first_name="Maria",
                last_name="Oliveira",
                phone="21912345678",
                address=AddressDto.from_value_object(make_address("Niterói", "RJ")),
                customer_type=CustomerType.PREMIUM,
            ),
        )

        assert updated.last_name == "Oliveira"
        assert updated.customer_type is CustomerType.PREMIUM
        assert updated.address.city == "Niterói"
        assert [type(event) for event in _published(publisher)] == [
            CustomerUpdated,
            CustomerTypeChanged,
        ]

    @pytest.mark.asyncio
    async def test_update_without_changes(self, use_case, publisher):
        """Submitting identical data commits and publishes nothing"""
        customer = await use_case.register_customer(make_create_dto())
        publisher.publish.reset_mock()

        same = UpdateCustomerDto(
            first_name=customer.first_name,
            last_name=customer.last_name,
            phone=customer.phone,
            address=customer.address,
            customer_type=customer.customer_type,
        )
        result = await use_case.update_customer(CustomerId(customer.id), same)

        assert result.updated_at is None
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_unknown_customer(self, use_case):
        request = UpdateCustomerDto(
            first_name="Ana",
            last_name="Lima",
            phone="11912345678",
            address=AddressDto.from_value_object(make_address()),
        )
        with pytest.raises(CustomerNotFoundError):
            await use_case.update_customer(CustomerId.new(), request)

    @pytest.mark.asyncio
    async def test_status_lifecycle(self, use_case, publisher):
        """Deactivate, activate, delete and restore publish one event each"""
        customer = await use_case.register_customer(make_create_dto())
        customer_id = CustomerId(customer.id)
        publisher.publish.reset_mock()

        assert (await use_case.deactivate_customer(customer_id)).status is CustomerStatus.INACTIVE
        assert (await use_case.activate_customer(customer_id)).status is CustomerStatus.ACTIVE
        await use_case.delete_customer(customer_id)
        deleted = await use_case.get_customer(customer_id)
        restored = await use_case.restore_customer(customer_id)

        assert deleted.status is CustomerStatus.DELETED
        assert deleted.is_deleted is True
        assert restored.status is CustomerStatus.ACTIVE
        assert [type(event) for event in _published(publisher)] == [
            CustomerDeactivated,
            CustomerActivated,
            CustomerDeleted,
            CustomerRestored,
        ]

    @pytest.mark.asyncio
    async def test_invalid_transition_publishes_nothing(self, use_case, publisher):
        customer = await use_case.register_customer(make_create_dto())
        publisher.publish.reset_mock()

        with pytest.raises(InvalidStateTransitionError):
            await use_case.activate_customer(CustomerId(customer.id))
        with pytest.raises(InvalidStateTransitionError):
            await use_case.restore_customer(CustomerId(customer.id))

        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_change_customer_type(self, use_case, publisher):
        customer = await use_case.register_customer(make_create_dto())
        publisher.publish.reset_mock()

        changed = await use_case.change_customer_type(CustomerId(customer.id), CustomerType.CORPORATE)

        assert changed.customer_type is CustomerType.CORPORATE
        event = _published(publisher)[0]
        assert event.old_type is CustomerType.STANDARD
        assert event.new_type is CustomerType.CORPORATE

    @pytest.mark.asyncio
    async def test_restore_when_email_taken(self, use_case):
        customer = await use_case.register_customer(make_create_dto(email="shared@example.com"))
        customer_id = CustomerId(customer.id)
        await use_case.delete_customer(customer_id)
        await use_case.register_customer(make_create_dto(email="shared@example.com"))

        with pytest.raises(UniqueConstraintViolationError):
            await use_case.restore_customer(customer_id)

    @pytest.mark.asyncio
    async def test_queries(self, use_case):
        await use_case.register_customer(make_create_dto(email="a@example.com"))
        await use_case.register_customer(make_create_dto(email="b@example.com", city="Curitiba"))

        page = await use_case.get_customers(page=1, page_size=1)
        found = await use_case.search_customers(CustomerSearchFilter(city="curitiba"))
        statistics = await use_case.get_statistics()

        assert page.total_count == 2
        assert len(page.items) == 1
        assert page.has_next_page is True
        assert [c.email for c in found.items] == ["b@example.com"]
        assert statistics.total_customers == 2
        assert await use_case.get_customer(CustomerId.new()) is None
