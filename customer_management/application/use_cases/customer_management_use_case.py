"""
Customer Management Use Case

Orchestrates the customer aggregate, the repository unit of work and domain
event publication for local customer administration.
"""

import logging
from typing import List, Optional

from ...domain.entities.customer_entity import Customer
from ...domain.exceptions import CustomerNotFoundError, UniqueConstraintViolationError
from ...domain.repositories.customer_repository import CustomerRepository
from ...domain.services.event_publisher import DomainEventPublisher
from ...domain.value_objects.customer_id import CustomerId
from ...domain.value_objects.customer_type import CustomerType
from ...domain.value_objects.email import Email
from ..dtos.customer_dtos import (
    CreateCustomerDto,
    CustomerDto,
    CustomerSearchFilter,
    CustomerStatistics,
    PagedResult,
    UpdateCustomerDto,
)

logger = logging.getLogger(__name__)


class CustomerManagementUseCase:
    """
    Use case for customer administration

    Handles:
    1. Registration with email uniqueness
    2. Profile and type changes
    3. Status transitions (activate, deactivate, delete, restore)
    4. Queries and statistics

    Each command loads the aggregate, applies one operation, commits through
    the repository and only then publishes the recorded events.
    """

    def __init__(
        self,
        customer_repository: CustomerRepository,
        event_publisher: DomainEventPublisher,
    ):
        self._customer_repository = customer_repository
        self._event_publisher = event_publisher
        self._logger = logging.getLogger(self.__class__.__name__)

    async def register_customer(self, request: CreateCustomerDto) -> CustomerDto:
        """
        Register a new customer

        Args:
            request: Customer data

        Returns:
            The registered customer

        Raises:
            ValidationError: If any field is invalid
            UniqueConstraintViolationError: If the email is already in use
        """
        email = Email(request.email)
        if await self._customer_repository.email_exists(email):
            self._logger.warning("Registration rejected, email already in use")
            raise UniqueConstraintViolationError(
                f"Email already registered: {email.value}", "email", email.value
            )

        customer = Customer.create(
            first_name=request.first_name,
            last_name=request.last_name,
            email=email.value,
            phone=request.phone,
            address=request.address.to_value_object(),
            customer_type=request.customer_type,
        )
        await self._customer_repository.add(customer)
        await self._commit(customer)

        self._logger.info("New customer registered: %s", customer.id)
        return CustomerDto.from_entity(customer)

    async def update_customer(
        self, customer_id: CustomerId, request: UpdateCustomerDto
    ) -> CustomerDto:
        """Update profile data and, when it differs, the customer type"""
        customer = await self._load(customer_id)

        changed = customer.update_profile(
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            address=request.address.to_value_object(),
        )
        if request.customer_type is not customer.customer_type:
            customer.change_type(request.customer_type)
            changed = True

        if changed:
            self._customer_repository.update(customer)
            await self._commit(customer)
            self._logger.info("Customer updated: %s", customer.id)
        else:
            self._logger.debug("No changes for customer %s", customer.id)

        return CustomerDto.from_entity(customer)

    async def change_customer_type(
        self, customer_id: CustomerId, new_type: CustomerType
    ) -> CustomerDto:
        customer = await self._load(customer_id)
        customer.change_type(new_type)
        self._customer_repository.update(customer)
        await self._commit(customer)
        self._logger.info("Customer %s type changed to %s", customer.id, new_type.value)
        return CustomerDto.from_entity(customer)

    async def activate_customer(self, customer_id: CustomerId) -> CustomerDto:
        customer = await self._load(customer_id)
        customer.activate()
        self._customer_repository.update(customer)
        await self._commit(customer)
        self._logger.info("Customer activated: %s", customer.id)
        return CustomerDto.from_entity(customer)

    async def deactivate_customer(self, customer_id: CustomerId) -> CustomerDto:
        customer = await self._load(customer_id)
        customer.deactivate()
        self._customer_repository.update(customer)
        await self._commit(customer)
        self._logger.info("Customer deactivated: %s", customer.id)
        return CustomerDto.from_entity(customer)

    async def delete_customer(self, customer_id: CustomerId) -> None:
        """Soft delete a customer"""
        customer = await self._load(customer_id)
        customer.delete()
        self._customer_repository.delete(customer)
        await self._commit(customer)
        self._logger.info("Customer deleted: %s", customer.id)

    async def restore_customer(self, customer_id: CustomerId) -> CustomerDto:
        """
        Restore a soft-deleted customer

        Raises:
            UniqueConstraintViolationError: If another customer took the email
                in the meantime
        """
        customer = await self._load(customer_id)
        customer.restore()
        self._customer_repository.update(customer)
        await self._commit(customer)
        self._logger.info("Customer restored: %s", customer.id)
        return CustomerDto.from_entity(customer)

    async def get_customer(self, customer_id: CustomerId) -> Optional[CustomerDto]:
        customer = await self._customer_repository.get_by_id(customer_id)
        return CustomerDto.from_entity(customer) if customer else None

    async def get_customers(
        self, page: int = 1, page_size: int = 20, search_text: Optional[str] = None
    ) -> PagedResult[CustomerDto]:
        customers, total_count = await self._customer_repository.get_paged(
            search_text, page, page_size
        )
        return self._to_page(customers, total_count, page, page_size)

    async def search_customers(
        self, search_filter: CustomerSearchFilter
    ) -> PagedResult[CustomerDto]:
        customers, total_count = await self._customer_repository.search(search_filter)
        return self._to_page(
            customers, total_count, search_filter.page, search_filter.page_size
        )

    async def get_statistics(self) -> CustomerStatistics:
        return await self._customer_repository.get_statistics()

    async def _load(self, customer_id: CustomerId) -> Customer:
        customer = await self._customer_repository.get_by_id(customer_id)
        if customer is None:
            self._logger.warning("Customer not found: %s", customer_id)
            raise CustomerNotFoundError(customer_id)
        return customer

    async def _commit(self, customer: Customer) -> None:
        """Save staged changes, then publish the aggregate's events"""
        await self._customer_repository.save_changes()
        events = customer.pull_domain_events()
        if events:
            await self._event_publisher.publish(events)

    @staticmethod
    def _to_page(
        customers: List[Customer], total_count: int, page: int, page_size: int
    ) -> PagedResult[CustomerDto]:
        return PagedResult[CustomerDto](
            items=[CustomerDto.from_entity(customer) for customer in customers],
            page=page,
            page_size=page_size,
            total_count=total_count,
        )
