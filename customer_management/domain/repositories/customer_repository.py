"""
Customer Repository interface

Defines the contract for customer data access operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from ...application.dtos.customer_dtos import CustomerSearchFilter, CustomerStatistics
from ..entities.customer_entity import Customer
from ..value_objects.customer_id import CustomerId
from ..value_objects.customer_status import CustomerStatus
from ..value_objects.customer_type import CustomerType
from ..value_objects.email import Email


class CustomerRepository(ABC):
    """
    Abstract repository interface for Customer aggregates

    Follows the Repository and Unit of Work patterns. add/update/delete only
    stage changes; nothing is durable until save_changes() commits every
    staged change atomically, in the order it was staged.

    Storage failures raise StorageError, duplicate emails raise
    UniqueConstraintViolationError and stale updates raise
    ConcurrencyConflictError.
    """

    # Basic operations

    @abstractmethod
    async def get_by_id(self, customer_id: CustomerId) -> Optional[Customer]:
        """
        Find a customer by ID, including soft-deleted customers

        Args:
            customer_id: The customer's unique identifier

        Returns:
            The customer if found, None otherwise
        """

    @abstractmethod
    async def get_by_email(self, email: Email) -> Optional[Customer]:
        """Find the non-deleted customer owning an email"""

    @abstractmethod
    async def get_all(self) -> List[Customer]:
        """All non-deleted customers, ordered by name"""

    @abstractmethod
    async def get_paged(
        self, search_text: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Customer], int]:
        """
        One page of non-deleted customers

        Args:
            search_text: Optional text matched against names, email and phone
            page: 1-based page number
            page_size: Items per page, greater than zero

        Returns:
            (customers on the page, total matching count independent of paging)
        """

    @abstractmethod
    async def add(self, customer: Customer) -> None:
        """Stage a new customer for insertion"""

    @abstractmethod
    def update(self, customer: Customer) -> None:
        """Stage the customer's current state for update"""

    @abstractmethod
    def delete(self, customer: Customer) -> None:
        """Stage a soft delete (status change, the row is kept)"""

    @abstractmethod
    async def exists(self, customer_id: CustomerId) -> bool:
        """Check whether a customer with this ID is stored"""

    @abstractmethod
    async def email_exists(self, email: Email) -> bool:
        """Check whether a committed, non-deleted customer uses this email"""

    # Advanced queries

    @abstractmethod
    async def search(self, search_filter: CustomerSearchFilter) -> Tuple[List[Customer], int]:
        """Filtered, paged query; returns (page items, total matching count)"""

    @abstractmethod
    async def get_by_type(self, customer_type: CustomerType) -> List[Customer]:
        pass

    @abstractmethod
    async def get_by_status(self, status: CustomerStatus) -> List[Customer]:
        pass

    @abstractmethod
    async def get_by_city(self, city: str) -> List[Customer]:
        pass

    @abstractmethod
    async def get_by_state(self, state: str) -> List[Customer]:
        pass

    @abstractmethod
    async def get_created_between(
        self, start_date: datetime, end_date: datetime
    ) -> List[Customer]:
        """Customers created within [start_date, end_date], oldest first"""

    # Statistics

    @abstractmethod
    async def get_statistics(self) -> CustomerStatistics:
        pass

    @abstractmethod
    async def get_total_count(self) -> int:
        pass

    @abstractmethod
    async def get_active_count(self) -> int:
        pass

    @abstractmethod
    async def get_inactive_count(self) -> int:
        pass

    # Persistence

    @abstractmethod
    async def save_changes(self) -> None:
        """Commit all staged changes atomically"""

    @abstractmethod
    async def save_changes_with_result(self) -> int:
        """
        Commit all staged changes atomically

        Returns:
            Number of affected records
        """
