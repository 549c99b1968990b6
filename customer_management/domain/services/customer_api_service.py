"""
Customer API service interface

Contract of the remote customer service as seen by this application.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ...application.dtos.customer_dtos import (
    BatchOperationResult,
    CreateCustomerDto,
    CustomerDto,
    CustomerSearchFilter,
    CustomerStatistics,
    PagedResult,
    UpdateCustomerDto,
)
from ..value_objects.customer_id import CustomerId
from ..value_objects.customer_type import CustomerType


class CustomerApiService(ABC):
    """
    Remote customer operations with read-through caching

    Reads may be served from cache; a successful write invalidates every
    cached entry that could observe the written customer before returning.
    Single reads return None when the customer does not exist; writes raise
    CustomerNotFoundError instead.
    """

    # Queries

    @abstractmethod
    async def get_customers(
        self, page: int = 1, page_size: int = 20, search_text: Optional[str] = None
    ) -> PagedResult[CustomerDto]:
        pass

    @abstractmethod
    async def get_customer_by_id(self, customer_id: CustomerId) -> Optional[CustomerDto]:
        pass

    @abstractmethod
    async def get_customer_by_email(self, email: str) -> Optional[CustomerDto]:
        pass

    @abstractmethod
    async def search_customers(
        self, search_filter: CustomerSearchFilter
    ) -> PagedResult[CustomerDto]:
        pass

    @abstractmethod
    async def get_customers_by_city(self, city: str) -> List[CustomerDto]:
        pass

    @abstractmethod
    async def get_customers_by_state(self, state: str) -> List[CustomerDto]:
        pass

    @abstractmethod
    async def get_customers_by_type(self, customer_type: CustomerType) -> List[CustomerDto]:
        pass

    @abstractmethod
    async def get_statistics(self) -> CustomerStatistics:
        pass

    @abstractmethod
    async def get_total_customers_count(self) -> int:
        pass

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        pass

    # Commands

    @abstractmethod
    async def create_customer(self, customer: CreateCustomerDto) -> CustomerDto:
        pass

    @abstractmethod
    async def update_customer(
        self, customer_id: CustomerId, customer: UpdateCustomerDto
    ) -> CustomerDto:
        pass

    @abstractmethod
    async def delete_customer(self, customer_id: CustomerId) -> None:
        pass

    @abstractmethod
    async def activate_customer(self, customer_id: CustomerId) -> None:
        pass

    @abstractmethod
    async def deactivate_customer(self, customer_id: CustomerId) -> None:
        pass

    @abstractmethod
    async def restore_customer(self, customer_id: CustomerId) -> None:
        pass

    # Batch operations

    @abstractmethod
    async def create_customers(
        self, customers: List[CreateCustomerDto]
    ) -> BatchOperationResult[CustomerDto]:
        """
        Create several customers, best effort

        Each item succeeds or fails on its own; failures are reported per item
        keyed by email. Caches are invalidated once if anything succeeded.
        """

    @abstractmethod
    async def update_customers(
        self, updates: Dict[CustomerId, UpdateCustomerDto]
    ) -> BatchOperationResult[CustomerDto]:
        """Update several customers, best effort; failures are keyed by id"""

    @abstractmethod
    async def delete_customers(
        self, customer_ids: List[CustomerId]
    ) -> BatchOperationResult[str]:
        """Delete several customers, best effort; succeeded holds the deleted ids"""
