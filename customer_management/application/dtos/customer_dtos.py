"""
Customer DTOs

Data Transfer Objects for customer operations. They double as the JSON wire
shapes of the customer service (camelCase on the wire, snake_case in Python).
"""

import math
from datetime import datetime
from typing import Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...domain.entities.customer_entity import Customer
from ...domain.exceptions import ValidationError
from ...domain.value_objects.address import Address
from ...domain.value_objects.customer_status import CustomerStatus
from ...domain.value_objects.customer_type import CustomerType

T = TypeVar("T")


class WireModel(BaseModel):
    """Base model serialized in camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-ready dict using wire (camelCase) names"""
        return self.model_dump(mode="json", by_alias=True)


class AddressDto(WireModel):
    """Address information"""

    street: str = ""
    number: str = ""
    complement: Optional[str] = None
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = Address.DEFAULT_COUNTRY

    @classmethod
    def from_value_object(cls, address: Address) -> "AddressDto":
        return cls(
            street=address.street,
            number=address.number,
            complement=address.complement,
            neighborhood=address.neighborhood,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
        )

    def to_value_object(self) -> Address:
        """Validate into an Address value object"""
        return Address(
            street=self.street,
            number=self.number,
            neighborhood=self.neighborhood,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            country=self.country,
            complement=self.complement,
        )


class CustomerDto(WireModel):
    """Customer as exposed to callers"""

    id: UUID
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: AddressDto = Field(default_factory=AddressDto)
    customer_type: CustomerType = Field(default=CustomerType.STANDARD, alias="type")
    status: CustomerStatus = CustomerStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_deleted: bool = False

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerDto":
        """Map the aggregate to its DTO"""
        return cls(
            id=customer.id.value,
            first_name=customer.first_name,
            last_name=customer.last_name,
            full_name=customer.full_name,
            email=customer.email.value,
            phone=customer.phone.value,
            address=AddressDto.from_value_object(customer.address),
            customer_type=customer.customer_type,
            status=customer.status,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
            is_deleted=customer.is_deleted,
        )


class CreateCustomerDto(WireModel):
    """Data required to create a customer"""

    first_name: str
    last_name: str
    email: str
    phone: str
    address: AddressDto
    customer_type: CustomerType = Field(default=CustomerType.STANDARD, alias="type")


class UpdateCustomerDto(WireModel):
    """Data accepted when updating a customer"""

    first_name: str
    last_name: str
    phone: str
    address: AddressDto
    customer_type: CustomerType = Field(default=CustomerType.STANDARD, alias="type")


class PagedResult(WireModel, Generic[T]):
    """Read-only snapshot of one page of a query"""

    items: List[T] = Field(default_factory=list)
    page: int = 1
    page_size: int = 20
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1


class CustomerSearchFilter(WireModel):
    """Composed query predicate; built per query, never persisted"""

    search_text: Optional[str] = None
    customer_type: Optional[CustomerType] = Field(default=None, alias="type")
    status: Optional[CustomerStatus] = None
    include_deleted: bool = False
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    city: Optional[str] = None
    state: Optional[str] = None
    page: int = 1
    page_size: int = 20

    def __init__(self, **data):
        super().__init__(**data)
        if self.page < 1:
            raise ValidationError("page must be greater than or equal to 1", "page")
        if self.page_size <= 0:
            raise ValidationError("page_size must be greater than 0", "page_size")


class CustomerStatistics(WireModel):
    """Computed counts over customers; a projection, never a source of truth"""

    total_customers: int = 0
    active_customers: int = 0
    inactive_customers: int = 0
    deleted_customers: int = 0
    standard_customers: int = 0
    premium_customers: int = 0
    corporate_customers: int = 0
    customers_created_this_month: int = 0
    customers_created_this_year: int = 0
    customers_by_city: Dict[str, int] = Field(default_factory=dict)
    customers_by_state: Dict[str, int] = Field(default_factory=dict)


class BatchItemFailure(WireModel):
    """One failed item of a batch operation"""

    key: str
    error_code: str
    message: str


class BatchOperationResult(WireModel, Generic[T]):
    """Per-item outcome of a best-effort batch operation"""

    succeeded: List[T] = Field(default_factory=list)
    failed: List[BatchItemFailure] = Field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def failure_count(self) -> int:
        return len(self.failed)
