"""
Test data builders
"""

from customer_management.application.dtos.customer_dtos import AddressDto, CreateCustomerDto
from customer_management.domain.entities.customer_entity import Customer
from customer_management.domain.value_objects.address import Address
from customer_management.domain.value_objects.customer_type import CustomerType


def make_address(city: str = "São Paulo", state: str = "SP") -> Address:
    return Address(
        street="Rua das Flores",
        number="42",
        neighborhood="Centro",
        city=city,
        state=state,
        zip_code="01001000",
    )


def make_customer(
    email: str = "maria.silva@example.com",
    first_name: str = "Maria",
    last_name: str = "Silva",
    city: str = "São Paulo",
    state: str = "SP",
    customer_type: CustomerType = CustomerType.STANDARD,
) -> Customer:
    """Build a new customer with its CustomerCreated event already drained"""
    customer = Customer.create(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone="(11) 98765-4321",
        address=make_address(city, state),
        customer_type=customer_type,
    )
    customer.clear_domain_events()
    return customer


def make_create_dto(
    email: str = "maria.silva@example.com", city: str = "São Paulo"
) -> CreateCustomerDto:
    return CreateCustomerDto(
        first_name="Maria",
        last_name="Silva",
        email=email,
        phone="11987654321",
        address=AddressDto.from_value_object(make_address(city)),
    )


