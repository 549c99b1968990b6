"""
Application DTOs
"""

from .customer_dtos import (
    AddressDto,
    BatchItemFailure,
    BatchOperationResult,
    CreateCustomerDto,
    CustomerDto,
    CustomerSearchFilter,
    CustomerStatistics,
    PagedResult,
    UpdateCustomerDto,
)

__all__ = [
    "AddressDto",
    "BatchItemFailure",
    "BatchOperationResult",
    "CreateCustomerDto",
    "CustomerDto",
    "CustomerSearchFilter",
    "CustomerStatistics",
    "PagedResult",
    "UpdateCustomerDto",
]
