"""
Domain value objects package

Contains immutable value objects that represent concepts in the business domain.
"""

from .address import Address
from .customer_id import CustomerId
from .customer_status import CustomerStatus
from .customer_type import CustomerType
from .email import Email
from .phone_number import PhoneNumber

__all__ = [
    "Address",
    "CustomerId",
    "CustomerStatus",
    "CustomerType",
    "Email",
    "PhoneNumber",
]
