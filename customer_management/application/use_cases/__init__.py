"""
Use Cases

Contains the business use cases of the application.
Each use case represents a single business operation.
"""

from .customer_management_use_case import CustomerManagementUseCase

__all__ = [
    'CustomerManagementUseCase'
]
