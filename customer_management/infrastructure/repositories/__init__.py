"""
Repository implementations
"""

from .sqlalchemy_customer_repository import SQLAlchemyCustomerRepository

__all__ = ["SQLAlchemyCustomerRepository"]
