"""
Domain entities package

Contains the core business entities of the customer management domain.
These represent the fundamental business concepts and rules.
"""

from .customer_entity import Customer

__all__ = ["Customer"]
