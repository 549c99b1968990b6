"""
Database Infrastructure

Contains SQLAlchemy models and engine/session management.
"""

from .models import Base
from .models import Customer as CustomerModel
from .operations import DatabaseManager

__all__ = [
    "Base",
    "CustomerModel",
    "DatabaseManager",
]
