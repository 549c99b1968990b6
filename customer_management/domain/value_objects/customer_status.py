"""
Customer status value object
"""

from enum import Enum


class CustomerStatus(str, Enum):
    """Lifecycle status of a customer; DELETED is a soft delete"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"
