"""
Customer type value object
"""

from enum import Enum


class CustomerType(str, Enum):
    """Commercial category of a customer"""

    STANDARD = "standard"
    PREMIUM = "premium"
    CORPORATE = "corporate"

    def is_premium(self) -> bool:
        """Premium and corporate customers get premium treatment"""
        return self in (CustomerType.PREMIUM, CustomerType.CORPORATE)
