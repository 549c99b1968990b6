"""
Phone Number value object

Represents a validated phone number in the system.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from ..exceptions import ValidationError


@dataclass(frozen=True)
class PhoneNumber:
    """
    Phone number value object, stored as digits only
    """

    value: str

    MIN_DIGITS: ClassVar[int] = 8
    MAX_DIGITS: ClassVar[int] = 15

    def __post_init__(self):
        """Validate phone number on creation"""
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Phone number is required", "phone")

        digits = re.sub(r"\D", "", self.value)
        if not digits:
            raise ValidationError("Phone number must contain digits", "phone")
        if not self.MIN_DIGITS <= len(digits) <= self.MAX_DIGITS:
            raise ValidationError(
                f"Phone number must have between {self.MIN_DIGITS} and "
                f"{self.MAX_DIGITS} digits",
                "phone",
            )

        # Use object.__setattr__ because the class is frozen
        object.__setattr__(self, "value", digits)

    def display_format(self) -> str:
        """Return phone number in display format"""
        if len(self.value) == 11:
            # 11999999999 -> (11) 99999-9999
            return f"({self.value[:2]}) {self.value[2:7]}-{self.value[7:]}"
        if len(self.value) == 10:
            return f"({self.value[:2]}) {self.value[2:6]}-{self.value[6:]}"
        return self.value

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"PhoneNumber('{self.value}')"
