"""
Customer ID value object
"""

import uuid
from dataclasses import dataclass

from ..exceptions import ValidationError


@dataclass(frozen=True)
class CustomerId:
    """Customer identifier value object"""

    value: uuid.UUID

    def __post_init__(self):
        """Validate customer ID"""
        if not isinstance(self.value, uuid.UUID):
            raise ValidationError("Customer ID must be a UUID", "id")
        if self.value.int == 0:
            raise ValidationError("Customer ID cannot be empty", "id")

    @classmethod
    def new(cls) -> "CustomerId":
        """Generate a fresh random identifier"""
        return cls(uuid.uuid4())

    @classmethod
    def from_string(cls, value: str) -> "CustomerId":
        """Parse an identifier from its string form"""
        try:
            parsed = uuid.UUID(str(value))
        except ValueError as e:
            raise ValidationError(f"Invalid customer ID format: {value}", "id") from e
        return cls(parsed)

    def __str__(self) -> str:
        return str(self.value)
