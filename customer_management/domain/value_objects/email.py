"""
Email value object

Emails are normalized (trimmed, lower-cased) so equality and hashing are
case-insensitive.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from ..exceptions import ValidationError


@dataclass(frozen=True)
class Email:
    """Validated, normalized email address"""

    value: str

    EMAIL_PATTERN: ClassVar[str] = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    MAX_LENGTH: ClassVar[int] = 254

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Email is required", "email")

        normalized = self.value.strip().lower()
        if len(normalized) > self.MAX_LENGTH:
            raise ValidationError(
                f"Email cannot be longer than {self.MAX_LENGTH} characters", "email"
            )
        if not re.match(self.EMAIL_PATTERN, normalized):
            raise ValidationError(f"Invalid email format: {self.value}", "email")

        # Use object.__setattr__ because the class is frozen
        object.__setattr__(self, "value", normalized)

    @property
    def domain(self) -> str:
        return self.value.split("@")[1]

    @property
    def local_part(self) -> str:
        return self.value.split("@")[0]

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email('{self.value}')"
