"""
Address value object
"""

import re
from dataclasses import dataclass
from typing import ClassVar, Optional

from ..exceptions import ValidationError


def _validate_and_trim(value: Optional[str], field: str, min_length: int, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field)

    trimmed = value.strip()
    if len(trimmed) < min_length:
        raise ValidationError(f"{field} must have at least {min_length} characters", field)
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} cannot be longer than {max_length} characters", field)
    return trimmed


@dataclass(frozen=True)
class Address:
    """Postal address; the zip code is stored as 8 digits"""

    street: str
    number: str
    neighborhood: str
    city: str
    state: str
    zip_code: str
    country: str = "Brasil"
    complement: Optional[str] = None

    ZIP_CODE_DIGITS: ClassVar[int] = 8
    DEFAULT_COUNTRY: ClassVar[str] = "Brasil"

    def __post_init__(self):
        object.__setattr__(self, "street", _validate_and_trim(self.street, "street", 3, 100))
        object.__setattr__(self, "number", _validate_and_trim(self.number, "number", 1, 10))
        object.__setattr__(
            self, "neighborhood", _validate_and_trim(self.neighborhood, "neighborhood", 2, 50)
        )
        object.__setattr__(self, "city", _validate_and_trim(self.city, "city", 2, 50))
        object.__setattr__(self, "state", _validate_and_trim(self.state, "state", 2, 50))
        object.__setattr__(self, "country", _validate_and_trim(self.country, "country", 2, 50))

        complement = self.complement.strip() if self.complement else None
        object.__setattr__(self, "complement", complement or None)

        if not isinstance(self.zip_code, str) or not self.zip_code.strip():
            raise ValidationError("zip_code is required", "zip_code")
        digits = re.sub(r"\D", "", self.zip_code)
        if len(digits) != self.ZIP_CODE_DIGITS:
            raise ValidationError(
                f"zip_code must have {self.ZIP_CODE_DIGITS} digits", "zip_code"
            )
        object.__setattr__(self, "zip_code", digits)

    def formatted_zip_code(self) -> str:
        """99999-999"""
        return f"{self.zip_code[:5]}-{self.zip_code[5:]}"

    def single_line(self) -> str:
        """Return the address on a single line"""
        address = f"{self.street}, {self.number}"
        if self.complement:
            address += f" - {self.complement}"
        address += (
            f", {self.neighborhood}, {self.city}/{self.state}, "
            f"CEP: {self.formatted_zip_code()}"
        )
        if self.country.lower() != self.DEFAULT_COUNTRY.lower():
            address += f", {self.country}"
        return address

    def __str__(self) -> str:
        return self.single_line()
