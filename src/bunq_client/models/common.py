"""
Small value objects shared by request bodies.
"""

from typing import Optional
from pydantic import BaseModel


class Amount(BaseModel):
    value: str
    currency: str

    @classmethod
    def of(cls, value: float, currency: str) -> "Amount":
        """Build an amount with the two-decimal string the API expects."""
        return cls(value=f"{value:.2f}", currency=currency)

    def as_float(self) -> float:
        return float(self.value)


class Pointer(BaseModel):
    type: str  # "EMAIL" | "PHONE_NUMBER" | "IBAN"
    value: str
    name: Optional[str] = None
