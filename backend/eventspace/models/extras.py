"""Flat-fee add-on services for a booking."""
from decimal import Decimal

from pydantic import BaseModel


class ServiceExtra(BaseModel):
    id: str
    name: str
    description: str = ""
    flat_price: Decimal
    selected: bool = False
