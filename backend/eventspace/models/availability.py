"""Per-day availability. DateAvailability is derived per month and never stored."""
from datetime import date

from pydantic import BaseModel


class DateAvailability(BaseModel):
    date: date
    is_available: bool


class AvailabilityOverride(BaseModel):
    """venue_availability row: explicitly opens or closes one date for one venue."""

    venue_id: str
    date: date
    is_available: bool
