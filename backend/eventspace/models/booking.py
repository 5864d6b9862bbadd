"""Booking: one client's reservation of one venue for one date."""
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


# Provider-driven transitions; anything not listed is rejected
ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


class TimeWindow(BaseModel):
    start_time: time | None = None
    end_time: time | None = None


class Booking(BaseModel):
    id: str
    venue_id: str
    client_id: str
    provider_id: str
    event_date: date
    guest_count: int
    total_price: Decimal
    base_price: Decimal | None = None
    extras_price: Decimal | None = None
    extras: dict[str, bool] = Field(default_factory=dict)
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    start_time: time | None = None
    end_time: time | None = None
    special_requests: str | None = None
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    # Denormalized from joins, when the store returns them
    venue_name: str | None = None
    venue_image: str | None = None
    venue_address: str | None = None
    venue_zone: str | None = None
    client_name: str | None = None
    provider_name: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Booking":
        venue = row.get("venues") or {}
        client = row.get("client") or {}
        provider = row.get("provider") or {}
        images = venue.get("images") or []
        return cls(
            id=str(row["id"]),
            venue_id=str(row["venue_id"]),
            client_id=str(row["client_id"]),
            provider_id=str(row.get("provider_id") or ""),
            event_date=row["event_date"],
            guest_count=row.get("guest_count") or 0,
            total_price=Decimal(str(row.get("total_price") or 0)),
            base_price=Decimal(str(row["base_price"])) if row.get("base_price") is not None else None,
            extras_price=Decimal(str(row["extras_price"])) if row.get("extras_price") is not None else None,
            extras=row.get("extras") or {},
            status=row.get("status") or BookingStatus.PENDING,
            payment_status=row.get("payment_status") or PaymentStatus.PENDING,
            start_time=row.get("start_time"),
            end_time=row.get("end_time"),
            special_requests=row.get("notes"),
            created_at=row.get("created_at"),
            confirmed_at=row.get("confirmed_at"),
            venue_name=venue.get("name"),
            venue_image=images[0] if images else None,
            venue_address=venue.get("address"),
            venue_zone=venue.get("zone"),
            client_name=client.get("name"),
            provider_name=provider.get("name"),
        )
