"""
Typed definitions for store rows as the hosted schema returns them.

Columns are snake_case; enum columns carry upper-case wire values (e.g. status "PENDING").
Joined relations come back nested under the relation name (e.g. "users": {"name": ...}).
"""
from typing import Any, TypedDict


class VenueRow(TypedDict, total=False):
    id: str
    provider_id: str
    name: str
    description: str | None
    address: str
    zone: str
    latitude: float | None
    longitude: float | None
    category: str
    price: float
    price_per_person: float | None
    min_capacity: int
    max_capacity: int
    images: list[str]
    payment_methods: list[str]
    amenities: list[str]
    rules: list[str]
    status: str  # PENDING | ACTIVE | FEATURED | INACTIVE | BANNED
    rating: float
    review_count: int
    views: int
    favorites_count: int
    created_at: str
    updated_at: str
    users: dict[str, Any]  # users!venues_provider_id_fkey(name)


class BookingRow(TypedDict, total=False):
    id: str
    venue_id: str
    client_id: str
    provider_id: str
    event_date: str  # YYYY-MM-DD
    event_type: str | None
    guest_count: int
    status: str  # PENDING | CONFIRMED | CANCELLED | COMPLETED
    base_price: float
    extras_price: float
    total_price: float
    extras: dict[str, bool]
    payment_method: str | None
    payment_status: str  # PENDING | PAID | REFUNDED
    notes: str | None
    start_time: str | None
    end_time: str | None
    created_at: str
    updated_at: str
    confirmed_at: str | None


class AvailabilityRow(TypedDict, total=False):
    venue_id: str
    date: str  # YYYY-MM-DD
    is_available: bool


class UserRow(TypedDict, total=False):
    id: str
    email: str
    name: str
    role: str  # CLIENTE | PROVEEDOR | ADMIN
    phone: str | None
    avatar: str | None
    email_verified: bool
    verification_status: str | None
    created_at: str


class FavoriteRow(TypedDict, total=False):
    user_id: str
    venue_id: str
    venues: VenueRow
