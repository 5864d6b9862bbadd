"""Venue listed by a provider. Mirrors the store's `venues` row; values of the enums are the store's wire values."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from eventspace.core.constants import DEFAULT_MIN_CAPACITY


class VenueCategory(str, Enum):
    SALON = "SALON_EVENTOS"
    GARDEN = "JARDIN"
    TERRACE = "TERRAZA"
    HACIENDA = "HACIENDA"
    WAREHOUSE = "BODEGA"
    RESTAURANT = "RESTAURANTE"
    HOTEL = "HOTEL"
    ESTATE = "QUINTA"
    ROOFTOP = "ROOFTOP"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "TRANSFERENCIA"
    CASH = "EFECTIVO"
    CARD = "TARJETA"


class VenueStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    FEATURED = "FEATURED"
    INACTIVE = "INACTIVE"
    BANNED = "BANNED"


class Venue(BaseModel):
    id: str
    provider_id: str
    provider_name: str = "Provider"
    name: str
    description: str = ""
    category: VenueCategory
    address: str
    zone: str
    price: Decimal
    price_per_person: Decimal | None = None
    min_capacity: int = DEFAULT_MIN_CAPACITY
    max_capacity: int
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    payment_methods: list[PaymentMethod] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    status: VenueStatus = VenueStatus.PENDING
    rating: float = 0.0
    review_count: int = 0
    views: int = 0
    favorites: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def cover_image(self) -> str | None:
        return self.images[0] if self.images else None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Venue":
        """Map a store row (optionally joined with users(name)) to a Venue."""
        provider = row.get("users") or {}
        return cls(
            id=str(row["id"]),
            provider_id=str(row.get("provider_id") or ""),
            provider_name=provider.get("name") or row.get("provider_name") or "Provider",
            name=row.get("name") or "",
            description=row.get("description") or "",
            category=row["category"],
            address=row.get("address") or "",
            zone=row.get("zone") or "",
            price=Decimal(str(row.get("price") or 0)),
            price_per_person=(
                Decimal(str(row["price_per_person"])) if row.get("price_per_person") is not None else None
            ),
            min_capacity=row.get("min_capacity") or DEFAULT_MIN_CAPACITY,
            max_capacity=row.get("max_capacity") or 0,
            images=row.get("images") or [],
            amenities=row.get("amenities") or [],
            payment_methods=row.get("payment_methods") or [],
            rules=row.get("rules") or [],
            status=row.get("status") or VenueStatus.PENDING,
            rating=float(row.get("rating") or 0),
            review_count=row.get("review_count") or 0,
            views=row.get("views") or 0,
            favorites=row.get("favorites_count") or 0,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class VenueDraft(BaseModel):
    """Provider's venue form as submitted: raw strings, validated step by step before insert."""

    name: str = ""
    description: str = ""
    category: str = ""
    address: str = ""
    zone: str = ""
    price: str = ""
    price_per_person: str = ""
    min_capacity: str = str(DEFAULT_MIN_CAPACITY)
    max_capacity: str = ""
    image_urls: str = ""  # comma separated
    amenities: list[str] = Field(default_factory=list)
    payment_methods: list[str] = Field(default_factory=list)
    rules: str = ""  # one rule per line


class VenueFilters(BaseModel):
    zone: str | None = None
    category: VenueCategory | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    capacity: int | None = None
    query: str | None = None
