"""
Booking price: base price, per-person overage above the venue minimum, and flat-fee extras.

compute_total is pure: same inputs, same Decimal, no rounding. It does not clamp or
validate the guest count; callers clamp with clamp_guest_count first.
"""
from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel

from eventspace.core.constants import (
    DEFAULT_EXTRAS_CATALOG,
    DEFAULT_MIN_CAPACITY,
    DEFAULT_PRICE_PER_PERSON,
    EVENT_TYPE_LARGEST,
    EVENT_TYPE_THRESHOLDS,
)
from eventspace.models.extras import ServiceExtra
from eventspace.models.venue import Venue

Number = int | float | Decimal


def _dec(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_total(
    base_price: Number,
    guest_count: int,
    min_capacity: int,
    price_per_person: Number | None = None,
    selected_extras: Iterable[ServiceExtra] = (),
) -> Decimal:
    """Total for a booking. price_per_person None means the default overage rate."""
    rate = DEFAULT_PRICE_PER_PERSON if price_per_person is None else _dec(price_per_person)
    total = _dec(base_price)
    if guest_count > min_capacity:
        total += (guest_count - min_capacity) * rate
    for extra in selected_extras:
        if extra.selected:
            total += extra.flat_price
    return total


class PriceBreakdown(BaseModel):
    base: Decimal
    overage_guests: int
    overage: Decimal
    extras: Decimal
    total: Decimal


def price_breakdown(
    base_price: Number,
    guest_count: int,
    min_capacity: int,
    price_per_person: Number | None = None,
    selected_extras: Iterable[ServiceExtra] = (),
) -> PriceBreakdown:
    """Same arithmetic as compute_total, split into lines for display."""
    extras = list(selected_extras)
    rate = DEFAULT_PRICE_PER_PERSON if price_per_person is None else _dec(price_per_person)
    overage_guests = max(guest_count - min_capacity, 0)
    extras_sum = sum((e.flat_price for e in extras if e.selected), Decimal("0"))
    return PriceBreakdown(
        base=_dec(base_price),
        overage_guests=overage_guests,
        overage=overage_guests * rate,
        extras=extras_sum,
        total=compute_total(base_price, guest_count, min_capacity, price_per_person, extras),
    )


def default_extras_catalog() -> list[ServiceExtra]:
    """Fresh, unselected copies of the static catalog (safe to mutate per booking)."""
    return [
        ServiceExtra(id=extra_id, name=name, description=description, flat_price=price)
        for extra_id, name, description, price in DEFAULT_EXTRAS_CATALOG
    ]


def select_extras(catalog: Iterable[ServiceExtra], selected_ids: Iterable[str]) -> list[ServiceExtra]:
    """Copy of catalog with selected set from selected_ids. Unknown ids are ignored."""
    wanted = set(selected_ids)
    return [extra.model_copy(update={"selected": extra.id in wanted}) for extra in catalog]


def extras_flags(extras: Iterable[ServiceExtra]) -> dict[str, bool]:
    """{extra_id: selected} as stored on the booking."""
    return {extra.id: extra.selected for extra in extras}


def clamp_guest_count(guest_count: int, min_capacity: int, max_capacity: int) -> int:
    """The range-input clamp: keep guests within [min_capacity, max_capacity]."""
    if max_capacity < min_capacity:
        max_capacity = min_capacity
    return max(min_capacity, min(guest_count, max_capacity))


def initial_guest_count(min_capacity: int, max_capacity: int) -> int:
    """Starting slider value: a quarter of the way into min+max, kept inside the range."""
    return clamp_guest_count(round((min_capacity + max_capacity) / 4), min_capacity, max_capacity)


def event_type_label(guest_count: int) -> str:
    for upper, label in EVENT_TYPE_THRESHOLDS:
        if guest_count <= upper:
            return label
    return EVENT_TYPE_LARGEST


class PricingTerms(BaseModel):
    base_price: Decimal
    min_capacity: int
    max_capacity: int
    price_per_person: Decimal


def venue_pricing_terms(venue: Venue, default_rate: Number = DEFAULT_PRICE_PER_PERSON) -> PricingTerms:
    """Calculator inputs for a venue; default_rate applies when the venue sets no overage rate."""
    min_capacity = venue.min_capacity or DEFAULT_MIN_CAPACITY
    return PricingTerms(
        base_price=venue.price,
        min_capacity=min_capacity,
        max_capacity=max(venue.max_capacity, min_capacity),
        price_per_person=venue.price_per_person if venue.price_per_person is not None else _dec(default_rate),
    )
