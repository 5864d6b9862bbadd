"""
Venues: public catalog, detail with reviews, booking calendar and taken time windows.
"""
from datetime import date
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query

from eventspace.api.deps import get_settings_dep, get_store
from eventspace.config import Settings
from eventspace.core.constants import VENUES_PAGE_SIZE
from eventspace.models.venue import VenueCategory, VenueFilters
from eventspace.services import venue_service
from eventspace.services.availability import calendar_grid, resolve_availability
from eventspace.services.pricing import default_extras_catalog, event_type_label, initial_guest_count, venue_pricing_terms
from eventspace.services.store import StoreClient

router = APIRouter()


@router.get("", response_model=dict)
async def list_venues(
    store: StoreClient = Depends(get_store),
    zone: str | None = Query(None),
    category: VenueCategory | None = Query(None),
    price_min: Decimal | None = Query(None, ge=0),
    price_max: Decimal | None = Query(None, ge=0),
    capacity: int | None = Query(None, ge=1),
    q: str | None = Query(None, description="Free text over name, description and address"),
    page: int = Query(1, ge=1),
    page_size: int = Query(VENUES_PAGE_SIZE, ge=1, le=100),
) -> dict[str, Any]:
    filters = VenueFilters(
        zone=zone, category=category, price_min=price_min, price_max=price_max, capacity=capacity, query=q
    )
    venues, total = await venue_service.get_venues(store, filters, page=page, page_size=page_size)
    return {
        "venues": [v.model_dump(mode="json") for v in venues],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/featured", response_model=list)
async def featured_venues(store: StoreClient = Depends(get_store)):
    return [v.model_dump(mode="json") for v in await venue_service.get_featured_venues(store)]


@router.get("/search", response_model=list)
async def search_venues(q: str = Query(..., min_length=1), store: StoreClient = Depends(get_store)):
    return [v.model_dump(mode="json") for v in await venue_service.search_venues(store, q)]


@router.get("/{venue_id}", response_model=dict)
async def venue_detail(
    venue_id: str,
    store: StoreClient = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
) -> dict[str, Any]:
    """Venue, reviews and the booking widget's starting values. Counts a view."""
    venue, reviews = await venue_service.get_venue_detail(store, venue_id)
    await venue_service.increment_views(store, venue_id)
    terms = venue_pricing_terms(venue, settings.default_price_per_person)
    guests = initial_guest_count(terms.min_capacity, terms.max_capacity)
    return {
        "venue": venue.model_dump(mode="json"),
        "reviews": [r.model_dump(mode="json") for r in reviews],
        "booking": {
            "pricing": terms.model_dump(mode="json"),
            "initial_guest_count": guests,
            "event_type": event_type_label(guests),
            "extras": [e.model_dump(mode="json") for e in default_extras_catalog()],
        },
    }


@router.get("/{venue_id}/availability", response_model=dict)
async def venue_availability(
    venue_id: str,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    store: StoreClient = Depends(get_store),
) -> dict[str, Any]:
    """One entry per day of the month; past days are never available."""
    days = await resolve_availability(store, venue_id, month, year)
    return {
        "venue_id": venue_id,
        "month": month,
        "year": year,
        "grid": calendar_grid(month, year),
        "days": [d.model_dump(mode="json") for d in days],
    }


@router.get("/{venue_id}/bookings", response_model=list)
async def venue_bookings_on_date(
    venue_id: str,
    event_date: date = Query(..., alias="date"),
    store: StoreClient = Depends(get_store),
):
    """Time windows already taken on a date."""
    windows = await venue_service.get_bookings_for_venue_date(store, venue_id, event_date.isoformat())
    return [w.model_dump(mode="json") for w in windows]
