"""
Venue catalog reads and provider-side venue management.

Listing reads degrade to an empty result when the store fails (logged); the detail
read raises NotFoundError so the caller can show a not-found view with a way back.
"""
import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from eventspace.core.constants import (
    FEATURED_VENUES_LIMIT,
    MIN_DESCRIPTION_LENGTH,
    MIN_VENUE_PRICE,
    PUBLIC_VENUE_STATUSES,
    RPC_INCREMENT_VENUE_VIEWS,
    SEARCH_VENUES_LIMIT,
    TABLE_BOOKINGS,
    TABLE_REVIEWS,
    TABLE_VENUES,
    VENUE_FORM_STEPS,
    VENUES_PAGE_SIZE,
)
from eventspace.core.errors import BookingValidationError, ExternalServiceError, NotFoundError, PermissionDenied
from eventspace.models.booking import BookingStatus, TimeWindow
from eventspace.models.review import Review
from eventspace.models.user import User
from eventspace.models.venue import PaymentMethod, Venue, VenueCategory, VenueDraft, VenueFilters, VenueStatus
from eventspace.services.store import Filter, StoreClient

logger = logging.getLogger(__name__)

VENUE_COLUMNS = "*, users!venues_provider_id_fkey(name)"
REVIEW_COLUMNS = "*, users(name, avatar)"


def _like(text: str) -> str:
    return f"*{text.strip()}*"


def _text_search(query: str, *, include_zone: bool = False) -> list[Filter]:
    columns = ["name", "description", "address"] + (["zone"] if include_zone else [])
    return [(column, "ilike", _like(query)) for column in columns]


def _venue_filters(filters: VenueFilters | None) -> tuple[list[Filter], list[Filter] | None]:
    conditions: list[Filter] = [("status", "in", list(PUBLIC_VENUE_STATUSES))]
    or_: list[Filter] | None = None
    if filters is None:
        return conditions, or_
    if filters.zone:
        conditions.append(("zone", "eq", filters.zone))
    if filters.category:
        conditions.append(("category", "eq", filters.category))
    if filters.price_min:
        conditions.append(("price", "gte", filters.price_min))
    if filters.price_max:
        conditions.append(("price", "lte", filters.price_max))
    if filters.capacity:
        conditions.append(("max_capacity", "gte", filters.capacity))
    if filters.query and filters.query.strip():
        or_ = _text_search(filters.query)
    return conditions, or_


async def get_venues(
    store: StoreClient,
    filters: VenueFilters | None = None,
    *,
    page: int = 1,
    page_size: int = VENUES_PAGE_SIZE,
) -> tuple[list[Venue], int]:
    """Public venues, newest first, one page at a time. Returns (venues, total matching)."""
    conditions, or_ = _venue_filters(filters)
    page = max(page, 1)
    try:
        result = await store.select(
            TABLE_VENUES,
            columns=VENUE_COLUMNS,
            filters=conditions,
            or_=or_,
            order="created_at.desc",
            limit=page_size,
            offset=(page - 1) * page_size,
            count=True,
        )
    except ExternalServiceError as e:
        logger.error("Error fetching venues: %s", e)
        return [], 0
    venues = [Venue.from_row(row) for row in result.rows]
    return venues, result.count if result.count is not None else len(venues)


async def get_venue_by_id(store: StoreClient, venue_id: str) -> Venue | None:
    """None only when the store has no such venue; a store failure raises ExternalServiceError."""
    try:
        row = await store.select_one(TABLE_VENUES, columns=VENUE_COLUMNS, filters=[("id", "eq", venue_id)])
    except ExternalServiceError as e:
        logger.error("Error fetching venue %s: %s", venue_id, e)
        raise
    return Venue.from_row(row) if row else None


async def get_featured_venues(store: StoreClient, limit: int = FEATURED_VENUES_LIMIT) -> list[Venue]:
    try:
        result = await store.select(
            TABLE_VENUES,
            columns=VENUE_COLUMNS,
            filters=[("status", "eq", VenueStatus.FEATURED)],
            order="rating.desc",
            limit=limit,
        )
    except ExternalServiceError as e:
        logger.error("Error fetching featured venues: %s", e)
        return []
    return [Venue.from_row(row) for row in result.rows]


async def search_venues(store: StoreClient, query: str) -> list[Venue]:
    """Free text over name, description, address and zone of public venues."""
    if not query or not query.strip():
        return []
    try:
        result = await store.select(
            TABLE_VENUES,
            columns=VENUE_COLUMNS,
            filters=[("status", "in", list(PUBLIC_VENUE_STATUSES))],
            or_=_text_search(query, include_zone=True),
            limit=SEARCH_VENUES_LIMIT,
        )
    except ExternalServiceError as e:
        logger.error("Error searching venues: %s", e)
        return []
    return [Venue.from_row(row) for row in result.rows]


async def get_venue_reviews(store: StoreClient, venue_id: str) -> list[Review]:
    try:
        result = await store.select(
            TABLE_REVIEWS,
            columns=REVIEW_COLUMNS,
            filters=[("venue_id", "eq", venue_id)],
            order="created_at.desc",
        )
    except ExternalServiceError as e:
        logger.error("Error fetching reviews for venue %s: %s", venue_id, e)
        return []
    return [Review.from_row(row) for row in result.rows]


async def get_venue_detail(store: StoreClient, venue_id: str) -> tuple[Venue, list[Review]]:
    """Venue and its reviews, fetched concurrently; both are awaited before returning."""
    venue, reviews = await asyncio.gather(get_venue_by_id(store, venue_id), get_venue_reviews(store, venue_id))
    if venue is None:
        raise NotFoundError("Venue not found", recovery_url="/explorar")
    return venue, reviews


async def get_bookings_for_venue_date(store: StoreClient, venue_id: str, event_date: str) -> list[TimeWindow]:
    """Time windows already taken on a date (pending or confirmed bookings)."""
    try:
        result = await store.select(
            TABLE_BOOKINGS,
            columns="start_time,end_time",
            filters=[
                ("venue_id", "eq", venue_id),
                ("event_date", "eq", event_date),
                ("status", "in", [BookingStatus.CONFIRMED, BookingStatus.PENDING]),
            ],
        )
    except ExternalServiceError as e:
        logger.error("Error fetching bookings for venue %s on %s: %s", venue_id, event_date, e)
        return []
    return [TimeWindow(start_time=row.get("start_time"), end_time=row.get("end_time")) for row in result.rows]


async def increment_views(store: StoreClient, venue_id: str) -> None:
    try:
        await store.rpc(RPC_INCREMENT_VENUE_VIEWS, {"venue_id": venue_id})
    except ExternalServiceError as e:
        logger.warning("Could not count view for venue %s: %s", venue_id, e)


# ---------------------------------------------------------------------------
# Provider side: multi-step venue form
# ---------------------------------------------------------------------------


def _to_decimal(value: str) -> Decimal | None:
    try:
        return Decimal(value.strip()) if value and value.strip() else None
    except InvalidOperation:
        return None


def _to_int(value: str) -> int | None:
    try:
        return int(value.strip()) if value and value.strip() else None
    except ValueError:
        return None


def _step_errors(step: int, draft: VenueDraft) -> dict[str, str]:
    errors: dict[str, str] = {}
    if step == 1:
        if not draft.name.strip():
            errors["name"] = "Name is required"
        if draft.category not in {c.value for c in VenueCategory}:
            errors["category"] = "Select a category"
        if len(draft.description.strip()) < MIN_DESCRIPTION_LENGTH:
            errors["description"] = f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
    elif step == 2:
        if not draft.address.strip():
            errors["address"] = "Address is required"
        if not draft.zone.strip():
            errors["zone"] = "Zone is required"
        price = _to_decimal(draft.price)
        if price is None or price < MIN_VENUE_PRICE:
            errors["price"] = f"Price must be at least {MIN_VENUE_PRICE}"
        if draft.price_per_person.strip():
            rate = _to_decimal(draft.price_per_person)
            if rate is None or rate < 0:
                errors["price_per_person"] = "Price per person must be a positive number"
    elif step == 3:
        min_capacity = _to_int(draft.min_capacity)
        max_capacity = _to_int(draft.max_capacity)
        if min_capacity is None or min_capacity < 1:
            errors["min_capacity"] = "Minimum capacity must be at least 1"
        if max_capacity is None or (min_capacity is not None and max_capacity < min_capacity):
            errors["max_capacity"] = "Maximum capacity must be greater than or equal to minimum capacity"
        methods = {m.value for m in PaymentMethod}
        if not draft.payment_methods or any(m not in methods for m in draft.payment_methods):
            errors["payment_methods"] = "Select at least one payment method"
    # step 4 (images) is optional
    return errors


def validate_venue_step(step: int, draft: VenueDraft) -> None:
    """Raise BookingValidationError with a field -> message map when the step is incomplete."""
    if step not in VENUE_FORM_STEPS:
        raise BookingValidationError(f"Unknown form step: {step}", field="step")
    errors = _step_errors(step, draft)
    if errors:
        raise BookingValidationError("Please complete the required fields", fields=errors)


def _split_images(image_urls: str) -> list[str]:
    return [url.strip() for url in image_urls.split(",") if url.strip()]


def _split_rules(rules: str) -> list[str]:
    return [rule.strip() for rule in rules.splitlines() if rule.strip()]


def draft_to_row(draft: VenueDraft) -> dict[str, Any]:
    price_per_person = _to_decimal(draft.price_per_person)
    return {
        "name": draft.name.strip(),
        "description": draft.description.strip(),
        "category": draft.category,
        "address": draft.address.strip(),
        "zone": draft.zone.strip(),
        "price": float(_to_decimal(draft.price) or 0),
        "price_per_person": float(price_per_person) if price_per_person is not None else None,
        "min_capacity": _to_int(draft.min_capacity),
        "max_capacity": _to_int(draft.max_capacity),
        "images": _split_images(draft.image_urls),
        "amenities": list(draft.amenities),
        "payment_methods": list(draft.payment_methods),
        "rules": _split_rules(draft.rules),
    }


async def create_venue(store: StoreClient, provider: User, draft: VenueDraft) -> Venue:
    """Every form step must pass; new venues start PENDING until an admin approves them."""
    errors: dict[str, str] = {}
    for step in VENUE_FORM_STEPS:
        errors.update(_step_errors(step, draft))
    if errors:
        raise BookingValidationError("Please complete the required fields", fields=errors)
    row = draft_to_row(draft) | {"provider_id": provider.id, "status": VenueStatus.PENDING.value}
    created = await store.insert(TABLE_VENUES, row)
    logger.info("Venue %s created by provider %s", created.get("id"), provider.id)
    return Venue.from_row(created)


async def _owned_venue(store: StoreClient, provider: User, venue_id: str) -> Venue:
    row = await store.select_one(TABLE_VENUES, columns=VENUE_COLUMNS, filters=[("id", "eq", venue_id)])
    if not row:
        raise NotFoundError("Venue not found", recovery_url="/proveedor/espacios")
    venue = Venue.from_row(row)
    if venue.provider_id != provider.id:
        raise PermissionDenied("This venue belongs to another provider")
    return venue


async def update_venue(store: StoreClient, provider: User, venue_id: str, draft: VenueDraft) -> Venue:
    await _owned_venue(store, provider, venue_id)
    errors: dict[str, str] = {}
    for step in VENUE_FORM_STEPS:
        errors.update(_step_errors(step, draft))
    if errors:
        raise BookingValidationError("Please complete the required fields", fields=errors)
    await store.update(TABLE_VENUES, draft_to_row(draft), filters=[("id", "eq", venue_id)])
    logger.info("Venue %s updated by provider %s", venue_id, provider.id)
    return await _owned_venue(store, provider, venue_id)


async def delete_venue(store: StoreClient, provider: User, venue_id: str) -> None:
    await _owned_venue(store, provider, venue_id)
    await store.delete(TABLE_VENUES, filters=[("id", "eq", venue_id), ("provider_id", "eq", provider.id)])
    logger.info("Venue %s deleted by provider %s", venue_id, provider.id)


async def get_provider_venues(store: StoreClient, provider: User) -> list[Venue]:
    result = await store.select(
        TABLE_VENUES,
        columns=VENUE_COLUMNS,
        filters=[("provider_id", "eq", provider.id)],
        order="created_at.desc",
    )
    return [Venue.from_row(row) for row in result.rows]


async def get_provider_metrics(store: StoreClient, provider: User) -> dict[str, Any]:
    """Dashboard totals across the provider's venues and bookings."""
    venues, bookings = await asyncio.gather(
        get_provider_venues(store, provider),
        store.select(
            TABLE_BOOKINGS,
            columns="status,total_price",
            filters=[("provider_id", "eq", provider.id)],
        ),
    )
    by_status = {status.value: 0 for status in BookingStatus}
    revenue = Decimal("0")
    for row in bookings.rows:
        status = row.get("status") or BookingStatus.PENDING.value
        by_status[status] = by_status.get(status, 0) + 1
        if status in (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value):
            revenue += Decimal(str(row.get("total_price") or 0))
    return {
        "venues": len(venues),
        "active_venues": sum(1 for v in venues if v.status in (VenueStatus.ACTIVE, VenueStatus.FEATURED)),
        "total_views": sum(v.views for v in venues),
        "total_favorites": sum(v.favorites for v in venues),
        "bookings": len(bookings.rows),
        "bookings_by_status": by_status,
        "revenue": revenue,
    }
