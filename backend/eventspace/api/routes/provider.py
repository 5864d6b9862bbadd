"""
Provider dashboard: own venues (multi-step form), incoming bookings and totals.
"""
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from eventspace.api.deps import get_provider, get_user_store
from eventspace.models.booking import BookingStatus
from eventspace.models.user import User
from eventspace.models.venue import VenueDraft
from eventspace.services import booking_service, venue_service
from eventspace.services.store import StoreClient

router = APIRouter()


class StatusUpdate(BaseModel):
    status: BookingStatus


@router.get("/venues", response_model=list)
async def my_venues(provider: User = Depends(get_provider), store: StoreClient = Depends(get_user_store)):
    return [v.model_dump(mode="json") for v in await venue_service.get_provider_venues(store, provider)]


@router.post("/venues/validate/{step}", response_model=dict)
async def validate_step(step: int, draft: VenueDraft, provider: User = Depends(get_provider)):
    """Check one step of the venue form; 422 with a field -> message map when incomplete."""
    venue_service.validate_venue_step(step, draft)
    return {"ok": True, "step": step}


@router.post("/venues", response_model=dict, status_code=201)
async def create_venue(
    draft: VenueDraft,
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
):
    venue = await venue_service.create_venue(store, provider, draft)
    return venue.model_dump(mode="json")


@router.patch("/venues/{venue_id}", response_model=dict)
async def update_venue(
    venue_id: str,
    draft: VenueDraft,
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
):
    venue = await venue_service.update_venue(store, provider, venue_id, draft)
    return venue.model_dump(mode="json")


@router.delete("/venues/{venue_id}", response_model=dict)
async def delete_venue(
    venue_id: str,
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
):
    await venue_service.delete_venue(store, provider, venue_id)
    return {"ok": True, "id": venue_id}


@router.get("/bookings", response_model=list)
async def incoming_bookings(
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
    status: BookingStatus | None = Query(None),
    search: str | None = Query(None, description="Matches venue or client name"),
):
    bookings = await booking_service.list_provider_bookings(store, provider, status=status, search=search)
    return [b.model_dump(mode="json") for b in bookings]


@router.patch("/bookings/{booking_id}/status", response_model=dict)
async def set_booking_status(
    booking_id: str,
    body: StatusUpdate,
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
):
    booking = await booking_service.update_booking_status(store, provider, booking_id, body.status)
    return booking.model_dump(mode="json")


@router.get("/metrics", response_model=dict)
async def metrics(
    provider: User = Depends(get_provider),
    store: StoreClient = Depends(get_user_store),
) -> dict[str, Any]:
    data = await venue_service.get_provider_metrics(store, provider)
    return data | {"revenue": str(data["revenue"])}
