"""
Bookings: checkout handoff and the client's own bookings.

Checkout checks the date and the bearer token before any store, auth or payment call.
"""
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from eventspace.api.deps import (
    get_access_token,
    get_auth_client,
    get_current_user,
    get_payments,
    get_settings_dep,
    get_store,
    get_user_store,
)
from eventspace.config import Settings
from eventspace.core.errors import MSG_DATE_REQUIRED, AuthenticationRequired, BookingValidationError, NotFoundError
from eventspace.models.user import User
from eventspace.services import booking_service, venue_service
from eventspace.services.auth import AuthClient, current_user
from eventspace.services.payments import PaymentClient
from eventspace.services.store import StoreClient

router = APIRouter()


class CheckoutRequest(BaseModel):
    venue_id: str
    event_date: date | None = None
    guest_count: int = Field(..., ge=1)
    extras: list[str] = Field(default_factory=list, description="Selected extra ids, e.g. security, cleaning")


@router.post("/checkout", response_model=dict)
async def checkout(
    body: CheckoutRequest,
    access_token: str | None = Depends(get_access_token),
    store: StoreClient = Depends(get_store),
    auth: AuthClient = Depends(get_auth_client),
    payments: PaymentClient = Depends(get_payments),
    settings: Settings = Depends(get_settings_dep),
) -> dict[str, Any]:
    """
    Create a payment preference for the booking and return where to redirect.
    No booking row is written here; the total is recomputed from the venue's terms.
    """
    if body.event_date is None:
        raise BookingValidationError(MSG_DATE_REQUIRED, field="event_date")
    if not access_token:
        raise AuthenticationRequired()
    client = await current_user(auth, store, access_token)
    if client is None:
        raise AuthenticationRequired()
    venue = await venue_service.get_venue_by_id(store, body.venue_id)
    if venue is None:
        raise NotFoundError("Venue not found", recovery_url="/explorar")
    result = await booking_service.submit_booking(
        payments,
        venue,
        body.event_date,
        body.guest_count,
        body.extras,
        client,
        base_url=settings.app_base_url,
        currency_id=payments.currency_id,
        sandbox=payments.sandbox,
        default_rate=settings.default_price_per_person,
    )
    return {
        "preference_id": result["preference_id"],
        "checkout_url": result["checkout_url"],
        "total": str(result["total"]),
    }


@router.get("/mine", response_model=list)
async def my_bookings(
    user: User = Depends(get_current_user),
    store: StoreClient = Depends(get_user_store),
):
    bookings = await booking_service.list_client_bookings(store, user)
    return [b.model_dump(mode="json") for b in bookings]


@router.delete("/{booking_id}", response_model=dict)
async def delete_booking(
    booking_id: str,
    user: User = Depends(get_current_user),
    store: StoreClient = Depends(get_user_store),
):
    """Withdraw one of the caller's pending bookings."""
    await booking_service.delete_pending_booking(store, user, booking_id)
    return {"ok": True, "id": booking_id}
