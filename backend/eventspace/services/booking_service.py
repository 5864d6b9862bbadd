"""
Booking submission and the bookings table.

build_booking_request packages a checkout request; it rejects a missing date or a
signed-out client before anything leaves the process. Nothing is written to the
bookings table by submission: the payment handoff is all-or-nothing.
"""
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from eventspace.core.constants import (
    BOOKING_FAILURE_PATH,
    BOOKING_PENDING_PATH,
    BOOKING_SUCCESS_PATH,
    DEFAULT_PRICE_PER_PERSON,
    DEFAULT_VENUE_PICTURE,
    MP_AUTO_RETURN,
    MP_STATEMENT_DESCRIPTOR,
    TABLE_BOOKINGS,
)
from eventspace.core.errors import (
    MSG_DATE_REQUIRED,
    AuthenticationRequired,
    BookingValidationError,
    ExternalServiceError,
    NotFoundError,
    PermissionDenied,
)
from eventspace.models.booking import ALLOWED_STATUS_TRANSITIONS, Booking, BookingStatus, PaymentStatus
from eventspace.models.extras import ServiceExtra
from eventspace.models.payment import BackUrls, Payer, PaymentItem, PaymentRequest
from eventspace.models.user import User
from eventspace.models.venue import Venue
from eventspace.services.notifications import NotificationCenter
from eventspace.services.payments import PreferenceCreator, checkout_url
from eventspace.services.pricing import (
    Number,
    clamp_guest_count,
    compute_total,
    default_extras_catalog,
    extras_flags,
    initial_guest_count,
    select_extras,
    venue_pricing_terms,
)
from eventspace.services.store import StoreClient

logger = logging.getLogger(__name__)

CLIENT_BOOKING_COLUMNS = "*, venues(name, images, address, zone)"
PROVIDER_BOOKING_COLUMNS = "*, venues(name, images), client:users!bookings_client_id_fkey(name, email, phone)"


def long_date(d: date) -> str:
    """e.g. 'Saturday, March 14, 2026'."""
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def _check_submission(selected_date: date | None, client: User | None) -> None:
    # Date first, then auth: both before any network call.
    if selected_date is None:
        raise BookingValidationError(MSG_DATE_REQUIRED, field="event_date")
    if client is None:
        raise AuthenticationRequired()


def build_booking_request(
    venue: Venue,
    selected_date: date | None,
    guest_count: int,
    total_price: Number,
    extras: Iterable[ServiceExtra],
    client: User | None,
    *,
    base_url: str,
    currency_id: str = "MXN",
) -> PaymentRequest:
    """One line item for the whole booking, payer from the client, return URLs into the web client."""
    _check_submission(selected_date, client)
    base_url = base_url.rstrip("/")
    item = PaymentItem(
        id=venue.id,
        title=f"Booking: {venue.name} ({selected_date.isoformat()})",
        description=f"Event for {guest_count} guests on {long_date(selected_date)}",
        picture_url=venue.cover_image or DEFAULT_VENUE_PICTURE,
        quantity=1,
        currency_id=currency_id,
        unit_price=Decimal(str(total_price)),
    )
    return PaymentRequest(
        items=[item],
        payer=Payer(name=client.first_name, surname=client.last_name, email=client.email),
        back_urls=BackUrls(
            success=f"{base_url}{BOOKING_SUCCESS_PATH}",
            failure=f"{base_url}{BOOKING_FAILURE_PATH}",
            pending=f"{base_url}{BOOKING_PENDING_PATH}",
        ),
        auto_return=MP_AUTO_RETURN,
        statement_descriptor=MP_STATEMENT_DESCRIPTOR,
        external_reference=f"booking_{venue.id}_{int(time.time() * 1000)}",
        metadata={
            "venue_id": venue.id,
            "client_id": client.id,
            "event_date": selected_date.isoformat(),
            "guest_count": guest_count,
            "extras": extras_flags(extras),
        },
    )


class BookingAttemptState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    SUBMITTING = "submitting"
    REDIRECTING = "redirecting"


class BookingAttempt:
    """
    One client's booking attempt on a venue page.

    IDLE until a date is picked, then READY. reserve() moves READY -> SUBMITTING and
    ends in REDIRECTING on success or back in READY when the payment call fails.
    A failed local check (no date, signed out) changes nothing and posts a warning.
    """

    def __init__(
        self,
        venue: Venue,
        notify: NotificationCenter,
        *,
        extras: list[ServiceExtra] | None = None,
        default_rate: Number = DEFAULT_PRICE_PER_PERSON,
    ) -> None:
        self.venue = venue
        self.terms = venue_pricing_terms(venue, default_rate)
        self._notify = notify
        self.extras = extras if extras is not None else default_extras_catalog()
        self.selected_date: date | None = None
        self.guest_count = initial_guest_count(self.terms.min_capacity, self.terms.max_capacity)
        self._state = BookingAttemptState.IDLE

    @property
    def state(self) -> BookingAttemptState:
        return self._state

    @property
    def total(self) -> Decimal:
        return compute_total(
            self.terms.base_price,
            self.guest_count,
            self.terms.min_capacity,
            self.terms.price_per_person,
            self.extras,
        )

    def select_date(self, day: date | None) -> None:
        self.selected_date = day
        if self._state in (BookingAttemptState.IDLE, BookingAttemptState.READY):
            self._state = BookingAttemptState.READY if day is not None else BookingAttemptState.IDLE

    def set_guest_count(self, guest_count: int) -> int:
        self.guest_count = clamp_guest_count(guest_count, self.terms.min_capacity, self.terms.max_capacity)
        return self.guest_count

    def toggle_extra(self, extra_id: str) -> bool:
        """Flip one extra; returns its new selected flag. Unknown ids raise KeyError."""
        for i, extra in enumerate(self.extras):
            if extra.id == extra_id:
                self.extras[i] = extra.model_copy(update={"selected": not extra.selected})
                return self.extras[i].selected
        raise KeyError(extra_id)

    async def reserve(
        self,
        client: User | None,
        payments: PreferenceCreator,
        *,
        base_url: str,
        currency_id: str = "MXN",
        sandbox: bool = True,
    ) -> str | None:
        """Checkout URL to redirect to, or None when the attempt did not get that far."""
        if self._state in (BookingAttemptState.SUBMITTING, BookingAttemptState.REDIRECTING):
            return None
        try:
            request = build_booking_request(
                self.venue,
                self.selected_date,
                self.guest_count,
                self.total,
                self.extras,
                client,
                base_url=base_url,
                currency_id=currency_id,
            )
        except (BookingValidationError, AuthenticationRequired) as e:
            self._notify.warning(e.message, title=e.title)
            return None

        self._state = BookingAttemptState.SUBMITTING
        try:
            preference = await payments.create_preference(request)
        except ExternalServiceError as e:
            logger.error("Payment preference for venue %s failed: %s", self.venue.id, e.message)
            self._notify.error(e.message, title="Payment error")
            self._state = BookingAttemptState.READY
            return None
        except BaseException:
            self._state = BookingAttemptState.READY
            raise
        self._state = BookingAttemptState.REDIRECTING
        return checkout_url(preference, sandbox)


async def submit_booking(
    payments: PreferenceCreator,
    venue: Venue,
    selected_date: date | None,
    guest_count: int,
    extra_ids: Iterable[str],
    client: User | None,
    *,
    base_url: str,
    currency_id: str = "MXN",
    sandbox: bool = True,
    default_rate: Number = DEFAULT_PRICE_PER_PERSON,
    extras_catalog: list[ServiceExtra] | None = None,
) -> dict[str, Any]:
    """
    Server-side checkout: recompute the total from the venue's own terms (never trust
    a client-sent total), then create the payment preference.
    Returns {preference_id, checkout_url, total}.
    """
    _check_submission(selected_date, client)
    terms = venue_pricing_terms(venue, default_rate)
    if not terms.min_capacity <= guest_count <= terms.max_capacity:
        raise BookingValidationError(
            f"Guest count must be between {terms.min_capacity} and {terms.max_capacity}",
            field="guest_count",
        )
    extras = select_extras(extras_catalog if extras_catalog is not None else default_extras_catalog(), extra_ids)
    total = compute_total(terms.base_price, guest_count, terms.min_capacity, terms.price_per_person, extras)
    request = build_booking_request(
        venue, selected_date, guest_count, total, extras, client, base_url=base_url, currency_id=currency_id
    )
    preference = await payments.create_preference(request)
    return {
        "preference_id": preference.id,
        "checkout_url": checkout_url(preference, sandbox),
        "total": total,
    }


# ---------------------------------------------------------------------------
# bookings table
# ---------------------------------------------------------------------------


async def create_booking(
    store: StoreClient,
    client: User,
    venue: Venue,
    event_date: date,
    guest_count: int,
    extras: Iterable[ServiceExtra] = (),
    *,
    special_requests: str | None = None,
    default_rate: Number = DEFAULT_PRICE_PER_PERSON,
) -> Booking:
    """Insert a PENDING booking. Guest count must fit the venue's capacity at this moment."""
    terms = venue_pricing_terms(venue, default_rate)
    if not terms.min_capacity <= guest_count <= terms.max_capacity:
        raise BookingValidationError(
            f"Guest count must be between {terms.min_capacity} and {terms.max_capacity}",
            field="guest_count",
        )
    extras = list(extras)
    extras_price = sum((e.flat_price for e in extras if e.selected), Decimal("0"))
    total = compute_total(terms.base_price, guest_count, terms.min_capacity, terms.price_per_person, extras)
    row = await store.insert(
        TABLE_BOOKINGS,
        {
            "venue_id": venue.id,
            "client_id": client.id,
            "provider_id": venue.provider_id,
            "event_date": event_date.isoformat(),
            "guest_count": guest_count,
            "base_price": float(terms.base_price),
            "extras_price": float(extras_price),
            "total_price": float(total),
            "extras": extras_flags(extras),
            "status": BookingStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "notes": special_requests,
        },
    )
    logger.info("Booking %s created for venue %s on %s", row.get("id"), venue.id, event_date)
    return Booking.from_row(row)


async def list_client_bookings(store: StoreClient, client: User) -> list[Booking]:
    result = await store.select(
        TABLE_BOOKINGS,
        columns=CLIENT_BOOKING_COLUMNS,
        filters=[("client_id", "eq", client.id)],
        order="event_date.desc",
    )
    return [Booking.from_row(row) for row in result.rows]


async def list_provider_bookings(
    store: StoreClient,
    provider: User,
    *,
    status: BookingStatus | None = None,
    search: str | None = None,
) -> list[Booking]:
    """Bookings on the provider's venues, optionally by status and a free-text match on venue or client name."""
    filters: list[tuple[str, str, Any]] = [("provider_id", "eq", provider.id)]
    if status is not None:
        filters.append(("status", "eq", status))
    result = await store.select(
        TABLE_BOOKINGS,
        columns=PROVIDER_BOOKING_COLUMNS,
        filters=filters,
        order="created_at.desc",
    )
    bookings = [Booking.from_row(row) for row in result.rows]
    if search and search.strip():
        needle = search.strip().lower()
        bookings = [
            b for b in bookings
            if needle in (b.venue_name or "").lower() or needle in (b.client_name or "").lower()
        ]
    return bookings


async def get_booking(store: StoreClient, booking_id: str) -> Booking:
    row = await store.select_one(TABLE_BOOKINGS, columns=CLIENT_BOOKING_COLUMNS, filters=[("id", "eq", booking_id)])
    if not row:
        raise NotFoundError("Booking not found", recovery_url="/cliente/reservas")
    return Booking.from_row(row)


async def update_booking_status(
    store: StoreClient,
    provider: User,
    booking_id: str,
    status: BookingStatus,
) -> Booking:
    """Provider moves a booking along ALLOWED_STATUS_TRANSITIONS. No version check: last write wins."""
    booking = await get_booking(store, booking_id)
    if booking.provider_id != provider.id:
        raise PermissionDenied("This booking belongs to another provider")
    if status not in ALLOWED_STATUS_TRANSITIONS[booking.status]:
        raise BookingValidationError(
            f"Cannot change a {booking.status.value} booking to {status.value}",
            field="status",
        )
    patch: dict[str, Any] = {"status": status.value}
    confirmed_at = booking.confirmed_at
    if status is BookingStatus.CONFIRMED:
        confirmed_at = datetime.now(timezone.utc)
        patch["confirmed_at"] = confirmed_at.isoformat()
    await store.update(TABLE_BOOKINGS, patch, filters=[("id", "eq", booking_id)])
    logger.info("Booking %s: %s -> %s", booking_id, booking.status.value, status.value)
    return booking.model_copy(update={"status": status, "confirmed_at": confirmed_at})


async def delete_pending_booking(store: StoreClient, client: User, booking_id: str) -> None:
    """Client withdraws a booking; only their own and only while PENDING."""
    deleted = await store.delete(
        TABLE_BOOKINGS,
        filters=[
            ("id", "eq", booking_id),
            ("client_id", "eq", client.id),
            ("status", "eq", BookingStatus.PENDING),
        ],
        count=True,
    )
    if not deleted:
        raise NotFoundError("Booking not found or no longer pending", recovery_url="/cliente/reservas")
    logger.info("Booking %s deleted by client %s", booking_id, client.id)
