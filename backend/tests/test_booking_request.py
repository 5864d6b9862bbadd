from datetime import date
from decimal import Decimal

import pytest

from conftest import FakePayments
from eventspace.core.errors import (
    AuthenticationRequired,
    BookingValidationError,
    ExternalServiceError,
    PaymentTimeout,
)
from eventspace.services.booking_service import (
    BookingAttempt,
    BookingAttemptState,
    build_booking_request,
    long_date,
    submit_booking,
)
from eventspace.services.notifications import NotificationType
from eventspace.services.payments import PaymentClient, PaymentConfig
from eventspace.services.pricing import default_extras_catalog, select_extras

EVENT_DAY = date(2026, 6, 13)


def test_missing_date_is_rejected_before_auth(venue):
    with pytest.raises(BookingValidationError) as exc:
        build_booking_request(venue, None, 30, 16700, [], None, base_url="https://app.test")
    assert exc.value.message == "date required"


def test_signed_out_client_is_rejected(venue):
    with pytest.raises(AuthenticationRequired) as exc:
        build_booking_request(venue, EVENT_DAY, 30, 16700, [], None, base_url="https://app.test")
    assert exc.value.message == "authentication required"


def test_request_carries_item_payer_and_return_urls(venue, client_user):
    extras = select_extras(default_extras_catalog(), ["security"])
    request = build_booking_request(
        venue, EVENT_DAY, 30, Decimal("19200"), extras, client_user, base_url="https://app.test/", currency_id="MXN"
    )

    (item,) = request.items
    assert item.id == "venue-1"
    assert "Jardin Las Flores" in item.title and "2026-06-13" in item.title
    assert "30 guests" in item.description and long_date(EVENT_DAY) in item.description
    assert item.quantity == 1
    assert item.unit_price == Decimal("19200")
    assert item.currency_id == "MXN"
    assert item.picture_url == "https://img.test/1.jpg"
    assert (request.payer.name, request.payer.surname) == ("Maria", "Lopez Garcia")
    assert request.payer.email == "maria@example.com"
    assert request.back_urls.success == "https://app.test/reserva/confirmada"
    assert request.back_urls.failure == "https://app.test/reserva/fallida"
    assert request.back_urls.pending == "https://app.test/reserva/pendiente"
    assert request.auto_return == "approved"
    assert request.external_reference.startswith("booking_venue-1_")
    assert request.metadata["extras"] == {"security": True, "cleaning": False}


def test_payload_sends_unit_price_as_number(venue, client_user):
    request = build_booking_request(venue, EVENT_DAY, 10, Decimal("15000"), [], client_user, base_url="https://app.test")
    payload = request.to_payload()
    assert payload["items"][0]["unit_price"] == 15000.0
    assert payload["payer"]["email"] == "maria@example.com"


def test_long_date():
    assert long_date(EVENT_DAY) == "Saturday, June 13, 2026"


async def test_submit_without_date_makes_no_payment_call(venue, client_user, fake_payments):
    with pytest.raises(BookingValidationError):
        await submit_booking(fake_payments, venue, None, 30, [], client_user, base_url="https://app.test")
    assert fake_payments.calls == []


async def test_submit_signed_out_makes_no_payment_call(venue, fake_payments):
    with pytest.raises(AuthenticationRequired):
        await submit_booking(fake_payments, venue, EVENT_DAY, 30, [], None, base_url="https://app.test")
    assert fake_payments.calls == []


async def test_submit_recomputes_total(venue, client_user, fake_payments):
    result = await submit_booking(
        fake_payments, venue, EVENT_DAY, 30, ["security", "cleaning"], client_user, base_url="https://app.test"
    )
    assert result["total"] == Decimal("21000")
    assert result["preference_id"] == "pref-123"
    assert result["checkout_url"] == "https://sandbox.mp.test/pref-123"
    assert fake_payments.calls[0].items[0].unit_price == Decimal("21000")


async def test_submit_rejects_guests_over_capacity(venue, client_user, fake_payments):
    with pytest.raises(BookingValidationError) as exc:
        await submit_booking(fake_payments, venue, EVENT_DAY, 500, [], client_user, base_url="https://app.test")
    assert exc.value.field == "guest_count"
    assert fake_payments.calls == []


# --- BookingAttempt ---


def test_attempt_starts_idle_and_becomes_ready_on_date(venue, notifications):
    attempt = BookingAttempt(venue, notifications)
    assert attempt.state is BookingAttemptState.IDLE
    attempt.select_date(EVENT_DAY)
    assert attempt.state is BookingAttemptState.READY


def test_attempt_clamps_guests_and_recomputes_total(venue, notifications):
    attempt = BookingAttempt(venue, notifications)
    assert attempt.set_guest_count(1000) == 200
    assert attempt.set_guest_count(3) == 10
    assert attempt.total == Decimal("15000")
    attempt.set_guest_count(30)
    assert attempt.toggle_extra("security") is True
    assert attempt.total == Decimal("19200")
    assert attempt.toggle_extra("security") is False
    assert attempt.total == Decimal("16700")


async def test_reserve_without_date_warns_and_keeps_state(venue, client_user, notifications, fake_payments):
    attempt = BookingAttempt(venue, notifications)
    assert await attempt.reserve(client_user, fake_payments, base_url="https://app.test") is None
    assert attempt.state is BookingAttemptState.IDLE
    assert notifications.current().type is NotificationType.WARNING
    assert notifications.current().message == "date required"
    assert fake_payments.calls == []


async def test_reserve_signed_out_warns_and_stays_ready(venue, notifications, fake_payments):
    attempt = BookingAttempt(venue, notifications)
    attempt.select_date(EVENT_DAY)
    assert await attempt.reserve(None, fake_payments, base_url="https://app.test") is None
    assert attempt.state is BookingAttemptState.READY
    assert notifications.current().message == "authentication required"
    assert fake_payments.calls == []


async def test_reserve_success_redirects(venue, client_user, notifications, fake_payments):
    attempt = BookingAttempt(venue, notifications)
    attempt.select_date(EVENT_DAY)
    url = await attempt.reserve(client_user, fake_payments, base_url="https://app.test")
    assert url == "https://sandbox.mp.test/pref-123"
    assert attempt.state is BookingAttemptState.REDIRECTING
    assert len(fake_payments.calls) == 1
    # terminal: a second click does nothing
    assert await attempt.reserve(client_user, fake_payments, base_url="https://app.test") is None
    assert len(fake_payments.calls) == 1


@pytest.mark.parametrize(
    "error, message",
    [
        (ExternalServiceError("invalid unit_price", service="payments", status_code=400), "invalid unit_price"),
        (PaymentTimeout(), "Payment service did not respond in time"),
    ],
)
async def test_reserve_failure_returns_to_ready(venue, client_user, notifications, error, message):
    payments = FakePayments(error=error)
    attempt = BookingAttempt(venue, notifications)
    attempt.select_date(EVENT_DAY)

    assert await attempt.reserve(client_user, payments, base_url="https://app.test") is None
    assert attempt.state is BookingAttemptState.READY
    assert notifications.current().type is NotificationType.ERROR
    assert notifications.current().message == message

    # resubmission allowed
    payments.error = None
    assert await attempt.reserve(client_user, payments, base_url="https://app.test") is not None
    assert len(payments.calls) == 2


async def test_reserve_with_unreadable_preference_returns_to_ready(
    venue, client_user, notifications, settings, payment_api
):
    payment_api.add("POST", "/checkout/preferences", status=201, json_body={"init_point": "https://mp.test/live"})
    payments = PaymentClient(PaymentConfig.from_settings(settings), transport=payment_api.transport)
    attempt = BookingAttempt(venue, notifications)
    attempt.select_date(EVENT_DAY)

    assert await attempt.reserve(client_user, payments, base_url="https://app.test") is None
    assert attempt.state is BookingAttemptState.READY
    assert notifications.current().message == "Could not create the payment preference"


async def test_reserve_unexpected_error_returns_to_ready(venue, client_user, notifications):
    payments = FakePayments(error=RuntimeError("payment double broke"))
    attempt = BookingAttempt(venue, notifications)
    attempt.select_date(EVENT_DAY)

    with pytest.raises(RuntimeError):
        await attempt.reserve(client_user, payments, base_url="https://app.test")
    assert attempt.state is BookingAttemptState.READY
