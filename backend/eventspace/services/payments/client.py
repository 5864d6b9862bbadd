"""Mercado Pago client: creates a checkout preference in one POST. No retry."""
import logging
from typing import Any, Protocol

import httpx

from eventspace.core.constants import MP_CHECKOUT_URL, MP_PREFERENCES_PATH, MP_SANDBOX_CHECKOUT_URL
from eventspace.core.errors import ExternalServiceError, PaymentTimeout
from eventspace.models.payment import PaymentPreference, PaymentRequest
from eventspace.services.payments.config import PaymentConfig

logger = logging.getLogger(__name__)

MSG_PREFERENCE_FAILED = "Could not create the payment preference"


class PreferenceCreator(Protocol):
    """Anything that turns a PaymentRequest into a PaymentPreference (the client, or a test double)."""

    async def create_preference(self, request: PaymentRequest) -> PaymentPreference:
        ...


def _error_message(r: httpx.Response) -> str:
    try:
        body: Any = r.json()
    except ValueError:
        return MSG_PREFERENCE_FAILED
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return MSG_PREFERENCE_FAILED


def checkout_url(preference: PaymentPreference, sandbox: bool = True) -> str:
    """Redirect URL for the payer: the preference's init point, else the pref_id redirect."""
    if sandbox:
        return preference.sandbox_init_point or MP_SANDBOX_CHECKOUT_URL.format(pref_id=preference.id)
    return preference.init_point or MP_CHECKOUT_URL.format(pref_id=preference.id)


class PaymentClient:
    """Checkout Pro preferences."""

    def __init__(self, config: PaymentConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    @property
    def sandbox(self) -> bool:
        return self._config.sandbox

    @property
    def currency_id(self) -> str:
        return self._config.currency_id

    async def create_preference(self, request: PaymentRequest) -> PaymentPreference:
        """
        POST the preference. Expiry of the timeout raises PaymentTimeout; a rejected request
        raises ExternalServiceError with the service's own message.
        """
        url = f"{self._config.base_url}{MP_PREFERENCES_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport) as c:
                r = await c.post(url, json=request.to_payload(), headers=self._config.headers())
        except httpx.TimeoutException as e:
            logger.warning("Payment preference timed out after %ss", self._config.timeout)
            raise PaymentTimeout() from e
        except httpx.HTTPError as e:
            logger.warning("Payment preference request failed: %s", e)
            raise ExternalServiceError(str(e) or MSG_PREFERENCE_FAILED, service="payments") from e
        if not r.is_success:
            message = _error_message(r)
            logger.error("Error creating preference (%s): %s", r.status_code, message)
            raise ExternalServiceError(message, service="payments", status_code=r.status_code)
        try:
            data = r.json()
            preference = PaymentPreference(
                id=str(data["id"]),
                init_point=data.get("init_point"),
                sandbox_init_point=data.get("sandbox_init_point"),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Unreadable preference response (%s): %s", r.status_code, r.text[:200])
            raise ExternalServiceError(MSG_PREFERENCE_FAILED, service="payments", status_code=r.status_code) from e
        logger.info("Payment preference created: %s (%s)", preference.id, request.external_reference)
        return preference
