"""Shared fixtures: settings without a .env, httpx.MockTransport fakes and a payment double."""
import json
from datetime import date, timedelta
from typing import Any, Callable

import httpx
import pytest

from eventspace.config import Settings, load_settings
from eventspace.models.payment import PaymentPreference, PaymentRequest
from eventspace.models.user import User, UserRole
from eventspace.models.venue import Venue
from eventspace.services.auth import AuthClient
from eventspace.services.notifications import NotificationCenter
from eventspace.services.payments import PaymentClient, PaymentConfig
from eventspace.services.store import StoreClient, StoreConfig

STORE_URL = "https://store.test"
APP_URL = "https://app.test"


class FakeService:
    """
    Routes (method, path) to canned responses and records every request.
    First matching route wins; `match` narrows a route by query string or body.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, Callable[[httpx.Request], bool] | None, Callable[[httpx.Request], httpx.Response]]] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        match: Callable[[httpx.Request], bool] | None = None,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json_body, headers=headers)
        self._routes.append((method.upper(), path, match, handler))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, path, match, handler in self._routes:
            if request.method == method and request.url.path == path and (match is None or match(request)):
                return handler(request)
        return httpx.Response(404, json={"message": f"no route for {request.method} {request.url.path}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


def query_pairs(request: httpx.Request) -> list[tuple[str, str]]:
    return list(request.url.params.multi_items())


class FakePayments:
    """Call-counting stand-in for PaymentClient."""

    sandbox = True
    currency_id = "MXN"

    def __init__(self, preference: PaymentPreference | None = None, error: Exception | None = None) -> None:
        self.calls: list[PaymentRequest] = []
        self.preference = preference or PaymentPreference(id="pref-123", sandbox_init_point="https://sandbox.mp.test/pref-123")
        self.error = error

    async def create_preference(self, request: PaymentRequest) -> PaymentPreference:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.preference


@pytest.fixture
def settings() -> Settings:
    return load_settings(
        _env_file=None,
        supabase_url=STORE_URL,
        supabase_anon_key="anon-key",
        mp_public_key="TEST-public",
        mp_access_token="TEST-access",
        app_base_url=APP_URL,
    )


@pytest.fixture
def store_api() -> FakeService:
    return FakeService()


@pytest.fixture
def store(settings: Settings, store_api: FakeService) -> StoreClient:
    return StoreClient(StoreConfig.from_settings(settings), transport=store_api.transport)


@pytest.fixture
def auth_api() -> FakeService:
    return FakeService()


@pytest.fixture
def auth_client(settings: Settings, auth_api: FakeService) -> AuthClient:
    return AuthClient(StoreConfig.from_settings(settings), redirect_base_url=APP_URL, transport=auth_api.transport)


@pytest.fixture
def payment_api() -> FakeService:
    return FakeService()


@pytest.fixture
def payment_client(settings: Settings, payment_api: FakeService) -> PaymentClient:
    return PaymentClient(PaymentConfig.from_settings(settings), transport=payment_api.transport)


@pytest.fixture
def fake_payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


def venue_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": "venue-1",
        "provider_id": "provider-1",
        "name": "Jardin Las Flores",
        "description": "A garden venue for weddings and large celebrations in the south.",
        "category": "JARDIN",
        "address": "Av. Siempre Viva 742",
        "zone": "Coyoacan",
        "price": 15000,
        "price_per_person": 85,
        "min_capacity": 10,
        "max_capacity": 200,
        "images": ["https://img.test/1.jpg", "https://img.test/2.jpg"],
        "amenities": ["Parking"],
        "payment_methods": ["TRANSFERENCIA", "TARJETA"],
        "rules": ["No fireworks"],
        "status": "ACTIVE",
        "rating": 4.8,
        "review_count": 12,
        "views": 40,
        "favorites_count": 3,
        "users": {"name": "Ana Provider"},
    }
    row.update(overrides)
    return row


@pytest.fixture
def venue() -> Venue:
    return Venue.from_row(venue_row())


@pytest.fixture
def client_user() -> User:
    return User(id="client-1", email="maria@example.com", name="Maria Lopez Garcia", role=UserRole.CLIENT)


@pytest.fixture
def provider_user() -> User:
    return User(id="provider-1", email="ana@example.com", name="Ana Provider", role=UserRole.PROVIDER)


@pytest.fixture
def next_week() -> date:
    return date.today() + timedelta(days=7)

