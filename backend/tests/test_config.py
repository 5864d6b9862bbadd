import pytest

from eventspace.core.errors import (
    AuthenticationRequired,
    BookingValidationError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    PaymentTimeout,
    PermissionDenied,
    error_to_http,
    status_for,
)
from eventspace.config import load_settings

REQUIRED = ("SUPABASE_URL", "SUPABASE_ANON_KEY", "MP_PUBLIC_KEY", "MP_ACCESS_TOKEN")


@pytest.fixture
def clean_env(monkeypatch):
    for name in REQUIRED:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_credentials_fail_fast(clean_env):
    with pytest.raises(ConfigurationError) as exc:
        load_settings(_env_file=None)
    assert sorted(exc.value.missing) == sorted(REQUIRED)
    assert "SUPABASE_URL" in exc.value.message


def test_blank_credential_counts_as_missing(clean_env):
    with pytest.raises(ConfigurationError) as exc:
        load_settings(
            _env_file=None,
            supabase_url="https://store.test",
            supabase_anon_key="anon",
            mp_public_key="pk",
            mp_access_token="   ",
        )
    assert exc.value.missing == ["MP_ACCESS_TOKEN"]


def test_reads_environment_and_strips(clean_env):
    clean_env.setenv("SUPABASE_URL", " https://store.test/ ")
    clean_env.setenv("SUPABASE_ANON_KEY", " anon ")
    clean_env.setenv("MP_PUBLIC_KEY", "pk")
    clean_env.setenv("MP_ACCESS_TOKEN", "tok")
    clean_env.setenv("MP_SANDBOX", "false")
    clean_env.setenv("CORS_ORIGINS", "https://eventspace.test, ,https://admin.eventspace.test")

    settings = load_settings(_env_file=None)

    assert settings.supabase_url == "https://store.test"
    assert settings.supabase_anon_key == "anon"
    assert settings.mp_sandbox is False
    assert settings.payment_timeout_seconds == 30.0
    assert settings.default_price_per_person == 85
    assert settings.extra_cors_origins() == ["https://eventspace.test", "https://admin.eventspace.test"]


@pytest.mark.parametrize(
    "exc, status",
    [
        (BookingValidationError("date required", field="event_date"), 422),
        (AuthenticationRequired(), 401),
        (PermissionDenied("no"), 403),
        (NotFoundError("Venue not found"), 404),
        (PaymentTimeout(), 504),
        (ExternalServiceError("down", service="store"), 502),
        (RuntimeError("bug"), 500),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status


def test_error_to_http_body():
    http = error_to_http(BookingValidationError("date required", field="event_date"))
    assert http.status_code == 422
    assert http.detail == {"title": "Validation error", "message": "date required", "field": "event_date"}
