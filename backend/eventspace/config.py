"""
Application settings (Pydantic Settings).

Store, auth and payment credentials have no defaults: a missing value stops the
process at startup instead of failing on the first booking.
"""
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from eventspace.core.errors import ConfigurationError

# .env next to backend/ (parent of eventspace/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # Hosted store + auth: SUPABASE_URL and SUPABASE_ANON_KEY in .env
    supabase_url: str
    supabase_anon_key: str
    # Mercado Pago: MP_PUBLIC_KEY and MP_ACCESS_TOKEN in .env
    mp_public_key: str
    mp_access_token: str
    mp_sandbox: bool = True
    mp_currency_id: str = "MXN"

    app_base_url: str = "http://localhost:5173"
    cors_origins: str = ""
    payment_timeout_seconds: float = 30.0
    store_timeout_seconds: float = 20.0
    default_price_per_person: int = 85
    notification_duration_ms: int = 4000
    log_level: str = "INFO"

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("supabase_url", "supabase_anon_key", "mp_public_key", "mp_access_token", mode="after")
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("supabase_url", "app_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def extra_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def load_settings(**overrides) -> Settings:
    """Build Settings, turning a validation failure into ConfigurationError naming the bad variables."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        names = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
        raise ConfigurationError(
            f"Missing or invalid environment configuration: {', '.join(names)}",
            missing=names,
        ) from e


@lru_cache
def get_settings() -> Settings:
    return load_settings()
