"""Hosted record store config. Credentials from Settings (SUPABASE_URL, SUPABASE_ANON_KEY) or StoreConfig args."""
from eventspace.config import Settings

REST_PATH = "/rest/v1"


class StoreConfig:
    """Project URL, anon key and request timeout for the hosted store."""

    __slots__ = ("base_url", "anon_key", "timeout")

    def __init__(self, *, base_url: str, anon_key: str, timeout: float = 20.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key.strip()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreConfig":
        return cls(
            base_url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            timeout=settings.store_timeout_seconds,
        )

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}{REST_PATH}"

    def headers(self, access_token: str | None = None) -> dict[str, str]:
        """Row-level access rules apply to the bearer: the user's token when given, else the anon key."""
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
