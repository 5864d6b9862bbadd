"""Mercado Pago config. Credentials from Settings (MP_PUBLIC_KEY, MP_ACCESS_TOKEN) or PaymentConfig args."""
from eventspace.config import Settings
from eventspace.core.constants import MP_API_BASE_URL


class PaymentConfig:
    """Checkout Pro credentials, environment and request timeout."""

    __slots__ = ("public_key", "access_token", "sandbox", "currency_id", "timeout", "base_url")

    def __init__(
        self,
        *,
        public_key: str,
        access_token: str,
        sandbox: bool = True,
        currency_id: str = "MXN",
        timeout: float = 30.0,
        base_url: str = MP_API_BASE_URL,
    ) -> None:
        self.public_key = public_key.strip()
        self.access_token = access_token.strip()
        self.sandbox = sandbox
        self.currency_id = currency_id
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentConfig":
        return cls(
            public_key=settings.mp_public_key,
            access_token=settings.mp_access_token,
            sandbox=settings.mp_sandbox,
            currency_id=settings.mp_currency_id,
            timeout=settings.payment_timeout_seconds,
        )

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
