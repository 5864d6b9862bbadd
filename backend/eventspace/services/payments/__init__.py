"""Payment preference creation and checkout redirect (Mercado Pago Checkout Pro)."""
from eventspace.services.payments.client import PaymentClient, PreferenceCreator, checkout_url
from eventspace.services.payments.config import PaymentConfig

__all__ = [
    "PaymentClient",
    "PaymentConfig",
    "PreferenceCreator",
    "checkout_url",
]
