"""Payment preference request/response shapes (Mercado Pago Checkout Pro)."""
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class PaymentItem(BaseModel):
    id: str
    title: str
    description: str
    picture_url: str | None = None
    quantity: int = 1
    currency_id: str
    unit_price: Decimal


class Payer(BaseModel):
    name: str
    surname: str = ""
    email: str


class BackUrls(BaseModel):
    success: str
    failure: str
    pending: str


class PaymentRequest(BaseModel):
    items: list[PaymentItem]
    payer: Payer
    back_urls: BackUrls
    auto_return: str
    statement_descriptor: str
    external_reference: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for POST /checkout/preferences (decimals as floats)."""
        return self.model_dump(mode="json", exclude_none=True) | {
            "items": [
                item.model_dump(mode="json", exclude_none=True) | {"unit_price": float(item.unit_price)}
                for item in self.items
            ]
        }


class PaymentPreference(BaseModel):
    id: str
    init_point: str | None = None
    sandbox_init_point: str | None = None
