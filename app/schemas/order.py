# app/schemas/order.py
from typing import Any, Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["Pending", "In Production", "Shipped", "Delivered", "Cancelled"]


class ShippingAddress(SQLModel):
    """
    Stored as JSONB on the orders row.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str
    address: str
    city: str
    postal_code: str
    country: str
    phone_number: str | None = None

    @field_validator("full_name", "address", "city", "postal_code", "country")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    def one_line(self) -> str:
        return f"{self.address}, {self.city} {self.postal_code}, {self.country}"


class CheckoutRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    shipping_address: ShippingAddress


class OrderItemRead(SQLModel):
    id: str
    product_id: str
    variant_id: str
    product_name: str = ""
    image_url: str | None = None
    quantity: int
    unit_price: float
    artwork_url: str | None = None
    line_total: float


class StatusHistoryEntry(SQLModel):
    status: OrderStatus
    date: str


class OrderRead(SQLModel):
    """
    Flat order view model used by the orders list and detail pages.
    """

    id: str
    date: str
    status: OrderStatus
    total: float
    shipping_address: str
    items: list[OrderItemRead] = Field(default_factory=list)
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)


def format_shipping_address(raw: Any) -> str:
    """
    Render the JSONB shipping_address column for display.
    Older rows store a bare {"address": "..."} object.
    """
    if isinstance(raw, dict):
        try:
            return ShippingAddress.model_validate(raw).one_line()
        except ValueError:
            return raw.get("address") or "N/A"
    if isinstance(raw, str) and raw:
        return raw
    return "N/A"
