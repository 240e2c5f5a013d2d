# app/schemas/cart.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from app.schemas.product import Product, ProductVariant


class UploadedFile(SQLModel):
    """Descriptor of the artwork a buyer attached to a line item."""

    name: str


class CartItem(SQLModel):
    """
    One line item, keyed by "<product id>-<variant id>".

    product and selected_variant are snapshots taken at add-to-cart time.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    product: Product
    selected_variant: ProductVariant
    quantity: int = Field(ge=1)
    uploaded_file: UploadedFile | None = None

    @property
    def line_total(self) -> float:
        return self.quantity * self.selected_variant.price_per_unit


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    The product and variant are resolved server-side from their ids
    so the snapshot is never client-supplied.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str
    variant_id: str
    quantity: int = Field(gt=0)
    uploaded_file: UploadedFile | None = None


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    Values below the product's minimum order quantity are clamped.
    """

    quantity: int


class CartItemRead(SQLModel):
    id: str
    product_id: str
    product_name: str
    variant_id: str
    variant_name: str
    quantity: int
    min_order_quantity: int
    unit_price: float
    line_total: float
    uploaded_file: UploadedFile | None = None


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    item_count: int
    subtotal: float
    taxes: float
    shipping: float
    total: float
