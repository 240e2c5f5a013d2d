# app/services/cart_store.py
import logging

from pydantic import TypeAdapter, ValidationError

from app.core.local_storage import LocalStorage
from app.schemas.cart import CartItem, CartItemRead, CartSummary, UploadedFile
from app.schemas.product import Product, ProductVariant

logger = logging.getLogger(__name__)

# Flat shipping fee and tax rate shown on the cart and checkout pages
SHIPPING_FEE = 50.00
TAX_RATE = 0.08

_cart_adapter = TypeAdapter(list[CartItem])


def make_item_id(product_id: str, variant_id: str) -> str:
    return f"{product_id}-{variant_id}"


class CartStore:
    """
    Client-side shopping cart persisted to local storage.

    Rules:
      - exactly one line item per (product, variant)
      - quantity never below the product's minimum order quantity
      - every mutation is written to storage before returning
    """

    def __init__(self, storage: LocalStorage, storage_key: str = "yazbox-cart"):
        self.storage = storage
        self.storage_key = storage_key
        self._items: list[CartItem] = self._load()

    # ---- persistence ----

    def _load(self) -> list[CartItem]:
        try:
            raw = self.storage.get_item(self.storage_key)
            if not raw:
                return []
            items = _cart_adapter.validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as e:
            logger.warning("Could not parse cart from local storage: %s", e)
            return []
        # Stored lines may predate a raised minimum, or have been edited by hand
        return [
            it
            if it.quantity >= it.product.min_order_quantity
            else it.model_copy(update={"quantity": it.product.min_order_quantity})
            for it in items
        ]

    def _persist(self) -> None:
        self.storage.set_item(
            self.storage_key, _cart_adapter.dump_json(self._items).decode()
        )

    # ---- reads ----

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    @property
    def item_count(self) -> int:
        """Number of distinct line items, not the sum of quantities."""
        return len(self._items)

    def get(self, item_id: str) -> CartItem | None:
        return next((it for it in self._items if it.id == item_id), None)

    def summary(self) -> CartSummary:
        """
        Return full cart summary:
          - line items with unit price and line total
          - subtotal, taxes, flat shipping and total
        Shipping is only charged on a non-empty cart.
        """
        reads: list[CartItemRead] = []
        subtotal = 0.0

        for it in self._items:
            subtotal += it.line_total
            reads.append(
                CartItemRead(
                    id=it.id,
                    product_id=it.product.id,
                    product_name=it.product.name,
                    variant_id=it.selected_variant.id,
                    variant_name=it.selected_variant.name,
                    quantity=it.quantity,
                    min_order_quantity=it.product.min_order_quantity,
                    unit_price=it.selected_variant.price_per_unit,
                    line_total=it.line_total,
                    uploaded_file=it.uploaded_file,
                )
            )

        taxes = round(subtotal * TAX_RATE, 2)
        shipping = SHIPPING_FEE if self._items else 0.0
        return CartSummary(
            items=reads,
            item_count=self.item_count,
            subtotal=subtotal,
            taxes=taxes,
            shipping=shipping,
            total=subtotal + taxes + shipping,
        )

    # ---- mutations ----

    def add_to_cart(
        self,
        product: Product,
        variant: ProductVariant,
        quantity: int,
        uploaded_file: UploadedFile | None = None,
    ) -> CartItem:
        """
        Add a product variant to the cart.

        If the (product, variant) line already exists its quantity is
        increased by `quantity`; otherwise a new line is appended.
        """
        item_id = make_item_id(product.id, variant.id)
        existing = self.get(item_id)

        if existing:
            new_qty = max(product.min_order_quantity, existing.quantity + quantity)
            item = existing.model_copy(update={"quantity": new_qty})
            self._items = [item if it.id == item_id else it for it in self._items]
        else:
            item = CartItem(
                id=item_id,
                product=product,
                selected_variant=variant,
                quantity=max(product.min_order_quantity, quantity),
                uploaded_file=uploaded_file,
            )
            self._items = [*self._items, item]

        self._persist()
        return item

    def remove_from_cart(self, item_id: str) -> None:
        """Remove a line item; unknown ids are a no-op."""
        self._items = [it for it in self._items if it.id != item_id]
        self._persist()

    def update_quantity(self, item_id: str, quantity: int) -> CartItem | None:
        """
        Set the quantity of a line item, clamped up to the product's
        minimum order quantity. Returns the updated item, or None if absent.
        """
        updated: CartItem | None = None
        items: list[CartItem] = []
        for it in self._items:
            if it.id == item_id:
                updated = it.model_copy(
                    update={"quantity": max(it.product.min_order_quantity, quantity)}
                )
                items.append(updated)
            else:
                items.append(it)
        self._items = items
        self._persist()
        return updated

    def clear(self) -> None:
        self._items = []
        self._persist()
