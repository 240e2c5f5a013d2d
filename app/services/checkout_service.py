# app/services/checkout_service.py
import logging

from app.core.errors import DataAccessError, PartialWriteError
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderRead, ShippingAddress
from app.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Convert the local cart into an order.

    Steps:
      1. Refuse an empty cart.
      2. Insert the orders row with the cart total (status 'Pending').
      3. Insert one order_items row per line item.
      4. Clear the cart.

    If step 3 fails the order row is deleted and the cart is kept.
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def place_order(
        self,
        user_id: str,
        cart: CartStore,
        shipping_address: ShippingAddress,
    ) -> OrderRead:
        items = cart.items
        if not items:
            raise ValueError("Cart is empty")

        summary = cart.summary()
        order = await self.order_repo.create_order(
            {
                "user_id": user_id,
                "total": summary.total,
                "status": "Pending",
                "shipping_address": shipping_address.model_dump(),
            }
        )
        order_id = str(order["id"])

        try:
            await self.order_repo.create_items(
                [
                    {
                        "order_id": order_id,
                        "product_id": it.product.id,
                        "variant_id": it.selected_variant.id,
                        "quantity": it.quantity,
                        "unit_price": it.selected_variant.price_per_unit,
                        "artwork_url": it.uploaded_file.name if it.uploaded_file else None,
                    }
                    for it in items
                ]
            )
        except DataAccessError as e:
            logger.warning("Order items failed for order %s, deleting order", order_id)
            await self.order_repo.delete_order(order_id)
            raise PartialWriteError(
                "place_order", f"order items failed, order discarded: {e.message}"
            ) from e

        cart.clear()
        return await self.order_repo.get_by_id(order_id)
