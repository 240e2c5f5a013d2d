# app/repositories/order_repo.py
from typing import Any

from app.core.errors import NotFoundError
from app.repositories.base import SupabaseRepository
from app.schemas.order import (
    OrderItemRead,
    OrderRead,
    StatusHistoryEntry,
    format_shipping_address,
)

ORDER_DETAIL_COLUMNS = """
    *,
    order_items ( *, products ( name, images ) )
"""


def _map_item(it: dict[str, Any]) -> OrderItemRead:
    product = it.get("products") or {}
    images = product.get("images") or []
    return OrderItemRead(
        id=str(it["id"]),
        product_id=str(it["product_id"]),
        variant_id=str(it["variant_id"]),
        product_name=product.get("name") or "",
        image_url=images[0] if images else None,
        quantity=it["quantity"],
        unit_price=it["unit_price"],
        artwork_url=it.get("artwork_url"),
        line_total=it["quantity"] * it["unit_price"],
    )


def map_order_row(o: dict[str, Any]) -> OrderRead:
    history = o.get("status_history") or [
        {"status": "Pending", "date": o["created_at"]}
    ]
    return OrderRead(
        id=str(o["id"]),
        date=o["created_at"],
        status=o["status"],
        total=o["total"],
        shipping_address=format_shipping_address(o.get("shipping_address")),
        items=[_map_item(it) for it in o.get("order_items") or []],
        status_history=[StatusHistoryEntry(**h) for h in history],
    )


class OrderRepository(SupabaseRepository):
    """
    Data access for orders and order_items.
    """

    async def list_for_user(self, user_id: str) -> list[OrderRead]:
        data = await self._execute(
            self.client.table("orders")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "list_orders",
        )
        return [map_order_row(o) for o in data or []]

    async def get_by_id(self, order_id: str) -> OrderRead:
        data = await self._execute(
            self.client.table("orders")
            .select(ORDER_DETAIL_COLUMNS)
            .eq("id", order_id)
            .maybe_single(),
            "get_order",
        )
        if not data:
            raise NotFoundError("get_order", f"Order {order_id} not found")
        return map_order_row(data)

    async def create_order(self, row: dict[str, Any]) -> dict[str, Any]:
        data = await self._execute(self.client.table("orders").insert(row), "create_order")
        return data[0]

    async def create_items(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return await self._execute(
            self.client.table("order_items").insert(rows), "create_order_items"
        )

    async def delete_order(self, order_id: str) -> None:
        await self._execute(
            self.client.table("orders").delete().eq("id", order_id), "delete_order"
        )
