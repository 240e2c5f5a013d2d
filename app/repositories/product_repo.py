# app/repositories/product_repo.py
from typing import Any

from app.core.errors import NotFoundError
from app.repositories.base import SupabaseRepository
from app.schemas.product import (
    Category,
    Product,
    ProductFaq,
    ProductVariant,
    Review,
    SellerSummary,
)

LIST_COLUMNS = """
    id, name, image_url, images, min_order_quantity,
    categories ( name ),
    sellers ( id, logo_url, profiles ( full_name ) ),
    product_variants ( id, name, paper_type, price_per_unit )
"""

DETAIL_COLUMNS = """
    *,
    categories ( name ),
    sellers ( *, profiles ( full_name ) ),
    product_variants ( * ),
    product_faqs ( * ),
    reviews ( *, profiles ( full_name ) )
"""


def _seller_from_row(row: dict[str, Any] | None) -> SellerSummary | None:
    if not row:
        return None
    profile = row.get("profiles") or {}
    return SellerSummary(
        id=str(row["id"]),
        name=profile.get("full_name") or row.get("company_name") or "",
        logo_url=row.get("logo_url"),
    )


def map_product_row(p: dict[str, Any]) -> Product:
    """
    Flatten a products row with its nested joins into a Product view model.
    Joins that were not selected simply come back empty.
    """
    images = p.get("images") or []
    return Product(
        id=str(p["id"]),
        name=p["name"],
        image_url=p.get("image_url") or (images[0] if images else None),
        min_order_quantity=p.get("min_order_quantity") or 1,
        category=(p.get("categories") or {}).get("name"),
        seller=_seller_from_row(p.get("sellers")),
        description=p.get("description") or "",
        images=images,
        variants=[
            ProductVariant(
                id=str(v["id"]),
                name=v.get("name") or "",
                paper_type=v.get("paper_type"),
                price_per_unit=v.get("price_per_unit") or 0,
            )
            for v in p.get("product_variants") or []
        ],
        faqs=[
            ProductFaq(question=f["question"], answer=f["answer"])
            for f in p.get("product_faqs") or []
        ],
        reviews=[
            Review(
                id=str(r["id"]),
                author=(r.get("profiles") or {}).get("full_name") or "",
                rating=r["rating"],
                comment=r.get("comment"),
                created_at=r.get("created_at"),
            )
            for r in p.get("reviews") or []
        ],
    )


class ProductRepository(SupabaseRepository):
    """
    Data access for categories, products and their child tables.
    """

    # ----- Catalog reads -----

    async def list_categories(self) -> list[Category]:
        data = await self._execute(
            self.client.table("categories").select("*").order("name"),
            "list_categories",
        )
        return [
            Category(id=str(c["id"]), name=c["name"], image_url=c.get("image_url"))
            for c in data or []
        ]

    async def list_products(
        self,
        limit: int | None = None,
        search_term: str | None = None,
        categories: list[str] | None = None,
        max_moq: int | None = None,
    ) -> list[Product]:
        """
        Product list view with optional filters.

        Args:
            categories: category ids to include (empty => all)
            max_moq: only products whose minimum order quantity is <= this
        """
        query = self.client.table("products").select(LIST_COLUMNS)
        if search_term:
            query = query.ilike("name", f"%{search_term}%")
        if categories:
            query = query.in_("category_id", categories)
        if max_moq:
            query = query.lte("min_order_quantity", max_moq)
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)

        data = await self._execute(query, "list_products")
        return [map_product_row(p) for p in data or []]

    async def get_product(self, product_id: str) -> Product:
        data = await self._execute(
            self.client.table("products")
            .select(DETAIL_COLUMNS)
            .eq("id", product_id)
            .maybe_single(),
            "get_product",
        )
        if not data:
            raise NotFoundError("get_product", f"Product {product_id} not found")
        return map_product_row(data)

    async def list_products_by_seller(self, seller_id: str) -> list[Product]:
        data = await self._execute(
            self.client.table("products")
            .select("id, name, image_url, images, min_order_quantity, categories ( name )")
            .eq("seller_id", seller_id)
            .order("created_at", desc=True),
            "list_products_by_seller",
        )
        return [map_product_row(p) for p in data or []]

    # ----- Writes -----

    async def insert_product(self, row: dict[str, Any]) -> dict[str, Any]:
        data = await self._execute(
            self.client.table("products").insert(row), "insert_product"
        )
        return data[0]

    async def set_images(self, product_id: str, urls: list[str]) -> None:
        await self._execute(
            self.client.table("products")
            .update({"images": urls, "image_url": urls[0] if urls else None})
            .eq("id", product_id),
            "set_product_images",
        )

    async def insert_variants(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return await self._execute(
            self.client.table("product_variants").insert(rows), "insert_variants"
        )

    async def insert_faqs(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return await self._execute(
            self.client.table("product_faqs").insert(rows), "insert_faqs"
        )

    async def delete_product(self, product_id: str) -> None:
        """Child rows go with it via ON DELETE CASCADE."""
        await self._execute(
            self.client.table("products").delete().eq("id", product_id),
            "delete_product",
        )
