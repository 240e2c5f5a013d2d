# app/repositories/seller_repo.py
from typing import Any

from app.repositories.base import SupabaseRepository
from app.schemas.seller import SellerRead


class SellerRepository(SupabaseRepository):

    async def get_by_id(self, seller_id: str) -> SellerRead | None:
        data = await self._execute(
            self.client.table("sellers").select("*").eq("id", seller_id).maybe_single(),
            "get_seller",
        )
        return SellerRead.model_validate(data) if data else None

    async def create(self, row: dict[str, Any]) -> SellerRead:
        data = await self._execute(self.client.table("sellers").insert(row), "create_seller")
        return SellerRead.model_validate(data[0])

    async def delete(self, seller_id: str) -> None:
        await self._execute(
            self.client.table("sellers").delete().eq("id", seller_id), "delete_seller"
        )
