# app/services/catalog_service.py
import logging
from typing import Iterable

from supabase import AsyncClient

from app.core.errors import DataAccessError, PartialWriteError
from app.core.storage_utils import (
    delete_from_storage,
    generate_filename,
    upload_to_storage,
    validate_image,
)
from app.repositories.product_repo import ProductRepository
from app.schemas.product import Product, ProductCreate

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Business logic for publishing products.

    Responsibilities:
      - validate images before touching the backend
      - orchestrate product row + image upload + variants + faqs
      - compensate on partial failure: remove uploaded objects and
        delete the product row, then raise PartialWriteError
    """

    def __init__(self, client: AsyncClient, repo: ProductRepository, bucket: str):
        self.client = client
        self.repo = repo
        self.bucket = bucket

    async def create_product(
        self,
        seller_id: str,
        payload: ProductCreate,
        images: Iterable[tuple[str, bytes]] = (),
    ) -> Product:
        """
        Create a product with its images, variants and FAQs.

        Args:
            images: iterable of (content_type, file_bytes)

        Raises:
            ValueError: an image failed validation (nothing was written).
            DataAccessError: the product row itself could not be created.
            PartialWriteError: a later step failed; the product was removed.
        """
        files = [(ct, data, validate_image(ct, data)) for ct, data in images]

        row = await self.repo.insert_product(
            {
                "seller_id": seller_id,
                "category_id": payload.category_id,
                "name": payload.name,
                "description": payload.description,
                "min_order_quantity": payload.min_order_quantity,
                "images": [],
            }
        )
        product_id = str(row["id"])
        uploaded: list[str] = []

        try:
            urls: list[str] = []
            for content_type, data, ext in files:
                path = f"products/{product_id}/{generate_filename(ext)}"
                urls.append(
                    await upload_to_storage(self.client, self.bucket, path, data, content_type)
                )
                uploaded.append(path)
            if urls:
                await self.repo.set_images(product_id, urls)

            await self.repo.insert_variants(
                [
                    {"product_id": product_id, **v.model_dump()}
                    for v in payload.variants
                ]
            )
            if payload.faqs:
                await self.repo.insert_faqs(
                    [{"product_id": product_id, **f.model_dump()} for f in payload.faqs]
                )
        except DataAccessError as e:
            await self._compensate(product_id, uploaded)
            raise PartialWriteError(
                "create_product", f"{e.operation} failed, product discarded: {e.message}"
            ) from e

        return await self.repo.get_product(product_id)

    async def _compensate(self, product_id: str, uploaded: list[str]) -> None:
        logger.warning(
            "Rolling back product %s (%d uploaded images)", product_id, len(uploaded)
        )
        try:
            await delete_from_storage(self.client, self.bucket, uploaded)
        except DataAccessError as e:
            logger.error("Could not remove images of product %s: %s", product_id, e)
        try:
            await self.repo.delete_product(product_id)
        except DataAccessError as e:
            logger.error("Could not delete product %s: %s", product_id, e)
