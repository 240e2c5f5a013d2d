# app/services/seller_service.py
import logging

from supabase import AsyncClient

from app.core.errors import DataAccessError, PartialWriteError
from app.core.storage_utils import (
    delete_from_storage,
    upload_to_storage,
    validate_image,
)
from app.repositories.auth_repo import AuthRepository
from app.repositories.seller_repo import SellerRepository
from app.schemas.seller import SellerCreate, SellerRead
from app.services.session_sync import SessionSynchronizer

logger = logging.getLogger(__name__)


class SellerOnboardingService:
    """
    Turn the signed-in user into a seller.

    Steps:
      1. Upload the logo (optional).
      2. Insert the sellers row (id = user id).
      3. Write profiles.role = 'seller' (authoritative).
      4. Reflect the role locally on the session.

    If step 3 fails, the sellers row and logo are removed again.
    """

    def __init__(
        self,
        client: AsyncClient,
        seller_repo: SellerRepository,
        auth_repo: AuthRepository,
        bucket: str,
    ):
        self.client = client
        self.seller_repo = seller_repo
        self.auth_repo = auth_repo
        self.bucket = bucket

    async def create_seller_profile(
        self,
        session: SessionSynchronizer,
        payload: SellerCreate,
        logo: tuple[str, bytes] | None = None,
    ) -> SellerRead:
        if session.profile is None:
            raise PermissionError("Sign in before creating a seller profile")
        user_id = session.profile.id

        logo_path: str | None = None
        logo_url: str | None = None
        if logo is not None:
            content_type, data = logo
            ext = validate_image(content_type, data)
            logo_path = f"{user_id}/logo.{ext}"
            logo_url = await upload_to_storage(
                self.client, self.bucket, logo_path, data, content_type
            )

        try:
            seller = await self.seller_repo.create(
                {"id": user_id, "logo_url": logo_url, **payload.model_dump()}
            )
        except DataAccessError:
            if logo_path:
                await delete_from_storage(self.client, self.bucket, [logo_path])
            raise

        try:
            await self.auth_repo.update_role(user_id, "seller")
        except DataAccessError as e:
            logger.warning("Role update failed for %s, removing seller row", user_id)
            await self.seller_repo.delete(user_id)
            if logo_path:
                await delete_from_storage(self.client, self.bucket, [logo_path])
            raise PartialWriteError(
                "create_seller_profile", f"role update failed: {e.message}"
            ) from e

        session.switch_to_seller()
        return seller
