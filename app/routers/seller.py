# app/routers/seller.py
import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError

from app.context import StorefrontContext
from app.core.auth import get_context, require_auth
from app.schemas.seller import SellerCreate, SellerRead

router = APIRouter(prefix="/seller", tags=["Seller"])


@router.post(
    "/onboarding",
    response_model=SellerRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_auth)],
)
async def complete_onboarding(
    payload: str = Form(..., description="SellerCreate as JSON"),
    logo: UploadFile | None = File(default=None),
    ctx: StorefrontContext = Depends(get_context),
):
    """
    Create the seller profile and switch the account to the seller role.
    """
    try:
        data = SellerCreate.model_validate(json.loads(payload))
    except (ValueError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    logo_file: tuple[str, bytes] | None = None
    if logo is not None:
        if not logo.content_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing content-type for uploaded logo",
            )
        logo_file = (logo.content_type, await logo.read())

    try:
        seller = await ctx.onboarding.create_seller_profile(ctx.session, data, logo_file)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    ctx.toasts.success("Your seller profile has been created!")
    return seller
