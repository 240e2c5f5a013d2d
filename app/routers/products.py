# app/routers/products.py
import json

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from pydantic import ValidationError

from app.context import StorefrontContext
from app.core.auth import get_context, require_seller
from app.schemas.product import Category, Product, ProductCreate
from app.schemas.profile import Profile

router = APIRouter(tags=["Products"])


# -------- Public endpoints --------


@router.get("/categories", response_model=list[Category])
async def list_categories(ctx: StorefrontContext = Depends(get_context)):
    return await ctx.products.list_categories()


@router.get("/products", response_model=list[Product])
async def list_products(
    ctx: StorefrontContext = Depends(get_context),
    limit: int | None = Query(default=None, ge=1, le=200),
    search: str | None = None,
    category: list[str] | None = Query(default=None),
    max_moq: int | None = Query(default=None, ge=1),
):
    """
    Browse products.

    - `search` matches product names (case-insensitive).
    - `category` may be repeated to filter by several category ids.
    - `max_moq` hides products whose minimum order quantity is larger.
    """
    return await ctx.products.list_products(
        limit=limit, search_term=search, categories=category, max_moq=max_moq
    )


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: str, ctx: StorefrontContext = Depends(get_context)):
    return await ctx.products.get_product(product_id)


@router.get("/sellers/{seller_id}/products", response_model=list[Product])
async def list_seller_products(
    seller_id: str, ctx: StorefrontContext = Depends(get_context)
):
    return await ctx.products.list_products_by_seller(seller_id)


# -------- Seller endpoints --------


@router.post(
    "/products",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: str = Form(..., description="ProductCreate as JSON"),
    images: list[UploadFile] = File(default=[]),
    ctx: StorefrontContext = Depends(get_context),
    seller: Profile = Depends(require_seller),
):
    """
    Publish a product with its images, variants and FAQs (sellers only).

    - Accepts JPEG, PNG, WEBP, SVG images (max 5MB each).
    - If any step after the product row fails, the product is removed.
    """
    try:
        data = ProductCreate.model_validate(json.loads(payload))
    except (ValueError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    files: list[tuple[str, bytes]] = []
    for f in images:
        if not f.content_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing content-type for one of the uploaded files",
            )
        files.append((f.content_type, await f.read()))

    try:
        product = await ctx.catalog.create_product(seller.id, data, files)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    ctx.toasts.success(f"'{product.name}' is now live")
    return product
