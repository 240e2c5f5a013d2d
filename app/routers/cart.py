# app/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.context import StorefrontContext
from app.core.auth import get_context
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartSummary

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(ctx: StorefrontContext = Depends(get_context)):
    """
    Get the cart summary. Guests have a cart too.
    """
    return ctx.cart.summary()


@router.post("", response_model=CartSummary)
async def add_to_cart(
    payload: CartItemCreate,
    ctx: StorefrontContext = Depends(get_context),
):
    """
    Add a product variant to the cart.

    The product is re-read from the catalog so the snapshot is current.
    """
    product = await ctx.products.get_product(payload.product_id)
    variant = next((v for v in product.variants if v.id == payload.variant_id), None)
    if variant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Variant not found for this product",
        )

    ctx.cart.add_to_cart(product, variant, payload.quantity, payload.uploaded_file)
    ctx.toasts.success(f"Added {product.name} to cart")
    return ctx.cart.summary()


@router.patch("/{item_id}", response_model=CartSummary)
def update_cart_item(
    item_id: str,
    payload: CartItemUpdate,
    ctx: StorefrontContext = Depends(get_context),
):
    """
    Update quantity of a line item. Values below the minimum order
    quantity are raised to it.
    """
    if ctx.cart.update_quantity(item_id, payload.quantity) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not in cart",
        )
    return ctx.cart.summary()


@router.delete("/{item_id}", response_model=CartSummary)
def remove_cart_item(item_id: str, ctx: StorefrontContext = Depends(get_context)):
    ctx.cart.remove_from_cart(item_id)
    return ctx.cart.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(ctx: StorefrontContext = Depends(get_context)):
    ctx.cart.clear()
    return ctx.cart.summary()
