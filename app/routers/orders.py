# app/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.context import StorefrontContext
from app.core.auth import get_context, require_auth
from app.schemas.order import CheckoutRequest, OrderRead
from app.schemas.profile import Profile

router = APIRouter(tags=["Orders"])


@router.post(
    "/checkout",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
)
async def checkout(
    payload: CheckoutRequest,
    ctx: StorefrontContext = Depends(get_context),
    profile: Profile = Depends(require_auth),
):
    """
    Place an order for everything in the cart, then empty the cart.
    """
    try:
        order = await ctx.checkout.place_order(
            profile.id, ctx.cart, payload.shipping_address
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    ctx.toasts.success(f"Order #{order.id} placed")
    return order


@router.get("/orders", response_model=list[OrderRead])
async def list_my_orders(
    ctx: StorefrontContext = Depends(get_context),
    profile: Profile = Depends(require_auth),
):
    return await ctx.orders.list_for_user(profile.id)


@router.get("/orders/{order_id}", response_model=OrderRead)
async def get_my_order(
    order_id: str,
    ctx: StorefrontContext = Depends(get_context),
    profile: Profile = Depends(require_auth),
):
    """
    Order detail with items and status history.
    Row-level security keeps other users' orders out of reach.
    """
    return await ctx.orders.get_by_id(order_id)
