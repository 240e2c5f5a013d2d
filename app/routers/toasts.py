# app/routers/toasts.py
from fastapi import APIRouter, Depends, status

from app.context import StorefrontContext
from app.core.auth import get_context
from app.schemas.toast import Toast

router = APIRouter(prefix="/toasts", tags=["Toasts"])


@router.get("", response_model=list[Toast])
def list_toasts(ctx: StorefrontContext = Depends(get_context)):
    """Live notifications, oldest first."""
    return ctx.toasts.toasts


@router.delete("/{toast_id}", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_toast(toast_id: int, ctx: StorefrontContext = Depends(get_context)):
    ctx.toasts.dismiss(toast_id)
    return None
