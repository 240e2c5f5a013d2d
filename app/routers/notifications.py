# app/routers/notifications.py
from fastapi import APIRouter, Depends, status

from app.context import StorefrontContext
from app.core.auth import get_context, require_auth
from app.schemas.notification import NotificationRead
from app.schemas.profile import Profile

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    ctx: StorefrontContext = Depends(get_context),
    profile: Profile = Depends(require_auth),
):
    return await ctx.notifications.list_for_user(profile.id)


@router.post(
    "/{notification_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_auth)],
)
async def mark_read(notification_id: str, ctx: StorefrontContext = Depends(get_context)):
    await ctx.notifications.mark_read(notification_id)
    return None
