# app/core/auth.py
from fastapi import Depends, HTTPException, Request, status

from app.context import StorefrontContext
from app.schemas.profile import Profile


def get_context(request: Request) -> StorefrontContext:
    """
    FastAPI dependency returning the storefront context built at startup.
    """
    return request.app.state.storefront


def get_current_profile(
    ctx: StorefrontContext = Depends(get_context),
) -> Profile | None:
    """
    Resolve the signed-in user's profile.

    Returns None while the session is loading or signed out (guest mode).
    """
    if not ctx.session.is_authenticated:
        return None
    return ctx.session.profile


def require_auth(profile: Profile | None = Depends(get_current_profile)) -> Profile:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if there is no resolved profile.
    """
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return profile


def require_seller(profile: Profile = Depends(require_auth)) -> Profile:
    """
    Enforce seller role.

    Raises:
        HTTPException(403): if role is not seller.
    """
    if profile.role != "seller":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Seller access required",
        )
    return profile
