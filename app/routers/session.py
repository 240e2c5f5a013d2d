# app/routers/session.py
from fastapi import APIRouter, Depends

from app.context import StorefrontContext
from app.core.auth import get_context
from app.schemas.profile import SessionRead, SignInRequest, SignUpRequest

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/session", response_model=SessionRead)
def read_session(ctx: StorefrontContext = Depends(get_context)):
    """
    Return the loading flag and the resolved profile (if any).
    """
    return ctx.session.snapshot()


@router.post("/sign-up", response_model=SessionRead)
async def sign_up(
    payload: SignUpRequest,
    ctx: StorefrontContext = Depends(get_context),
):
    """
    Create an account.

    The profile row is created by a database trigger; the session waits
    (with retries) until it can be read.
    """
    await ctx.auth_repo.sign_up(
        payload.email, payload.password, payload.full_name, payload.role
    )
    await ctx.session.settle()
    if ctx.session.is_authenticated:
        ctx.toasts.success("Welcome to Yazbox!")
    else:
        ctx.toasts.info("Check your inbox to confirm your email address.")
    return ctx.session.snapshot()


@router.post("/sign-in", response_model=SessionRead)
async def sign_in(
    payload: SignInRequest,
    ctx: StorefrontContext = Depends(get_context),
):
    await ctx.auth_repo.sign_in(payload.email, payload.password)
    await ctx.session.settle()
    if ctx.session.is_authenticated:
        ctx.toasts.success("Signed in successfully")
    return ctx.session.snapshot()


@router.post("/sign-out", response_model=SessionRead)
async def sign_out(ctx: StorefrontContext = Depends(get_context)):
    await ctx.session.sign_out()
    await ctx.conversations.close_all()
    await ctx.session.settle()
    return ctx.session.snapshot()
