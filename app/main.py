# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.context import StorefrontContext, build_context
from app.core.config import Settings, get_settings
from app.core.errors import DataAccessError, NotFoundError
from app.core.supabase_client import supabase_public

# Routers
from app.routers.session import router as session_router
from app.routers.products import router as products_router
from app.routers.cart import router as cart_router
from app.routers.orders import router as orders_router
from app.routers.messages import router as messages_router
from app.routers.notifications import router as notifications_router
from app.routers.seller import router as seller_router
from app.routers.toasts import router as toasts_router

logger = logging.getLogger("uvicorn")


def create_app(
    settings: Settings | None = None,
    context: StorefrontContext | None = None,
) -> FastAPI:
    """
    Application factory.

    Settings are resolved first so missing Supabase credentials fail
    before anything is served. A prebuilt context can be injected (tests).
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
          - Create the Supabase client and the storefront context.
          - Run the initial session check.

        Shutdown:
          - Close realtime channels and the auth subscription.
        """
        ctx = context
        if ctx is None:
            logger.info("Startup: connecting to Supabase at %s", settings.SUPABASE_URL)
            client = await supabase_public(settings)
            ctx = build_context(client, settings)
        app.state.storefront = ctx

        await ctx.start()
        logger.info("Startup: session %s", ctx.session.state.value)
        yield
        await ctx.stop()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DataAccessError)
    async def data_access_error_handler(request: Request, exc: DataAccessError):
        """
        Backend failures become a toast plus an error response;
        they never crash the page.
        """
        logger.error("Backend call failed: %s", exc)
        ctx: StorefrontContext | None = getattr(request.app.state, "storefront", None)
        if ctx is not None:
            ctx.toasts.error(exc.message)
        code = (
            status.HTTP_404_NOT_FOUND
            if isinstance(exc, NotFoundError)
            else status.HTTP_502_BAD_GATEWAY
        )
        return JSONResponse(
            status_code=code,
            content={"detail": exc.message, "operation": exc.operation},
        )

    for router in (
        session_router,
        products_router,
        cart_router,
        orders_router,
        messages_router,
        notifications_router,
        seller_router,
        toasts_router,
    ):
        app.include_router(router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "yazbox-storefront"}

    return app
