# app/context.py
from dataclasses import dataclass

from supabase import AsyncClient

from app.core.config import Settings
from app.core.local_storage import FileStorage, LocalStorage
from app.repositories.auth_repo import AuthRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.notification_repo import NotificationRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.seller_repo import SellerRepository
from app.services.cart_store import CartStore
from app.services.catalog_service import CatalogService
from app.services.checkout_service import CheckoutService
from app.services.conversation_cache import ConversationCache
from app.services.seller_service import SellerOnboardingService
from app.services.session_sync import SessionSynchronizer
from app.services.toast_queue import ToastQueue


@dataclass
class StorefrontContext:
    """
    Everything a page needs, passed explicitly instead of ambient providers.

    One context per browser session: it owns the session synchronizer,
    the cart and the toast queue, plus the repositories/services built
    on the shared Supabase client.
    """

    session: SessionSynchronizer
    cart: CartStore
    toasts: ToastQueue

    auth_repo: AuthRepository
    products: ProductRepository
    orders: OrderRepository
    notifications: NotificationRepository
    messages: MessageRepository

    catalog: CatalogService
    checkout: CheckoutService
    onboarding: SellerOnboardingService
    conversations: ConversationCache

    async def start(self) -> None:
        await self.session.start()

    async def stop(self) -> None:
        await self.conversations.close_all()
        await self.session.stop()


def build_context(
    client: AsyncClient,
    settings: Settings,
    storage: LocalStorage | None = None,
) -> StorefrontContext:
    """Wire repositories and services around one Supabase client."""
    auth_repo = AuthRepository(client)
    products = ProductRepository(client)
    orders = OrderRepository(client)
    messages = MessageRepository(client)

    return StorefrontContext(
        session=SessionSynchronizer(
            auth_repo,
            attempts=settings.PROFILE_FETCH_ATTEMPTS,
            retry_delay=settings.PROFILE_RETRY_DELAY,
            backoff=settings.PROFILE_RETRY_BACKOFF,
        ),
        cart=CartStore(
            storage or FileStorage(settings.LOCAL_STORAGE_DIR),
            storage_key=settings.CART_STORAGE_KEY,
        ),
        toasts=ToastQueue(ttl=settings.TOAST_TTL_SECONDS),
        auth_repo=auth_repo,
        products=products,
        orders=orders,
        notifications=NotificationRepository(client),
        messages=messages,
        catalog=CatalogService(client, products, settings.PRODUCT_IMAGE_BUCKET),
        checkout=CheckoutService(orders),
        onboarding=SellerOnboardingService(
            client, SellerRepository(client), auth_repo, settings.SELLER_LOGO_BUCKET
        ),
        conversations=ConversationCache(messages),
    )
