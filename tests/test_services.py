from unittest.mock import AsyncMock

import pytest

from app.core.errors import DataAccessError, PartialWriteError
from app.repositories.auth_repo import AuthRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.seller_repo import SellerRepository
from app.schemas.message import Message
from app.schemas.order import ShippingAddress
from app.schemas.product import ProductCreate
from app.schemas.seller import SellerCreate
from app.services.cart_store import CartStore
from app.services.catalog_service import CatalogService
from app.services.checkout_service import CheckoutService
from app.services.conversation_cache import ConversationCache
from app.services.seller_service import SellerOnboardingService
from app.services.session_sync import SessionState, SessionSynchronizer

PNG = ("image/png", b"\x89PNG fake")


def product_payload() -> ProductCreate:
    return ProductCreate(
        name="Mailer Box",
        category_id="2",
        min_order_quantity=100,
        variants=[{"name": "Small", "price_per_unit": 2.5}],
        faqs=[{"question": "Recyclable?", "answer": "Yes"}],
    )


# -------- Product publishing --------


@pytest.mark.asyncio
async def test_create_product_happy_path(fake_client):
    fake_client.queue("products", [{"id": 7}], [{"id": 7}], {"id": 7, "name": "Mailer Box"})
    fake_client.queue("product_variants", [{"id": 11}])
    fake_client.queue("product_faqs", [{"id": 1}])
    service = CatalogService(fake_client, ProductRepository(fake_client), "product-images")

    product = await service.create_product("seller-1", product_payload(), [PNG])

    assert product.id == "7"
    fake_client.bucket.upload.assert_awaited_once()
    variants_insert = fake_client.calls_for("product_variants")[0].calls[0]
    assert variants_insert[1][0] == [
        {"product_id": "7", "name": "Small", "paper_type": None, "price_per_unit": 2.5}
    ]


@pytest.mark.asyncio
async def test_create_product_compensates_when_variants_fail(fake_client, make_api_error):
    fake_client.queue("products", [{"id": 7}], [{"id": 7}], [])
    fake_client.queue("product_variants", make_api_error("violates check constraint"))
    service = CatalogService(fake_client, ProductRepository(fake_client), "product-images")

    with pytest.raises(PartialWriteError):
        await service.create_product("seller-1", product_payload(), [PNG])

    removed = fake_client.bucket.remove.await_args.args[0]
    assert len(removed) == 1 and removed[0].startswith("products/7/")
    last_products_query = fake_client.calls_for("products")[-1]
    assert [c[0] for c in last_products_query.calls] == ["delete", "eq"]


@pytest.mark.asyncio
async def test_create_product_failed_rollback_still_reports_partial_write(
    fake_client, make_api_error
):
    fake_client.queue(
        "products", [{"id": 7}], [{"id": 7}], make_api_error("row is locked")
    )
    fake_client.queue("product_variants", make_api_error("violates check constraint"))
    service = CatalogService(fake_client, ProductRepository(fake_client), "product-images")

    with pytest.raises(PartialWriteError):
        await service.create_product("seller-1", product_payload(), [PNG])

    assert [c[0] for c in fake_client.calls_for("products")[-1].calls] == ["delete", "eq"]


@pytest.mark.asyncio
async def test_create_product_rejects_bad_image_before_writing(fake_client):
    service = CatalogService(fake_client, ProductRepository(fake_client), "product-images")

    with pytest.raises(ValueError):
        await service.create_product("seller-1", product_payload(), [("text/plain", b"x")])

    assert fake_client.queries == []


# -------- Checkout --------


ADDRESS = ShippingAddress(
    full_name="Ada", address="1 Main St", city="Springfield", postal_code="12345", country="US"
)


@pytest.mark.asyncio
async def test_place_order_clears_cart(fake_client, storage, product, variant):
    cart = CartStore(storage)
    cart.add_to_cart(product, variant, 100)
    fake_client.queue(
        "orders",
        [{"id": 5}],
        {"id": 5, "created_at": "2024", "status": "Pending", "total": 320.0, "order_items": []},
    )
    fake_client.queue("order_items", [{"id": 1}])

    order = await CheckoutService(OrderRepository(fake_client)).place_order("user-1", cart, ADDRESS)

    assert order.id == "5"
    assert cart.items == []
    insert = fake_client.calls_for("orders")[0].calls[0]
    assert insert[1][0]["total"] == pytest.approx(250 + 20 + 50)


@pytest.mark.asyncio
async def test_place_order_failure_keeps_cart_and_deletes_order(
    fake_client, storage, product, variant, make_api_error
):
    cart = CartStore(storage)
    cart.add_to_cart(product, variant, 100)
    fake_client.queue("orders", [{"id": 5}], [])
    fake_client.queue("order_items", make_api_error())

    with pytest.raises(PartialWriteError):
        await CheckoutService(OrderRepository(fake_client)).place_order("user-1", cart, ADDRESS)

    assert cart.item_count == 1
    assert [c[0] for c in fake_client.calls_for("orders")[-1].calls] == ["delete", "eq"]


@pytest.mark.asyncio
async def test_place_order_empty_cart(fake_client, storage):
    with pytest.raises(ValueError):
        await CheckoutService(OrderRepository(fake_client)).place_order(
            "user-1", CartStore(storage), ADDRESS
        )


# -------- Seller onboarding --------


def signed_in_session(fake_client, profile) -> SessionSynchronizer:
    session = SessionSynchronizer(AuthRepository(fake_client))
    session.profile = profile
    session.state = SessionState.AUTHENTICATED
    return session


@pytest.mark.asyncio
async def test_onboarding_switches_role_after_write(fake_client, profile):
    fake_client.queue("sellers", [{"id": "user-1", "company_name": "PackPro"}])
    fake_client.queue("profiles", [{"id": "user-1", "full_name": "Ada Buyer", "role": "seller"}])
    session = signed_in_session(fake_client, profile)
    service = SellerOnboardingService(
        fake_client, SellerRepository(fake_client), AuthRepository(fake_client), "seller-logos"
    )

    seller = await service.create_seller_profile(session, SellerCreate(company_name="PackPro"), PNG)

    assert seller.company_name == "PackPro"
    assert session.profile.role == "seller"


@pytest.mark.asyncio
async def test_onboarding_role_failure_rolls_back(fake_client, profile, make_api_error):
    fake_client.queue("sellers", [{"id": "user-1", "company_name": "PackPro"}], [])
    fake_client.queue("profiles", make_api_error())
    session = signed_in_session(fake_client, profile)
    service = SellerOnboardingService(
        fake_client, SellerRepository(fake_client), AuthRepository(fake_client), "seller-logos"
    )

    with pytest.raises(PartialWriteError):
        await service.create_seller_profile(session, SellerCreate(company_name="PackPro"))

    assert session.profile.role == "buyer"
    assert [c[0] for c in fake_client.calls_for("sellers")[-1].calls] == ["delete", "eq"]


# -------- Conversations --------


def msg(id_: str, conversation_id: str = "c1") -> Message:
    return Message(id=id_, conversation_id=conversation_id, sender_id="u", content="hi", created_at="2024")


@pytest.mark.asyncio
async def test_conversation_cache_reads_through_and_appends_pushes():
    repo = AsyncMock(spec=MessageRepository)
    repo.get_messages.return_value = [msg("1")]
    handlers = {}

    async def subscribe(conversation_id, on_message):
        handlers[conversation_id] = on_message
        return f"channel-{conversation_id}"

    repo.subscribe.side_effect = subscribe
    cache = ConversationCache(repo)

    assert [m.id for m in await cache.open("c1")] == ["1"]
    handlers["c1"](msg("2"))
    handlers["c1"](msg("2"))

    assert [m.id for m in await cache.get_messages("c1")] == ["1", "2"]
    repo.get_messages.assert_awaited_once()


@pytest.mark.asyncio
async def test_conversation_cache_send_and_close():
    repo = AsyncMock(spec=MessageRepository)
    repo.get_messages.return_value = []
    repo.subscribe.return_value = "channel"
    repo.send_message.return_value = msg("9")
    cache = ConversationCache(repo)
    await cache.open("c1")

    await cache.send("c1", "u", "hi")
    assert [m.id for m in await cache.get_messages("c1")] == ["9"]

    await cache.close("c1")
    repo.unsubscribe.assert_awaited_once_with("channel")
    assert not cache.is_open("c1")
