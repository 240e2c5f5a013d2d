"""
Shared fixtures: catalog objects, in-memory storage and fakes for the
Supabase client so nothing here talks to the network.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from postgrest.exceptions import APIError

from app.core.local_storage import MemoryStorage
from app.schemas.product import Product, ProductVariant
from app.schemas.profile import Profile


def api_error(message: str = "boom") -> APIError:
    return APIError({"message": message, "code": "500", "hint": None, "details": None})


class FakeQuery:
    """
    Stand-in for a postgrest request builder.

    Every builder method records its call and returns self; execute()
    returns the queued data or raises the queued exception.
    """

    def __init__(self, table: str, result):
        self.table = table
        self.result = result
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    async def execute(self):
        if isinstance(self.result, Exception):
            raise self.result
        if self.result is None:
            return None
        return SimpleNamespace(data=self.result)


class FakeClient:
    """
    Minimal AsyncClient: queue results per table name with `queue()`.
    Each call to table()/rpc() pops the next result for that name.
    """

    def __init__(self):
        self._results: dict[str, list] = {}
        self.queries: list[FakeQuery] = []
        self.storage = MagicMock()
        bucket = MagicMock()
        bucket.upload = AsyncMock()
        bucket.remove = AsyncMock()
        bucket.get_public_url = AsyncMock(
            side_effect=lambda path: f"https://x.supabase.co/storage/v1/object/public/b/{path}"
        )
        self.bucket = bucket
        self.storage.from_.return_value = bucket

    def queue(self, name: str, *results) -> None:
        self._results.setdefault(name, []).extend(results)

    def _next(self, name: str) -> FakeQuery:
        results = self._results.get(name)
        result = results.pop(0) if results else []
        query = FakeQuery(name, result)
        self.queries.append(query)
        return query

    def table(self, name: str) -> FakeQuery:
        return self._next(name)

    def rpc(self, fn: str, params: dict) -> FakeQuery:
        query = self._next(fn)
        query.calls.append(("rpc", (fn, params), {}))
        return query

    def calls_for(self, name: str) -> list[FakeQuery]:
        return [q for q in self.queries if q.table == name]


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def variant() -> ProductVariant:
    return ProductVariant(id="11", name="Small", paper_type="Kraft", price_per_unit=2.5)


@pytest.fixture
def other_variant() -> ProductVariant:
    return ProductVariant(id="12", name="Large", paper_type="Kraft", price_per_unit=4.0)


@pytest.fixture
def product(variant, other_variant) -> Product:
    return Product(
        id="7",
        name="Mailer Box",
        min_order_quantity=100,
        category="Boxes",
        variants=[variant, other_variant],
    )


@pytest.fixture
def profile() -> Profile:
    return Profile(id="user-1", full_name="Ada Buyer", role="buyer")


@pytest.fixture
def make_api_error():
    return api_error
