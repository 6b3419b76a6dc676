"""
Pytest configuration and fixtures for the cart API tests.
"""
import os
import pytest
from itertools import count
from typing import Dict, Generator, List, Tuple

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"

from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from cartapi.core.monitoring import MetricsCollector
from cartapi.db.session import build_engine, create_db_and_tables, get_session
from cartapi.main import create_app
from cartapi.models import Cart, Item
from cartapi.models.cart import utcnow
from cartapi.services.auth import AuthClient
from cartapi.services.cart import CartService
from cartapi.storage import CartStorage, RecordConflict, RecordNotFound

OWNER_KEY = "abcdef123456"  # user 1
OTHER_KEY = "bcdefg123456"  # user 12


class InMemoryStorage(CartStorage):
    """Dict backed storage that records every call it receives.

    `failures` maps an operation name to the exception it should raise.
    """

    def __init__(self):
        self.carts: Dict[int, Cart] = {}
        self.items: Dict[int, Item] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.failures: Dict[str, Exception] = {}
        self._cart_ids = count(1)
        self._item_ids = count(1)

    def _record(self, operation: str, *args):
        self.calls.append((operation, args))
        if operation in self.failures:
            raise self.failures[operation]

    def create_cart(self, cart: Cart) -> Cart:
        self._record("create_cart", cart)
        cart.id = next(self._cart_ids)
        cart.created_at = cart.updated_at = utcnow()
        self.carts[cart.id] = cart
        return cart

    def get_cart(self, user_id: int, cart_id: int) -> Cart:
        self._record("get_cart", user_id, cart_id)
        cart = self.carts.get(cart_id)
        if cart is None or cart.user_id != user_id:
            raise RecordNotFound("get_cart")
        return cart

    def find_item_by_product(self, cart_id: int, product_id: int) -> Item:
        self._record("find_item_by_product", cart_id, product_id)
        for item in self.items.values():
            if item.cart_id == cart_id and item.product_id == product_id:
                return item
        raise RecordNotFound("find_item_by_product")

    def create_item(self, item: Item) -> Item:
        self._record("create_item", item)
        for existing in self.items.values():
            if existing.cart_id == item.cart_id and existing.product_id == item.product_id:
                raise RecordConflict("create_item")
        item.id = next(self._item_ids)
        item.created_at = item.updated_at = utcnow()
        self.items[item.id] = item
        return item

    def get_item(self, item_id: int) -> Item:
        self._record("get_item", item_id)
        if item_id not in self.items:
            raise RecordNotFound("get_item")
        return self.items[item_id]

    def remove_item(self, item_id: int) -> None:
        self._record("remove_item", item_id)
        self.items.pop(item_id, None)

    def remove_items_by_cart(self, cart_id: int) -> None:
        self._record("remove_items_by_cart", cart_id)
        for item_id in [i for i, item in self.items.items() if item.cart_id == cart_id]:
            del self.items[item_id]

    def items_in(self, cart_id: int) -> List[Item]:
        return [item for item in self.items.values() if item.cart_id == cart_id]


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def service(storage: InMemoryStorage) -> CartService:
    return CartService(storage)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Private in-memory SQLite database with the schema created."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def app(engine: Engine, metrics: MetricsCollector):
    app = create_app(metrics=metrics, auth_client=AuthClient(secret_key="test-secret"))

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def owner_headers() -> Dict[str, str]:
    return {"Authorisation": f"Key {OWNER_KEY}"}


@pytest.fixture
def other_headers() -> Dict[str, str]:
    return {"Authorisation": f"Key {OTHER_KEY}"}
