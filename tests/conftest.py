"""
Wspolne fixtures.

Wywolania API Gateway sa zastapione dublerami w procesie, koszyk trzymany
jest w MemoryBackend, chyba ze modul testow nadpisze fixture `backend`.
"""
from decimal import Decimal
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from storefront.api import create_app
from storefront.api import deps
from storefront.domain.errors import GatewayError, ProductNotFoundError
from storefront.domain.schemas import OrderReceipt, Product, ProductRef
from storefront.repos.cart_repo import CartRepo, MemoryBackend
from storefront.services.cart_service import CartStore
from storefront.services.checkout_service import CheckoutRegistry
from storefront.services.order_client import OrderClient

# id odwiedzajacych w formacie uuid4().hex
VISITOR_ID = "0123456789abcdef0123456789abcdef"
OTHER_VISITOR_ID = "fedcba9876543210fedcba9876543210"

CATALOG = {
    "A": Product(id="A", name="Premium Account", price=Decimal("100"), stock=5, category="RPG"),
    "B": Product(id="B", name="Basic Account", price=Decimal("50"), stock=10, category="FPS"),
    "G": Product(
        id="G",
        name="Gold Package",
        price=Decimal("199"),
        discount=Decimal("10"),
        stock=3,
        image="/images/product-3.jpg",
    ),
}


class FakeProductClient:
    """Katalog w pamieci; id z `broken` zachowuja sie jak niedostepne API."""

    def __init__(self, catalog=None, broken=()):
        self.catalog = dict(catalog or CATALOG)
        self.broken = set(broken)
        self.calls = []

    def fetch_product(self, product_id):
        self.calls.append(product_id)
        if product_id in self.broken:
            raise GatewayError(f"Nie mozna pobrac produktu {product_id}", status_code=503)
        product = self.catalog.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product


def make_ref(product_id, price, name=""):
    return ProductRef(id=product_id, name=name or product_id, price=Decimal(str(price)))


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def repo(backend):
    return CartRepo(backend, key="test:cart")


@pytest.fixture
def store(repo):
    return CartStore(repo)


@pytest.fixture
def filled_store(store):
    """Koszyk {A: 2 x 100, B: 1 x 50}."""
    store.add_item(make_ref("A", 100), 2)
    store.add_item(make_ref("B", 50), 1)
    return store


@pytest.fixture
def order_client():
    client = Mock(spec=OrderClient)
    client.create_order.return_value = OrderReceipt.model_validate({"transactionId": "txn-1"})
    return client


@pytest.fixture
def product_client():
    return FakeProductClient()


@pytest.fixture
def test_client(backend, product_client, order_client):
    app = create_app()
    registry = CheckoutRegistry()

    app.dependency_overrides[deps.get_backend] = lambda: backend
    app.dependency_overrides[deps.get_registry] = lambda: registry
    app.dependency_overrides[deps.get_product_client] = lambda: product_client
    app.dependency_overrides[deps.get_order_client] = lambda: order_client

    with TestClient(app) as client:
        client.cookies.set("visitor_id", VISITOR_ID)
        yield client

    app.dependency_overrides.clear()
