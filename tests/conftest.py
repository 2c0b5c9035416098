from __future__ import annotations

from decimal import Decimal
from itertools import count

import pytest
from rest_framework.test import APIClient

from modules.accounts.constants import Role
from modules.accounts.dtos import Caller
from modules.accounts.models import Account
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ShippingAddressDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

_sequence = count(1)

ACCRA = (Decimal("5.603700"), Decimal("-0.187000"))


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_account():
    """Factory: ``make_account(role, **fields)`` creates user + account."""

    def _make(role: str = Role.BUYER, **fields) -> Account:
        n = next(_sequence)
        email = fields.pop("email", f"{role}-{n}@example.com")
        defaults = {
            "name": f"{role.title()} {n}",
            "role": role,
            "contact": f"+23320000{n:04d}",
        }
        if role == Role.FARMER:
            defaults.update(
                farm_name=f"Farm {n}", latitude=ACCRA[0], longitude=ACCRA[1]
            )
        defaults.update(fields)
        return AccountDjangoRepository().create_with_user(
            email=email, password="secret123", **defaults
        )

    return _make


@pytest.fixture()
def farmer(make_account):
    return make_account(Role.FARMER, name="Kwame Farmer")


@pytest.fixture()
def other_farmer(make_account):
    return make_account(Role.FARMER, name="Ama Farmer")


@pytest.fixture()
def buyer(make_account):
    return make_account(Role.BUYER, name="Kofi Buyer")


@pytest.fixture()
def other_buyer(make_account):
    return make_account(Role.BUYER, name="Esi Buyer")


@pytest.fixture()
def admin(make_account):
    return make_account(Role.ADMIN, name="Admin")


@pytest.fixture()
def payment_processor(make_account):
    return make_account(Role.PAYMENT_PROCESSOR, name="Payments")


@pytest.fixture()
def caller_for():
    """Factory: the service-level ``Caller`` of an account."""

    def _caller(account: Account) -> Caller:
        return Caller(id=account.id, role=account.role)

    return _caller


@pytest.fixture()
def client_for():
    """Factory: an ``APIClient`` authenticated as the given account."""

    def _client(account: Account) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=account.user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product(farmer):
    """Factory: ``make_product(**fields)``; defaults to the ``farmer`` fixture."""

    def _make(**fields) -> Product:
        n = next(_sequence)
        defaults = {
            "farmer": farmer,
            "name": f"Produce {n}",
            "price": Decimal("10.00"),
            "quantity": 5,
            "category": "Vegetables",
            "latitude": ACCRA[0],
            "longitude": ACCRA[1],
        }
        defaults.update(fields)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture()
def product(make_product):
    return make_product(name="Fresh Tomatoes", price=Decimal("10.00"), quantity=5)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    account_repo = AccountDjangoRepository()
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        account_repository=account_repo,
    )


@pytest.fixture()
def address():
    return ShippingAddressDTO(street="1 Rd", city="Accra", country="Ghana")


@pytest.fixture()
def place_order(order_service, buyer, address):
    """Factory: ``place_order([(product, qty), ...], buyer=...)``."""

    def _place(lines, buyer_account=None, payment_method="cash"):
        dto = CreateOrderDTO(
            buyer_id=(buyer_account or buyer).id,
            items=[
                CreateOrderItemDTO(product_id=p.id, quantity=qty) for p, qty in lines
            ],
            shipping_address=address,
            payment_method=payment_method,
        )
        return order_service.create_order(dto)

    return _place
