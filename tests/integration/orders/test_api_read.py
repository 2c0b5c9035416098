"""Integration tests for order retrieval and scoped listings.

Covers:
- GET /orders/{id}: buyer, selling farmer and admin allowed; others 403.
- GET /orders/my-orders, /orders/received, /orders (admin).
- Malformed and unknown ids.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration

BASE = "/api/v1/orders"


@pytest.fixture()
def order(place_order, product):
    return place_order([(product, 1)])


class TestRetrieve:
    @pytest.mark.parametrize("role_fixture", ["buyer", "farmer", "admin"])
    def test_participants_can_read(self, request, client_for, order, role_fixture):
        account = request.getfixturevalue(role_fixture)
        response = client_for(account).get(f"{BASE}/{order.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(order.id)
        assert data["orderNumber"] == order.order_number

    @pytest.mark.parametrize("role_fixture", ["other_buyer", "other_farmer"])
    def test_outsiders_forbidden(self, request, client_for, order, role_fixture):
        account = request.getfixturevalue(role_fixture)
        response = client_for(account).get(f"{BASE}/{order.id}")
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_unknown_id_404(self, client_for, buyer):
        response = client_for(buyer).get(f"{BASE}/{uuid4()}")
        assert response.status_code == 404

    def test_malformed_id_400(self, client_for, buyer):
        response = client_for(buyer).get(f"{BASE}/not-a-uuid")
        assert response.status_code == 400

    def test_anonymous_401(self, api_client, order):
        assert api_client.get(f"{BASE}/{order.id}").status_code == 401


class TestMyOrders:
    def test_lists_only_own_orders(
        self, client_for, place_order, make_product, buyer, other_buyer
    ):
        own = place_order([(make_product(), 1)])
        place_order([(make_product(), 1)], buyer_account=other_buyer)

        response = client_for(buyer).get(f"{BASE}/my-orders")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 1
        assert [o["id"] for o in data["results"]] == [str(own.id)]

    def test_farmer_forbidden(self, client_for, farmer):
        assert client_for(farmer).get(f"{BASE}/my-orders").status_code == 403


class TestReceived:
    def test_lists_orders_with_farmer_items(
        self, client_for, place_order, make_product, farmer, other_farmer
    ):
        shared = place_order(
            [(make_product(), 1), (make_product(farmer=other_farmer), 1)]
        )
        place_order([(make_product(farmer=other_farmer), 1)])

        response = client_for(farmer).get(f"{BASE}/received")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [o["id"] for o in data["results"]] == [str(shared.id)]
        # The whole order is returned, including the other farmer's line.
        assert len(data["results"][0]["items"]) == 2

    def test_buyer_forbidden(self, client_for, buyer):
        assert client_for(buyer).get(f"{BASE}/received").status_code == 403


class TestAdminList:
    def test_admin_lists_everything(
        self, client_for, place_order, make_product, admin, other_buyer
    ):
        place_order([(make_product(), 1)])
        place_order([(make_product(), 1)], buyer_account=other_buyer)

        response = client_for(admin).get(BASE)

        assert response.status_code == 200
        assert response.json()["data"]["count"] == 2

    @pytest.mark.parametrize("role_fixture", ["buyer", "farmer", "payment_processor"])
    def test_non_admin_forbidden(self, request, client_for, role_fixture):
        account = request.getfixturevalue(role_fixture)
        assert client_for(account).get(BASE).status_code == 403
