"""Integration test for all-or-nothing order creation over HTTP.

A request whose last line lacks stock must leave every product, order,
history and outbox table exactly as it was.
"""

from __future__ import annotations

import pytest

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.integration

URL = "/api/v1/orders"


def test_partial_stock_failure_rolls_back_everything(client_for, buyer, make_product):
    a = make_product(quantity=10)
    b = make_product(quantity=10)
    scarce = make_product(name="Shea Butter", quantity=1)

    response = client_for(buyer).post(
        URL,
        {
            "products": [
                {"product": str(a.id), "quantity": 3},
                {"product": str(b.id), "quantity": 3},
                {"product": str(scarce.id), "quantity": 2},
            ],
            "shippingAddress": {"street": "1 Rd", "city": "Accra", "country": "Ghana"},
            "paymentMethod": "cash",
        },
        format="json",
    )

    assert response.status_code == 400
    assert "Shea Butter" in response.json()["error"]
    for product, expected in ((a, 10), (b, 10), (scarce, 1)):
        product.refresh_from_db()
        assert product.quantity == expected
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert OrderStatusHistory.objects.count() == 0
    assert OutboxEvent.objects.count() == 0


def test_cancel_restores_every_line(client_for, buyer, place_order, make_product):
    a = make_product(quantity=10)
    b = make_product(quantity=4)
    order = place_order([(a, 3), (b, 4)])

    response = client_for(buyer).patch(f"{URL}/{order.id}/cancel", {}, format="json")

    assert response.status_code == 200
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.quantity, b.quantity) == (10, 4)
