"""Unit tests for Order request serializers (camelCase wire format)."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    PaymentStatusSerializer,
    UpdateStatusSerializer,
)

pytestmark = pytest.mark.unit


def _payload(**overrides):
    data = {
        "products": [{"product": str(uuid4()), "quantity": 2}],
        "shippingAddress": {"street": "1 Rd", "city": "Accra", "country": "Ghana"},
        "paymentMethod": "cash",
    }
    data.update(overrides)
    return data


class TestCreateOrderSerializer:
    def test_valid_payload(self):
        serializer = CreateOrderSerializer(data=_payload())
        assert serializer.is_valid(), serializer.errors
        data = serializer.validated_data
        assert data["products"][0]["quantity"] == 2
        assert data["shippingAddress"]["postalCode"] == ""
        assert data["notes"] == ""

    def test_empty_products_rejected(self):
        serializer = CreateOrderSerializer(data=_payload(products=[]))
        assert not serializer.is_valid()
        assert "products" in serializer.errors

    def test_duplicate_products_rejected(self):
        pid = str(uuid4())
        serializer = CreateOrderSerializer(
            data=_payload(
                products=[
                    {"product": pid, "quantity": 1},
                    {"product": pid, "quantity": 3},
                ]
            )
        )
        assert not serializer.is_valid()
        assert "products" in serializer.errors

    @pytest.mark.parametrize("quantity", [0, -2, "many"])
    def test_bad_quantity_rejected(self, quantity):
        serializer = CreateOrderSerializer(
            data=_payload(products=[{"product": str(uuid4()), "quantity": quantity}])
        )
        assert not serializer.is_valid()

    def test_bad_product_id_rejected(self):
        serializer = CreateOrderSerializer(
            data=_payload(products=[{"product": "abc", "quantity": 1}])
        )
        assert not serializer.is_valid()

    def test_missing_address_field_rejected(self):
        serializer = CreateOrderSerializer(
            data=_payload(shippingAddress={"street": "1 Rd", "city": "Accra"})
        )
        assert not serializer.is_valid()
        assert "country" in serializer.errors["shippingAddress"]

    def test_unknown_payment_method_rejected(self):
        serializer = CreateOrderSerializer(data=_payload(paymentMethod="barter"))
        assert not serializer.is_valid()
        assert "paymentMethod" in serializer.errors


class TestUpdateStatusSerializer:
    def test_valid(self):
        serializer = UpdateStatusSerializer(data={"status": "shipped"})
        assert serializer.is_valid()
        assert serializer.validated_data["notes"] == ""

    def test_unknown_status(self):
        assert not UpdateStatusSerializer(data={"status": "pending"}).is_valid()


class TestCancelOrderSerializer:
    def test_reason_optional(self):
        serializer = CancelOrderSerializer(data={})
        assert serializer.is_valid()
        assert serializer.validated_data["reason"] == ""


class TestPaymentStatusSerializer:
    def test_valid_with_transaction(self):
        serializer = PaymentStatusSerializer(
            data={"paymentStatus": "paid", "transactionId": "TXN-1"}
        )
        assert serializer.is_valid()
        assert serializer.validated_data["transactionId"] == "TXN-1"

    def test_transaction_id_defaults_to_none(self):
        serializer = PaymentStatusSerializer(data={"paymentStatus": "refunded"})
        assert serializer.is_valid()
        assert serializer.validated_data["transactionId"] is None

    def test_unknown_payment_status(self):
        assert not PaymentStatusSerializer(data={"paymentStatus": "settled"}).is_valid()
