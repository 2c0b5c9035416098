"""Order request serializers (camelCase wire format).

Shape validation at the API boundary; the views turn validated data into
the pydantic DTOs of ``dtos.py``.  Responses are rendered from the output
DTOs, not from serializers.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus


class OrderLineSerializer(serializers.Serializer):
    """One ``{product, quantity}`` entry of an order request."""

    product = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class ShippingAddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    country = serializers.CharField(max_length=100)
    postalCode = serializers.CharField(
        max_length=20, required=False, allow_blank=True, default=""
    )


class CreateOrderSerializer(serializers.Serializer):
    products = OrderLineSerializer(many=True, allow_empty=False)
    shippingAddress = ShippingAddressSerializer()
    paymentMethod = serializers.ChoiceField(choices=PaymentMethod.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)

    def validate_products(self, value):
        product_ids = [line["product"] for line in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError(
                "Each product may appear only once per order."
            )
        return value


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, default="", allow_blank=True)


class PaymentStatusSerializer(serializers.Serializer):
    paymentStatus = serializers.ChoiceField(choices=PaymentStatus.choices)
    transactionId = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True, default=None
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)
