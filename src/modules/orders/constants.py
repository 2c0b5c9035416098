"""Order domain constants.

Status choices, the forward-only transition table of the order state
machine, and the payment vocabulary.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash on delivery"
    CREDIT_CARD = "credit_card", "Credit card"
    MOBILE_MONEY = "mobile_money", "Mobile money"
    PAYPAL = "paypal", "PayPal"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Buyers may only cancel before the order leaves the farm.
BUYER_CANCELLABLE_STATES: set[str] = {OrderStatus.PROCESSING}

ORDER_NUMBER_MAX_RETRIES = 5
