"""Order, OrderItem, and the two append-only history models.

Rules implemented:
- Status transitions are checked against ``VALID_TRANSITIONS`` (enforced
  by the service layer before any write).
- Every status and payment-status change adds a history row.
- Order number is a human-readable identifier generated on first save.
- Buyer FK uses PROTECT to preserve financial history.
- OrderItem snapshots the product's name, first image, unit price and
  farmer at creation time; the product reference is nullable so line
  items survive hard deletion of the product.
- OrderItem ``subtotal`` is always ``quantity * unit_price``.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    ``order_number`` (``ORD-YYYYMMDD-XXXXXX``) is for humans; the UUIDv7
    ``id`` is used for every internal reference and API lookup.
    """

    order_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    buyer: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_street: models.CharField = models.CharField(max_length=255)
    shipping_city: models.CharField = models.CharField(max_length=100)
    shipping_country: models.CharField = models.CharField(max_length=100)
    shipping_postal_code: models.CharField = models.CharField(
        max_length=20, blank=True, default=""
    )
    payment_method: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PROCESSING,
    )
    payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    transaction_id: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(
                fields=["payment_status"], name="orders_payment_status_idx"
            ),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["buyer", "-created_at"], name="orders_buyer_created_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def shipping_address(self) -> dict[str, str]:
        return {
            "street": self.shipping_street,
            "city": self.shipping_city,
            "country": self.shipping_country,
            "postal_code": self.shipping_postal_code,
        }

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item: an immutable snapshot of one product at purchase time.

    ``farmer`` is copied from the product so "received orders" stay
    queryable even after the product is gone.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    farmer: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="received_order_items",
    )
    product_name: models.CharField = models.CharField(max_length=255)
    product_image: models.CharField = models.CharField(
        max_length=500, blank=True, default=""
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["farmer"], name="order_items_farmer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Inherits ``BaseModel`` (not ``SoftDeleteModel``): audit rows are never
    edited or deleted.  ``actor`` is nullable; ``None`` means the system.
    ``old_status`` is ``None`` only on the creation entry.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    actor: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"


class PaymentStatusHistory(BaseModel):
    """Append-only record of every payment reconciliation call."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payment_history",
    )
    old_payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
    )
    new_payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
    )
    actor: models.ForeignKey = models.ForeignKey(
        "accounts.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    transaction_id: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_payment_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="oph_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"{self.order_id} : {self.old_payment_status} -> "
            f"{self.new_payment_status}"
        )
