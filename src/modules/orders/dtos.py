"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  Input DTOs
are the contract between the API layer (DRF serializers) and
``OrderService``; output DTOs are the read-time hydration of the Order
aggregate and serialize with camelCase keys.  All DTOs are immutable.

- ``CreateOrderItemDTO`` / ``ShippingAddressDTO`` / ``CreateOrderDTO``: input.
- ``OrderItemOutputDTO``, ``StatusHistoryDTO``, ``PaymentHistoryDTO``,
  ``OrderOutputDTO``: output.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from modules.orders.constants import PaymentMethod

if TYPE_CHECKING:
    from modules.orders.models import (
        Order,
        OrderItem,
        OrderStatusHistory,
        PaymentStatusHistory,
    )


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """One requested line: which product and how many.

    ``unit_price`` is never accepted from the client; the service reads
    it from the catalog while the product row is locked.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class ShippingAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(default="", max_length=20)


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - No product appears twice.
    """

    model_config = ConfigDict(frozen=True)

    buyer_id: UUID
    items: List[CreateOrderItemDTO]
    shipping_address: ShippingAddressDTO
    payment_method: PaymentMethod
    notes: str = ""

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def no_duplicate_products(self):
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class _CamelOutput(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class OrderItemOutputDTO(_CamelOutput):
    id: UUID
    product_id: Optional[UUID]
    farmer_id: Optional[UUID]
    product_name: str
    product_image: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        return cls(
            id=item.id,
            product_id=item.product_id,
            farmer_id=item.farmer_id,
            product_name=item.product_name,
            product_image=item.product_image,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )


class StatusHistoryDTO(_CamelOutput):
    id: UUID
    old_status: Optional[str]
    new_status: str
    actor_id: Optional[UUID]
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, history: OrderStatusHistory) -> StatusHistoryDTO:
        return cls(
            id=history.id,
            old_status=history.old_status,
            new_status=history.new_status,
            actor_id=history.actor_id,
            notes=history.notes,
            created_at=history.created_at,
        )


class PaymentHistoryDTO(_CamelOutput):
    id: UUID
    old_payment_status: str
    new_payment_status: str
    actor_id: Optional[UUID]
    transaction_id: str
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, history: PaymentStatusHistory) -> PaymentHistoryDTO:
        return cls(
            id=history.id,
            old_payment_status=history.old_payment_status,
            new_payment_status=history.new_payment_status,
            actor_id=history.actor_id,
            transaction_id=history.transaction_id,
            notes=history.notes,
            created_at=history.created_at,
        )


class BuyerSummaryDTO(_CamelOutput):
    id: UUID
    name: str
    contact: str


class ShippingAddressOutputDTO(_CamelOutput):
    street: str
    city: str
    country: str
    postal_code: str


class OrderOutputDTO(_CamelOutput):
    """Read model of the Order aggregate."""

    id: UUID
    order_number: str
    buyer: BuyerSummaryDTO
    items: List[OrderItemOutputDTO]
    total_amount: Decimal
    shipping_address: ShippingAddressOutputDTO
    payment_method: str
    status: str
    payment_status: str
    transaction_id: str
    notes: str
    status_history: List[StatusHistoryDTO]
    payment_history: List[PaymentHistoryDTO]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``buyer`` is selected and ``items``, ``status_history`` and
        ``payment_history`` are prefetched.
        """
        return cls(
            id=order.id,
            order_number=order.order_number,
            buyer=BuyerSummaryDTO(
                id=order.buyer.id,
                name=order.buyer.name,
                contact=order.buyer.contact,
            ),
            items=[OrderItemOutputDTO.from_entity(i) for i in order.items.all()],
            total_amount=order.total_amount,
            shipping_address=ShippingAddressOutputDTO(**order.shipping_address),
            payment_method=order.payment_method,
            status=order.status,
            payment_status=order.payment_status,
            transaction_id=order.transaction_id,
            notes=order.notes,
            status_history=[
                StatusHistoryDTO.from_entity(h) for h in order.status_history.all()
            ],
            payment_history=[
                PaymentHistoryDTO.from_entity(h) for h in order.payment_history.all()
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
