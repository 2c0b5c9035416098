"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  ``save``
flushes the aggregate's pending domain events into the outbox table, so
events commit or roll back together with the order rows.

Concurrency control on mutations uses ``select_for_update()``; the lock
query selects no related rows so only the order itself is locked.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.core.models import OutboxEvent
from modules.orders.models import (
    Order,
    OrderItem,
    OrderStatusHistory,
    PaymentStatusHistory,
)
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    @staticmethod
    def _hydrated() -> "models.QuerySet[Order]":
        return (
            Order.objects.alive()
            .select_related("buyer")
            .prefetch_related("items", "status_history", "payment_history")
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        address = data["shipping_address"]
        order = Order(
            buyer_id=data["buyer_id"],
            shipping_street=address["street"],
            shipping_city=address["city"],
            shipping_country=address["country"],
            shipping_postal_code=address.get("postal_code", ""),
            payment_method=data["payment_method"],
            notes=data.get("notes", ""),
        )
        order.save()

        total = Decimal("0.00")
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                product_id=item_data["product_id"],
                farmer_id=item_data.get("farmer_id"),
                product_name=item_data["product_name"],
                product_image=item_data.get("product_image", ""),
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            )
            item.save()
            total += item.subtotal

        order.total_amount = total
        order.save(update_fields=["total_amount"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(items),
            total_amount=str(total),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for non-existent, deleted or malformed IDs."""
        try:
            return self._hydrated().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        queryset = self._hydrated()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def for_buyer(self, buyer_id: UUID) -> "models.QuerySet[Order]":
        return self._hydrated().filter(buyer_id=buyer_id)

    def received_by(self, farmer_id: UUID) -> "models.QuerySet[Order]":
        return self._hydrated().filter(items__farmer_id=farmer_id).distinct()

    def has_items_from(self, order_id: UUID, farmer_id: UUID) -> bool:
        return OrderItem.objects.filter(order_id=order_id, farmer_id=farmer_id).exists()

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the order and write its pending events to the outbox."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event.to_payload(),
                topic=OUTBOX_TOPIC,
            )
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        order = self.get_for_update(id)
        if not order:
            return False
        order.delete()
        logger.info("order.soft_deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Histories (append-only)
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        old_status: Optional[str],
        new_status: str,
        actor_id: Optional[UUID] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            actor_id=actor_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def add_payment_history(
        self,
        order_id: UUID,
        old_payment_status: str,
        new_payment_status: str,
        actor_id: Optional[UUID] = None,
        transaction_id: str = "",
        notes: str = "",
    ) -> PaymentStatusHistory:
        history = PaymentStatusHistory.objects.create(
            order_id=order_id,
            old_payment_status=old_payment_status,
            new_payment_status=new_payment_status,
            actor_id=actor_id,
            transaction_id=transaction_id,
            notes=notes,
        )
        logger.info(
            "order.payment_history_added",
            order_id=str(order_id),
            old_payment_status=old_payment_status,
            new_payment_status=new_payment_status,
        )
        return history
