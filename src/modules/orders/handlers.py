"""Event handlers for Orders domain events.

Invoked by the outbox publisher, never inside the request that raised
the event.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderPaymentStatusChanged,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
            buyer_id=event.buyer_id,
            total_amount=event.total_amount,
            farmer_count=len(event.farmer_ids),
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            reason=event.reason,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderPaymentStatusChangedHandler(IEventHandler[OrderPaymentStatusChanged]):
    def handle(self, event: OrderPaymentStatusChanged) -> None:
        logger.info(
            "order.event.payment_status_changed",
            order_id=str(event.aggregate_id),
            old_payment_status=event.old_payment_status,
            new_payment_status=event.new_payment_status,
            transaction_id=event.transaction_id,
        )


order_created_handler = OrderCreatedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_payment_status_changed_handler = OrderPaymentStatusChangedHandler()
