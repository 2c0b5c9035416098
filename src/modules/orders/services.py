"""Order service layer (Use Cases).

Orchestrates order creation, the status state machine, cancellation and
payment reconciliation.  Every write runs inside one
``transaction.atomic()`` block: the service is the unit-of-work boundary.

Rules enforced here:
- Only active buyers place orders.
- Stock is checked and reserved under ``SELECT FOR UPDATE`` with products
  locked in id order; the decrement itself is a conditional update that
  never drives a quantity below zero.
- Totals come from the catalog price at creation time, never the client.
- Status moves forward only; terminal orders never change again.
- Cancelling restores stock in the same transaction as the status change.
- Every status and payment change appends to its history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import models, transaction

from modules.accounts.constants import Role
from modules.core.exceptions import AuthorizationError, ValidationError
from modules.core.transactions import retry_on_conflict
from modules.orders.constants import (
    BUYER_CANCELLABLE_STATES,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderPaymentStatusChanged,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidTransitionError,
    OrderNotFound,
)
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.accounts.dtos import Caller
    from modules.accounts.repositories.interfaces import IAccountRepository
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

SCOPE_MINE = "mine"
SCOPE_RECEIVED = "received"
SCOPE_ALL = "all"
SCOPES = (SCOPE_MINE, SCOPE_RECEIVED, SCOPE_ALL)


def _max_write_attempts() -> int:
    return settings.ORDER_WRITE_MAX_ATTEMPTS


class OrderService:
    """Application service for Order use-cases.

    Receives the order, product and account repositories via constructor
    injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        account_repository: IAccountRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._account_repo = account_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @retry_on_conflict(_max_write_attempts)
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order, reserving stock for every line.

        The whole unit of work is retried once when the database aborts
        it (lock timeout, deadlock); a second abort surfaces as
        ``ConflictError``.

        Raises:
            AuthorizationError: buyer missing, inactive or not a buyer.
            ProductNotFound: a product does not exist or was deleted.
            InsufficientStock: a product cannot cover the requested quantity.
        """
        return self._create_order(dto)

    @transaction.atomic
    def _create_order(self, dto: CreateOrderDTO) -> Order:
        log = logger.bind(buyer_id=str(dto.buyer_id))
        log.info("order.creation_started", item_count=len(dto.items))

        buyer = self._account_repo.get_by_id(str(dto.buyer_id))
        if not buyer or not buyer.is_active or buyer.role != Role.BUYER:
            raise AuthorizationError("Only active buyers can place orders.")

        lines: List[Dict[str, Any]] = []
        for item in sorted(dto.items, key=lambda i: str(i.product_id)):
            product = self._product_repo.get_for_update(str(item.product_id))
            if not product:
                raise ProductNotFound(
                    f"Product {item.product_id} not found.",
                    details=[{"field": "products", "product": str(item.product_id)}],
                )
            if product.quantity < item.quantity or not self._product_repo.adjust_quantity(
                str(product.id), -item.quantity
            ):
                log.warning(
                    "order.insufficient_stock",
                    product_id=str(product.id),
                    requested=item.quantity,
                    available=product.quantity,
                )
                raise InsufficientStock(
                    product_id=str(product.id),
                    product_name=product.name,
                    requested=item.quantity,
                    available=product.quantity,
                )

            log.info(
                "order.stock_reserved",
                product_id=str(product.id),
                quantity=item.quantity,
                remaining=product.quantity - item.quantity,
            )
            lines.append(
                {
                    "product_id": product.id,
                    "farmer_id": product.farmer_id,
                    "product_name": product.name,
                    "product_image": product.primary_image,
                    "quantity": item.quantity,
                    "unit_price": product.price,
                }
            )

        order = self._order_repo.create(
            {
                "buyer_id": buyer.id,
                "items": lines,
                "shipping_address": dto.shipping_address.model_dump(),
                "payment_method": dto.payment_method,
                "notes": dto.notes,
            }
        )
        self._order_repo.add_history(
            order_id=order.id,
            old_status=None,
            new_status=OrderStatus.PROCESSING,
            actor_id=buyer.id,
            notes="Order created",
        )

        farmer_ids = sorted({str(line["farmer_id"]) for line in lines if line["farmer_id"]})
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                actor_id=buyer.id,
                order_number=order.order_number,
                buyer_id=str(buyer.id),
                total_amount=str(order.total_amount),
                farmer_ids=farmer_ids,
            )
        )
        self._order_repo.save(order)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @retry_on_conflict(_max_write_attempts)
    def update_status(
        self,
        order_id: Any,
        new_status: str,
        caller: Caller,
        notes: str = "",
    ) -> Order:
        """Move an order forward through the state machine.

        A request for ``cancelled`` goes through the cancellation path so
        stock is always restored.

        Raises:
            ValidationError: malformed id or unknown status.
            OrderNotFound: order does not exist.
            AuthorizationError: caller is neither an admin nor a farmer
                with a line item in the order.
            InvalidTransitionError: not a forward transition.
        """
        return self._update_status(order_id, new_status, caller, notes)

    @transaction.atomic
    def _update_status(
        self, order_id: Any, new_status: str, caller: Caller, notes: str
    ) -> Order:
        if new_status not in OrderStatus.values:
            raise ValidationError(
                f"Unknown order status '{new_status}'.",
                details=[{"field": "status", "message": "Invalid choice."}],
            )

        order = self._lock(order_id)
        if not (caller.is_admin or self._is_seller(order, caller)):
            raise AuthorizationError(
                "Only an admin or a farmer selling in this order can update its status."
            )

        if new_status == OrderStatus.CANCELLED:
            return self._cancel(order, caller, notes)

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )
        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidTransitionError(order.status, new_status)

        old_status = order.status
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                actor_id=caller.id,
                old_status=old_status,
                new_status=new_status,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=old_status,
            new_status=new_status,
            actor_id=caller.id,
            notes=notes,
        )

        log.info("order.status_updated", actor_id=str(caller.id))
        return self._hydrate(order)

    @retry_on_conflict(_max_write_attempts)
    def cancel_order(self, order_id: Any, caller: Caller, reason: str = "") -> Order:
        """Cancel an order and put its stock back.

        Buyers cancel their own orders while ``processing``; sellers and
        admins while ``processing`` or ``shipped``.

        Raises:
            ValidationError: malformed id.
            OrderNotFound: order does not exist.
            AuthorizationError: caller has no stake in the order.
            InvalidTransitionError: order already delivered or cancelled,
                or a buyer cancelling after shipment.
        """
        return self._cancel_order(order_id, caller, reason)

    @transaction.atomic
    def _cancel_order(self, order_id: Any, caller: Caller, reason: str) -> Order:
        order = self._lock(order_id)
        is_owner = order.buyer_id == caller.id
        if not (is_owner or caller.is_admin or self._is_seller(order, caller)):
            raise AuthorizationError("You are not allowed to cancel this order.")
        return self._cancel(order, caller, reason)

    @retry_on_conflict(_max_write_attempts)
    def update_payment_status(
        self,
        order_id: Any,
        payment_status: str,
        caller: Caller,
        transaction_id: Optional[str] = None,
        notes: str = "",
    ) -> Order:
        """Record a payment status reported by an admin or processor.

        Independent of the order status; never touches stock.
        """
        return self._update_payment_status(
            order_id, payment_status, caller, transaction_id, notes
        )

    @transaction.atomic
    def _update_payment_status(
        self,
        order_id: Any,
        payment_status: str,
        caller: Caller,
        transaction_id: Optional[str],
        notes: str,
    ) -> Order:
        if caller.role not in (Role.ADMIN, Role.PAYMENT_PROCESSOR):
            raise AuthorizationError(
                "Only an admin or a payment processor can update payments."
            )
        if payment_status not in PaymentStatus.values:
            raise ValidationError(
                f"Unknown payment status '{payment_status}'.",
                details=[{"field": "paymentStatus", "message": "Invalid choice."}],
            )

        order = self._lock(order_id)
        old_payment_status = order.payment_status
        order.payment_status = payment_status
        if transaction_id:
            order.transaction_id = transaction_id
        order.add_domain_event(
            OrderPaymentStatusChanged(
                aggregate_id=order.id,
                actor_id=caller.id,
                old_payment_status=old_payment_status,
                new_payment_status=payment_status,
                transaction_id=transaction_id,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_payment_history(
            order_id=order.id,
            old_payment_status=old_payment_status,
            new_payment_status=payment_status,
            actor_id=caller.id,
            transaction_id=transaction_id or "",
            notes=notes,
        )

        logger.info(
            "order.payment_updated",
            order_id=str(order.id),
            old_payment_status=old_payment_status,
            new_payment_status=payment_status,
            actor_id=str(caller.id),
        )
        return self._hydrate(order)

    @retry_on_conflict(_max_write_attempts)
    def delete_order(self, order_id: Any, caller: Caller) -> None:
        """Administrative soft delete.  Stock is left untouched."""
        self._delete_order(order_id, caller)

    @transaction.atomic
    def _delete_order(self, order_id: Any, caller: Caller) -> None:
        if not caller.is_admin:
            raise AuthorizationError("Only an admin can delete orders.")
        parsed = self._parse_id(order_id)
        if not self._order_repo.delete(str(parsed)):
            raise OrderNotFound()
        logger.info("order.deleted", order_id=str(parsed), actor_id=str(caller.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any, caller: Caller) -> Order:
        """Retrieve one order the caller is allowed to see.

        Raises:
            ValidationError: ``order_id`` is not a UUID.
            OrderNotFound: no live order with that id.
            AuthorizationError: caller is not the buyer, a seller in the
                order, or an admin.
        """
        parsed = self._parse_id(order_id)
        order = self._order_repo.get_by_id(str(parsed))
        if not order:
            raise OrderNotFound()
        if not (
            caller.is_admin
            or order.buyer_id == caller.id
            or self._is_seller(order, caller)
        ):
            logger.warning(
                "order.access_denied", order_id=str(parsed), actor_id=str(caller.id)
            )
            raise AuthorizationError("You are not allowed to view this order.")
        return order

    def list_orders(self, caller: Caller, scope: str = SCOPE_MINE) -> "models.QuerySet[Order]":
        """Lazy queryset of the orders visible to ``caller`` in ``scope``.

        ``mine``: orders placed by the caller.  ``received``: orders with
        a line item sold by the caller (farmers).  ``all``: admins only.
        """
        if scope == SCOPE_MINE:
            return self._order_repo.for_buyer(caller.id)
        if scope == SCOPE_RECEIVED:
            if caller.role != Role.FARMER:
                raise AuthorizationError("Only farmers receive orders.")
            return self._order_repo.received_by(caller.id)
        if scope == SCOPE_ALL:
            if not caller.is_admin:
                raise AuthorizationError("Only an admin can list every order.")
            return self._order_repo.list()
        raise ValidationError(
            f"Unknown order scope '{scope}'.",
            details=[{"field": "scope", "message": f"Expected one of {', '.join(SCOPES)}."}],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cancel(self, order: Order, caller: Caller, reason: str) -> Order:
        log = logger.bind(order_id=str(order.id), current_status=order.status)

        if not order.can_transition_to(OrderStatus.CANCELLED):
            log.warning("order.cancel_not_allowed")
            raise InvalidTransitionError(order.status, OrderStatus.CANCELLED)

        acting_as_buyer = order.buyer_id == caller.id and not caller.is_admin
        if acting_as_buyer and order.status not in BUYER_CANCELLABLE_STATES:
            log.warning("order.buyer_cancel_too_late")
            raise InvalidTransitionError(order.status, OrderStatus.CANCELLED)

        restored = 0
        for item in order.items.exclude(product_id=None).order_by("product_id"):
            product = self._product_repo.get_for_update(
                str(item.product_id), include_deleted=True
            )
            if not product:
                log.warning("order.stock_restore_skipped", product_id=str(item.product_id))
                continue
            self._product_repo.adjust_quantity(str(product.id), item.quantity)
            restored += item.quantity
            log.info(
                "order.stock_released",
                product_id=str(product.id),
                quantity=item.quantity,
                restored_stock=product.quantity + item.quantity,
            )

        old_status = order.status
        order.status = OrderStatus.CANCELLED
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                actor_id=caller.id,
                old_status=old_status,
                reason=reason,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=old_status,
            new_status=OrderStatus.CANCELLED,
            actor_id=caller.id,
            notes=reason or "Order cancelled",
        )

        log.info("order.cancelled", actor_id=str(caller.id), restored_units=restored)
        return self._hydrate(order)

    def _lock(self, order_id: Any) -> Order:
        parsed = self._parse_id(order_id)
        order = self._order_repo.get_for_update(str(parsed))
        if not order:
            raise OrderNotFound()
        return order

    def _hydrate(self, order: Order) -> Order:
        return self._order_repo.get_by_id(str(order.id)) or order

    def _is_seller(self, order: Order, caller: Caller) -> bool:
        return caller.role == Role.FARMER and self._order_repo.has_items_from(
            order.id, caller.id
        )

    @staticmethod
    def _parse_id(order_id: Any) -> UUID:
        if isinstance(order_id, UUID):
            return order_id
        try:
            return UUID(str(order_id))
        except ValueError:
            raise ValidationError(
                "Invalid order id.",
                details=[{"field": "id", "message": "Must be a valid UUID."}],
            ) from None
