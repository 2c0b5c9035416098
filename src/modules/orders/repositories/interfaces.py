"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
atomic creation with line items, row locking, role-scoped listings and
the two append-only histories.  ``OrderService`` depends only on this
contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory, PaymentStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and both history tables.
    Mutations run inside the caller's ``transaction.atomic()`` block.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its line items.

        ``data`` must include ``buyer_id``, ``shipping_address`` (dict),
        ``payment_method``, ``notes`` and ``items``: dicts with
        ``product_id``, ``farmer_id``, ``product_name``,
        ``product_image``, ``quantity`` and ``unit_price``.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Live order with buyer, items and both histories eager-loaded."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Live order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """Lazy, eager-loading queryset of live orders."""

    @abstractmethod
    def for_buyer(self, buyer_id: UUID) -> "models.QuerySet[Order]":
        """Orders placed by ``buyer_id``."""

    @abstractmethod
    def received_by(self, farmer_id: UUID) -> "models.QuerySet[Order]":
        """Orders with at least one line item sold by ``farmer_id``."""

    @abstractmethod
    def has_items_from(self, order_id: UUID, farmer_id: UUID) -> bool:
        """Whether the order contains a line item sold by ``farmer_id``."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        old_status: Optional[str],
        new_status: str,
        actor_id: Optional[UUID] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Append a status change to the order's audit trail."""

    @abstractmethod
    def add_payment_history(
        self,
        order_id: UUID,
        old_payment_status: str,
        new_payment_status: str,
        actor_id: Optional[UUID] = None,
        transaction_id: str = "",
        notes: str = "",
    ) -> PaymentStatusHistory:
        """Append a payment reconciliation entry."""
