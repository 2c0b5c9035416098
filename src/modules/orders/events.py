"""Domain events for the Orders bounded context.

Extra fields are keyword-only so they can follow the optional fields of
``DomainEvent``; every value is JSON-friendly for the outbox payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    order_number: str
    buyer_id: str
    total_amount: str
    farmer_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    old_status: str
    new_status: str


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock restored."""

    old_status: str
    reason: str = ""


@dataclass(frozen=True, kw_only=True)
class OrderPaymentStatusChanged(DomainEvent):
    old_payment_status: str
    new_payment_status: str
    transaction_id: Optional[str] = None
