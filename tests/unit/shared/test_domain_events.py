"""Unit tests for domain event primitives."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import pytest

from modules.orders.events import OrderCancelled, OrderCreated
from modules.orders.models import Order

pytestmark = pytest.mark.unit


def _created(**overrides) -> OrderCreated:
    data = {
        "aggregate_id": uuid4(),
        "order_number": "ORD-20260101-000001",
        "buyer_id": str(uuid4()),
        "total_amount": "12.50",
    }
    data.update(overrides)
    return OrderCreated(**data)


def test_order_registers_and_clears_domain_events():
    order = Order(order_number="ORD-20260101-000001")

    assert order.domain_events == []

    event = _created(aggregate_id=order.id)
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderCreated"

    order.clear_domain_events()
    assert order.domain_events == []


def test_events_are_frozen():
    event = _created()
    with pytest.raises(AttributeError):
        event.total_amount = "0.00"


def test_payload_is_json_friendly():
    actor = uuid4()
    event = _created(actor_id=actor, farmer_ids=["f-1", "f-2"])

    payload = event.to_payload()

    assert payload["aggregate_id"] == str(event.aggregate_id)
    assert payload["actor_id"] == str(actor)
    assert payload["event_name"] == "OrderCreated"
    assert payload["farmer_ids"] == ["f-1", "f-2"]
    assert isinstance(payload["occurred_on"], str)


def test_from_payload_rebuilds_event():
    original = _created(actor_id=uuid4())

    rebuilt = OrderCreated.from_payload(original.to_payload())

    assert rebuilt == original
    assert isinstance(rebuilt.aggregate_id, UUID)
    assert isinstance(rebuilt.occurred_on, datetime)


def test_from_payload_ignores_unknown_keys():
    payload = OrderCancelled(aggregate_id=uuid4(), old_status="shipped").to_payload()
    payload["legacy_field"] = "x"

    rebuilt = OrderCancelled.from_payload(payload)

    assert rebuilt.old_status == "shipped"
    assert rebuilt.reason == ""
    assert rebuilt.actor_id is None
