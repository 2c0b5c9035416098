"""Unit tests for OrderDjangoRepository.

Covers:
- Aggregate creation (Order + OrderItems) with totals.
- Read with select/prefetch (N+1 prevention).
- Buyer and farmer scoped querysets.
- Status and payment histories.
- Save flushing domain events into the outbox.
- Soft delete and malformed IDs.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.events import OrderStatusChanged
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.repositories.interfaces import IOrderRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def order_data(buyer, make_product, farmer):
    tomatoes = make_product(name="Tomatoes", price=Decimal("10.00"))
    yams = make_product(name="Yams", price=Decimal("25.50"))
    return {
        "buyer_id": buyer.id,
        "shipping_address": {"street": "1 Rd", "city": "Accra", "country": "Ghana"},
        "payment_method": "cash",
        "notes": "Leave at the gate",
        "items": [
            {
                "product_id": tomatoes.id,
                "farmer_id": farmer.id,
                "product_name": tomatoes.name,
                "quantity": 2,
                "unit_price": tomatoes.price,
            },
            {
                "product_id": yams.id,
                "farmer_id": farmer.id,
                "product_name": yams.name,
                "quantity": 1,
                "unit_price": yams.price,
            },
        ],
    }


class TestRepositoryInstantiation:
    def test_is_instance_of_interface(self):
        assert isinstance(OrderDjangoRepository(), IOrderRepository)


# ===========================================================================
# create
# ===========================================================================


class TestCreate:
    def test_creates_order_with_items(self, repo, order_data):
        order = repo.create(order_data)

        assert order.order_number.startswith("ORD-")
        assert order.status == OrderStatus.PROCESSING
        assert order.notes == "Leave at the gate"
        assert order.shipping_postal_code == ""
        assert OrderItem.objects.filter(order=order).count() == 2

    def test_calculates_total_amount(self, repo, order_data):
        order = repo.create(order_data)
        order.refresh_from_db()
        # 2 * 10.00 + 1 * 25.50
        assert order.total_amount == Decimal("45.50")

    def test_items_snapshot(self, repo, order_data):
        order = repo.create(order_data)
        items = list(OrderItem.objects.filter(order=order))

        assert [i.product_name for i in items] == ["Tomatoes", "Yams"]
        assert [i.subtotal for i in items] == [Decimal("20.00"), Decimal("25.50")]


# ===========================================================================
# Reads
# ===========================================================================


class TestGetById:
    def test_returns_hydrated_order(self, repo, order_data, django_assert_num_queries):
        created = repo.create(order_data)

        # 1 order+buyer, 3 prefetches
        with django_assert_num_queries(4):
            order = repo.get_by_id(str(created.id))
            assert order.buyer.name
            assert len(order.items.all()) == 2
            assert list(order.status_history.all()) == []
            assert list(order.payment_history.all()) == []

    def test_returns_none_when_not_found(self, repo):
        assert repo.get_by_id(str(uuid4())) is None

    def test_returns_none_for_invalid_uuid(self, repo):
        assert repo.get_by_id("not-a-uuid") is None
        assert repo.get_for_update("not-a-uuid") is None

    def test_hides_soft_deleted(self, repo, order_data):
        order = repo.create(order_data)
        repo.delete(str(order.id))
        assert repo.get_by_id(str(order.id)) is None


class TestScopedQuerysets:
    def test_list_filters(self, repo, order_data):
        repo.create(order_data)
        assert repo.list().count() == 1
        assert repo.list({"status": OrderStatus.SHIPPED}).count() == 0

    def test_for_buyer(self, repo, order_data, buyer, other_buyer):
        repo.create(order_data)
        assert repo.for_buyer(buyer.id).count() == 1
        assert repo.for_buyer(other_buyer.id).count() == 0

    def test_received_by_is_distinct(self, repo, order_data, farmer, other_farmer):
        order = repo.create(order_data)

        assert [o.id for o in repo.received_by(farmer.id)] == [order.id]
        assert repo.received_by(other_farmer.id).count() == 0

    def test_has_items_from(self, repo, order_data, farmer, other_farmer):
        order = repo.create(order_data)
        assert repo.has_items_from(order.id, farmer.id)
        assert not repo.has_items_from(order.id, other_farmer.id)


# ===========================================================================
# Histories
# ===========================================================================


class TestHistories:
    def test_add_history(self, repo, order_data, farmer):
        order = repo.create(order_data)
        history = repo.add_history(
            order.id,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            actor_id=farmer.id,
            notes="On the truck",
        )

        assert history.order_id == order.id
        assert history.old_status == OrderStatus.PROCESSING
        assert history.new_status == OrderStatus.SHIPPED
        assert history.actor_id == farmer.id
        assert OrderStatusHistory.objects.filter(order=order).count() == 1

    def test_add_payment_history(self, repo, order_data, payment_processor):
        order = repo.create(order_data)
        history = repo.add_payment_history(
            order.id,
            PaymentStatus.PENDING,
            PaymentStatus.PAID,
            actor_id=payment_processor.id,
            transaction_id="TXN-42",
        )

        assert history.new_payment_status == PaymentStatus.PAID
        assert history.transaction_id == "TXN-42"
        assert order.payment_history.count() == 1


# ===========================================================================
# save / delete
# ===========================================================================


class TestSave:
    def test_flushes_domain_events_to_outbox(self, repo, order_data):
        order = repo.create(order_data)
        order.status = OrderStatus.SHIPPED
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=OrderStatus.PROCESSING,
                new_status=OrderStatus.SHIPPED,
            )
        )

        repo.save(order)

        assert order.domain_events == []
        assert Order.objects.get(pk=order.pk).status == OrderStatus.SHIPPED
        event = OutboxEvent.objects.get()
        assert event.event_type == "OrderStatusChanged"
        assert event.aggregate_id == str(order.id)
        assert event.topic == "orders"
        assert event.status == EventStatus.PENDING
        assert event.payload["new_status"] == "shipped"

    def test_save_without_events_writes_no_outbox_rows(self, repo, order_data):
        order = repo.create(order_data)
        repo.save(order)
        assert OutboxEvent.objects.count() == 0


class TestDelete:
    def test_soft_deletes_order(self, repo, order_data):
        order = repo.create(order_data)
        assert repo.delete(str(order.id)) is True
        order.refresh_from_db()
        assert order.deleted_at is not None

    def test_returns_false_for_nonexistent(self, repo):
        assert repo.delete(str(uuid4())) is False
