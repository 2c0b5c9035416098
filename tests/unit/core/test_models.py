"""Unit tests for BaseModel and SoftDeleteModel.

``OrderStatusHistory`` stands in for a plain ``BaseModel`` and ``Product``
for a ``SoftDeleteModel``.
"""

from __future__ import annotations

import uuid

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.models import SoftDeleteManager, SoftDeleteQuerySet
from modules.orders.constants import OrderStatus
from modules.orders.models import OrderStatusHistory
from modules.products.models import Product

pytestmark = pytest.mark.unit


@pytest.fixture()
def history(place_order, product):
    order = place_order([(product, 1)])
    return OrderStatusHistory.objects.get(order=order)


# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class TestBaseModel:
    def test_id_is_uuid_version_7(self, history):
        assert isinstance(history.id, uuid.UUID)
        assert history.id.version == 7

    def test_ids_are_time_ordered(self, make_product):
        first = make_product()
        second = make_product()
        assert str(first.id) < str(second.id)

    def test_id_is_not_editable(self):
        assert Product._meta.get_field("id").editable is False

    def test_updated_at_changes_on_save(self, history):
        original = history.updated_at
        history.notes = "edited"
        history.save()
        history.refresh_from_db()
        assert history.updated_at > original
        assert history.new_status == OrderStatus.PROCESSING

    def test_save_with_update_fields_includes_updated_at(self, product):
        original = product.updated_at
        product.name = "Heirloom Tomatoes"
        product.save(update_fields=["name"])
        product.refresh_from_db()
        assert product.updated_at > original
        assert product.name == "Heirloom Tomatoes"

    def test_created_at_does_not_change_on_save(self, product):
        created = product.created_at
        product.save()
        product.refresh_from_db()
        assert product.created_at == created


# ---------------------------------------------------------------------------
# SoftDeleteModel
# ---------------------------------------------------------------------------


class TestSoftDeleteModel:
    def test_delete_returns_django_style_result(self, product):
        assert product.delete() == (1, {"products.Product": 1})
        assert product.delete() == (0, {})

    def test_alive_and_dead(self, make_product):
        alive = make_product()
        dead = make_product()
        dead.delete()

        assert list(Product.objects.alive().values_list("pk", flat=True)) == [alive.pk]
        assert list(Product.objects.dead().values_list("pk", flat=True)) == [dead.pk]

    def test_restore_is_noop_if_alive(self, product):
        updated = product.updated_at
        product.restore()
        product.refresh_from_db()
        assert product.updated_at == updated

    def test_restore_updates_updated_at(self, product):
        product.delete()
        product.refresh_from_db()
        after_delete = product.updated_at
        product.restore()
        product.refresh_from_db()
        assert product.deleted_at is None
        assert product.updated_at > after_delete

    @freeze_time("2030-06-15 12:00:00")
    def test_delete_records_exact_timestamp(self, product):
        product.delete()
        product.refresh_from_db()
        assert product.deleted_at == timezone.now()


class TestSoftDeleteQuerySet:
    def test_bulk_delete_skips_already_deleted(self, make_product):
        a = make_product()
        b = make_product()
        a.delete()

        count, details = Product.objects.filter(pk__in=[a.pk, b.pk]).delete()

        assert count == 1
        assert details == {"products.Product": 1}
        b.refresh_from_db()
        assert b.is_deleted

    def test_bulk_delete_updates_updated_at(self, product):
        original = product.updated_at
        Product.objects.filter(pk=product.pk).delete()
        product.refresh_from_db()
        assert product.updated_at > original

    def test_queryset_hard_delete(self, make_product):
        a = make_product()
        Product.objects.filter(pk=a.pk).hard_delete()
        assert not Product.objects.filter(pk=a.pk).exists()

    def test_manager_types(self):
        assert isinstance(Product.objects, SoftDeleteManager)
        assert isinstance(Product.objects.all(), SoftDeleteQuerySet)
