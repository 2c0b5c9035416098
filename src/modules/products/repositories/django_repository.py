"""Django ORM implementation of the Product repository.

Lookups return ``None`` for missing, soft-deleted or malformed ids; the
service decides which domain error that becomes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.geo import BoundingBox
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.alive().select_related("farmer").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """Live products, farmer eager-loaded.

        Examples of valid filters::

            {"category__iexact": "vegetables"}
            {"farmer_id": account.id}
        """
        queryset = Product.objects.alive().select_related("farmer")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Inventory primitives (run inside the caller's transaction)
    # ------------------------------------------------------------------

    def get_for_update(
        self, id: str, include_deleted: bool = False
    ) -> Optional[Product]:
        queryset = Product.objects.select_for_update()
        if not include_deleted:
            queryset = queryset.alive()
        try:
            return queryset.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def adjust_quantity(self, id: str, delta: int) -> bool:
        queryset = Product.objects.filter(id=id)
        if delta < 0:
            queryset = queryset.filter(quantity__gte=-delta)
        updated = queryset.update(
            quantity=F("quantity") + delta, updated_at=timezone.now()
        )
        if not updated:
            logger.warning(
                "product.quantity_adjust_refused", product_id=str(id), delta=delta
            )
        return bool(updated)

    # ------------------------------------------------------------------
    # Geo
    # ------------------------------------------------------------------

    def list_within(
        self, queryset: "models.QuerySet[Product]", box: BoundingBox
    ) -> List[Product]:
        return list(
            queryset.filter(
                latitude__isnull=False,
                longitude__isnull=False,
                latitude__gte=box.min_lat,
                latitude__lte=box.max_lat,
                longitude__gte=box.min_lng,
                longitude__lte=box.max_lng,
            )
        )
