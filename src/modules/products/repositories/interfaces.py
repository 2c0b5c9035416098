"""Product repository interface.

Besides the CRUD contract, exposes the two primitives the order engine
uses inside its own transaction: a row-locking read and a conditional
quantity adjustment.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.geo import BoundingBox
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional filters."""

    @abstractmethod
    def get_for_update(
        self, id: str, include_deleted: bool = False
    ) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic()``.  Returns ``None``
        if the product does not exist, or was soft-deleted and
        ``include_deleted`` is false.
        """

    @abstractmethod
    def adjust_quantity(self, id: str, delta: int) -> bool:
        """Add ``delta`` (negative to reserve) to the product's quantity.

        The update is conditional: it affects no row, and returns
        ``False``, when it would drive the quantity below zero.
        """

    @abstractmethod
    def list_within(
        self, queryset: "models.QuerySet[Product]", box: BoundingBox
    ) -> List[Product]:
        """Products of ``queryset`` with coordinates inside ``box``."""

