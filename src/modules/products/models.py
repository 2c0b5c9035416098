"""Product listed by a farmer.

Rules implemented here:
- ``price`` is never negative (DB check constraint).
- ``quantity`` is never negative: ``PositiveIntegerField`` plus a named
  check constraint, so even a raw ``UPDATE`` cannot oversell.
- Soft delete via ``deleted_at``; order line items keep pointing at the row.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel


class Product(SoftDeleteModel):
    farmer = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity = models.PositiveIntegerField(default=0)
    category = models.CharField(max_length=100)
    images = models.JSONField(default=list, blank=True)
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )

    class Meta:
        db_table = "products"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(
                fields=["latitude", "longitude"], name="products_location_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="products_quantity_non_negative",
            ),
        ]

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def coordinates(self) -> Optional[tuple[float, float]]:
        if not self.has_location:
            return None
        return float(self.latitude), float(self.longitude)

    def __str__(self) -> str:
        return f"{self.name} ({self.quantity} in stock)"
