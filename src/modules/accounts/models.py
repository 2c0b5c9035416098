"""Marketplace account bound to a Django auth user.

The auth user holds credentials (hashed password, JWT subject); the
account holds the marketplace identity: role, contact data and, for
farmers, the farm name and location used by the catalog's radius search.
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.accounts.constants import Role
from modules.core.models import SoftDeleteModel


class Account(SoftDeleteModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="account",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    contact = models.CharField(max_length=50)
    farm_name = models.CharField(max_length=255, blank=True, default="")
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
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "accounts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"], name="accounts_role_idx"),
        ]

    # ------------------------------------------------------------------
    # Role helpers
    # ------------------------------------------------------------------

    @property
    def is_farmer(self) -> bool:
        return self.role == Role.FARMER

    @property
    def is_buyer(self) -> bool:
        return self.role == Role.BUYER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"
