"""Marketplace roles."""

from django.db import models


class Role(models.TextChoices):
    FARMER = "farmer", "Farmer"
    BUYER = "buyer", "Buyer"
    ADMIN = "admin", "Admin"
    PAYMENT_PROCESSOR = "payment_processor", "Payment processor"


# Roles a visitor may pick when registering; the others are granted by staff.
SELF_REGISTRATION_ROLES: frozenset[str] = frozenset({Role.FARMER, Role.BUYER})
