"""Role-based DRF permissions.

The role is always re-read from the ``Account`` row rather than trusted
from token claims, and the lookup is cached on the request so a view and
its permissions share one query.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from modules.accounts.constants import Role
from modules.accounts.models import Account

_CACHE_ATTR = "_marketplace_account"


def request_account(request: Request) -> Optional[Account]:
    """Active account of the requesting user, or ``None``."""
    if hasattr(request, _CACHE_ATTR):
        return getattr(request, _CACHE_ATTR)

    account: Optional[Account] = None
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        account = (
            Account.objects.alive().filter(user_id=user.pk, is_active=True).first()
        )
    setattr(request, _CACHE_ATTR, account)
    return account


class RoleRequired(BasePermission):
    """Grant access when the caller's account holds one of ``required_roles``.

    An empty ``required_roles`` only requires an active account.
    """

    required_roles: Iterable[str] = ()
    message = "Your account role does not allow this action."

    def has_permission(self, request: Request, view) -> bool:
        account = request_account(request)
        if account is None:
            return False
        roles = set(self.required_roles)
        return not roles or account.role in roles


class HasAccount(RoleRequired):
    message = "An active marketplace account is required."


class IsBuyer(RoleRequired):
    required_roles = (Role.BUYER,)


class IsFarmer(RoleRequired):
    required_roles = (Role.FARMER,)


class IsAdmin(RoleRequired):
    required_roles = (Role.ADMIN,)


class IsFarmerOrAdmin(RoleRequired):
    required_roles = (Role.FARMER, Role.ADMIN)


class IsAdminOrPaymentProcessor(RoleRequired):
    required_roles = (Role.ADMIN, Role.PAYMENT_PROCESSOR)
