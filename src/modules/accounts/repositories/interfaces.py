"""Account repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    """Repository contract for marketplace accounts."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Account]":
        """List live accounts with optional filters."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Account]:
        """Retrieve an account by e-mail, including soft-deleted ones."""

    @abstractmethod
    def get_by_user_id(self, user_id: int) -> Optional[Account]:
        """Retrieve the live account bound to an auth user."""

    @abstractmethod
    def create_with_user(
        self, *, email: str, password: str, **fields: Any
    ) -> Account:
        """Create the auth user and its account in one transaction."""
