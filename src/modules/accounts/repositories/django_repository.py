"""Django ORM implementation of the Account repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.accounts.models import Account
from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    def get_by_id(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Account]":
        queryset = Account.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        entity.save()
        logger.info("account.saved", account_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        account = self.get_by_id(id)
        if not account:
            return False
        account.delete()
        logger.info("account.soft_deleted", account_id=str(id))
        return True

    def get_by_email(self, email: str) -> Optional[Account]:
        return Account.objects.filter(email=email.strip().lower()).first()

    def get_by_user_id(self, user_id: int) -> Optional[Account]:
        return Account.objects.alive().filter(user_id=user_id).first()

    @transaction.atomic
    def create_with_user(self, *, email: str, password: str, **fields: Any) -> Account:
        User = get_user_model()
        user = User.objects.create_user(username=email[:150], email=email, password=password)
        account = Account(user=user, email=email, **fields)
        account.save()
        logger.info("account.created", account_id=str(account.id), role=account.role)
        return account
