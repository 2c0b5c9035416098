"""Account service layer.

Owns registration and the translation of an authenticated Django user
into the ``Caller`` every other service receives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.accounts.dtos import Caller
from modules.accounts.exceptions import AccountAlreadyExists, AccountNotFound
from modules.core.exceptions import AuthorizationError

if TYPE_CHECKING:
    from modules.accounts.dtos import RegisterAccountDTO
    from modules.accounts.models import Account
    from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for account use-cases.

    Receives an ``IAccountRepository`` via constructor injection.
    """

    def __init__(self, repository: IAccountRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register(self, dto: RegisterAccountDTO) -> Account:
        """Create the auth user and the marketplace account atomically.

        Raises:
            AccountAlreadyExists: the e-mail is taken, even by a
                soft-deleted account.
        """
        log = logger.bind(role=dto.role)

        if self._repo.get_by_email(dto.email):
            log.warning("account.duplicate_email")
            raise AccountAlreadyExists()

        try:
            with transaction.atomic():
                account = self._repo.create_with_user(
                    email=dto.email,
                    password=dto.password,
                    name=dto.name,
                    role=dto.role,
                    contact=dto.contact,
                    farm_name=dto.farm_name,
                    latitude=dto.latitude,
                    longitude=dto.longitude,
                )
        except IntegrityError as exc:
            # Lost a race against a concurrent registration for the same e-mail.
            log.warning("account.duplicate_email", race=True)
            raise AccountAlreadyExists() from exc

        log.info("account.registered", account_id=str(account.id))
        return account

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_account(self, id: str) -> Account:
        account = self._repo.get_by_id(id)
        if not account:
            raise AccountNotFound()
        return account

    def get_for_user(self, user: Any) -> Account:
        """Return the active account bound to ``user``.

        Raises:
            AuthorizationError: anonymous user, no account, or the
                account was deactivated.
        """
        account: Optional[Account] = None
        if user is not None and getattr(user, "is_authenticated", False):
            account = self._repo.get_by_user_id(user.pk)
        if account is None or not account.is_active:
            logger.info(
                "account.caller_rejected",
                user_id=getattr(user, "pk", None),
                has_account=account is not None,
            )
            raise AuthorizationError("An active marketplace account is required.")
        return account

    def resolve_caller(self, user: Any) -> Caller:
        account = self.get_for_user(user)
        return Caller(id=account.id, role=account.role)
