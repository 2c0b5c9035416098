"""Account domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError


class AccountAlreadyExists(ConflictError):
    """The e-mail address is already registered."""

    code = "account_exists"
    default_message = "Email already registered."
    retryable = False


class AccountNotFound(NotFoundError):
    default_message = "Account not found."
