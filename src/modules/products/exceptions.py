"""Product domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import AuthorizationError, NotFoundError


class ProductNotFound(NotFoundError):
    """The product does not exist or has been soft-deleted."""

    default_message = "Product not found."


class NotProductOwner(AuthorizationError):
    default_message = "Only the farmer who listed this product can change it."
