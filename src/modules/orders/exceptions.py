"""Order domain exceptions.

All derive from the shared taxonomy in ``modules.core.exceptions`` so the
envelope handler maps them to HTTP without per-view ``try`` blocks.
"""

from __future__ import annotations

from modules.core.exceptions import NotFoundError, ValidationError


class OrderNotFound(NotFoundError):
    """The order does not exist or has been soft-deleted."""

    default_message = "Order not found."


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the product's current stock."""

    code = "insufficient_stock"

    def __init__(
        self, product_id: str, product_name: str, requested: int, available: int
    ) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}: "
            f"requested {requested}, available {available}.",
            details=[
                {
                    "field": "products",
                    "message": "Insufficient stock.",
                    "product": product_id,
                    "requested": requested,
                    "available": available,
                }
            ],
        )


class InvalidTransitionError(ValidationError):
    """The requested status change is not a forward transition."""

    code = "invalid_transition"

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change order status from '{current}' to '{requested}'.",
            details=[{"field": "status", "current": current, "requested": requested}],
        )
