"""Unit tests for the envelope exception handler."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions

from modules.core.exception_handler import envelope_exception_handler
from modules.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from modules.orders.exceptions import InsufficientStock

pytestmark = pytest.mark.unit


def _handle(exc):
    return envelope_exception_handler(exc, {"view": None})


class _Quantity(BaseModel):
    quantity: int = Field(ge=1)


class TestDomainErrors:
    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (ValidationError(), 400),
            (NotFoundError(), 404),
            (AuthorizationError(), 403),
            (ConflictError(), 409),
        ],
    )
    def test_status_codes(self, exc, status):
        response = _handle(exc)
        assert response.status_code == status
        assert response.data["success"] is False
        assert response.data["error"] == exc.message

    def test_details_included(self):
        response = _handle(InsufficientStock("p-1", "Yams", 10, 3))
        assert response.status_code == 400
        assert response.data["error"] == (
            "Insufficient stock for Yams: requested 10, available 3."
        )
        assert response.data["details"][0]["available"] == 3

    def test_conflict_sets_retry_after(self):
        response = _handle(ConflictError())
        assert response["Retry-After"] == "1"

    def test_no_details_key_when_empty(self):
        assert "details" not in _handle(NotFoundError()).data


class TestFrameworkErrors:
    def test_pydantic_validation_error(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            _Quantity(quantity=0)

        response = _handle(exc_info.value)

        assert response.status_code == 400
        assert response.data["error"] == "Validation failed."
        assert response.data["details"][0]["field"] == "quantity"

    def test_serializer_errors_flattened(self):
        exc = drf_exceptions.ValidationError(
            {"shippingAddress": {"city": ["This field is required."]}}
        )
        response = _handle(exc)
        assert response.status_code == 400
        assert response.data["details"] == [
            {"field": "shippingAddress.city", "message": "This field is required."}
        ]

    def test_permission_denied(self):
        response = _handle(drf_exceptions.PermissionDenied("Nope."))
        assert response.status_code == 403
        assert response.data == {"success": False, "error": "Nope."}

    def test_unhandled_error_is_generic_500(self):
        response = _handle(RuntimeError("secret internals"))
        assert response.status_code == 500
        assert response.data == {"success": False, "error": "Internal server error."}
