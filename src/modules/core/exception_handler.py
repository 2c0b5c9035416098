"""DRF exception handler producing the uniform error envelope.

Registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``.  Translates:

- ``DomainError`` subclasses raised by services,
- pydantic ``ValidationError`` raised while building DTOs,
- DRF's own ``APIException`` family (parse, auth, permission, throttle,
  serializer validation, 404),

into ``{"success": false, "error": str, "details"?: list}``.  Anything
else is logged with its traceback and answered with a generic 500 so no
internals leak to the caller.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.exceptions import ConflictError, DomainError, InternalError
from modules.core.responses import error_body

logger = structlog.get_logger(__name__)


def envelope_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else None

    if isinstance(exc, DomainError):
        log = logger.bind(view=view_name, error_code=exc.code)
        if exc.status_code >= 500:
            log.error("api.domain_error", error=exc.message)
        else:
            log.info("api.domain_error", error=exc.message)
        response = Response(
            error_body(exc.message, exc.details), status=exc.status_code
        )
        if isinstance(exc, ConflictError) and exc.retryable:
            response["Retry-After"] = str(exc.retry_after_seconds)
        return response

    if isinstance(exc, PydanticValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return Response(
            error_body("Validation failed.", details),
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, drf_exceptions.ValidationError):
            response.data = error_body(
                "Validation failed.", list(_flatten_errors(response.data))
            )
        else:
            response.data = error_body(_detail_message(response.data))
        return response

    logger.exception("api.unhandled_error", view=view_name)
    return Response(
        error_body(InternalError.default_message),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _detail_message(data: Any) -> str:
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def _flatten_errors(data: Any, prefix: str = "") -> Iterator[Dict[str, str]]:
    if isinstance(data, dict):
        for key, value in data.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            yield from _flatten_errors(value, field)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, (dict, list)):
                field = f"{prefix}.{index}" if prefix else str(index)
                yield from _flatten_errors(item, field)
            else:
                yield {"field": prefix or "non_field_errors", "message": str(item)}
    else:
        yield {"field": prefix or "non_field_errors", "message": str(data)}
