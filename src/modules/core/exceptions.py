"""Domain error taxonomy shared by every module.

Services raise these; ``modules.core.exception_handler`` turns them into
the ``{"success": false, "error": ..., "details": [...]}`` envelope.  Each
class carries the HTTP status and a machine-readable ``code``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = 400
    code: str = "domain_error"
    default_message: str = "Request could not be processed."

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed or missing input.  Never retried."""

    status_code = 400
    code = "validation_error"
    default_message = "Validation failed."


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class AuthorizationError(DomainError):
    """The caller's role or ownership does not allow the operation."""

    status_code = 403
    code = "forbidden"
    default_message = "You are not allowed to perform this action."


class ConflictError(DomainError):
    """A transaction was aborted by concurrent activity; safe to retry."""

    status_code = 409
    code = "conflict"
    default_message = "The resource is busy, please retry."
    retryable = True
    retry_after_seconds = 1


class InternalError(DomainError):
    status_code = 500
    code = "internal_error"
    default_message = "Internal server error."
