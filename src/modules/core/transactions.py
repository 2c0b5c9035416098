"""Bounded retry for transactions aborted by the database.

Lock-wait timeouts, deadlocks and SQLite's "database is locked" all
surface as ``django.db.OperationalError``.  The decorated callable must
own its whole ``transaction.atomic()`` block so that a retry replays the
unit of work from scratch.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, TypeVar

import structlog
from django.db import OperationalError

from modules.core.exceptions import ConflictError

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry_on_conflict(
    max_attempts: int | Callable[[], int] = 2,
    delay: float = 0.05,
    backoff: float = 2.0,
) -> Callable[[F], F]:
    """Retry on ``OperationalError``; raise ``ConflictError`` once exhausted.

    ``max_attempts`` counts the first call, so ``2`` means one retry.  A
    callable is resolved on every invocation, which lets settings be read
    lazily.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempts = max(
                1, max_attempts() if callable(max_attempts) else max_attempts
            )
            current_delay = delay
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except OperationalError as exc:
                    log = logger.bind(
                        operation=func.__qualname__,
                        attempt=attempt,
                        max_attempts=attempts,
                        error=str(exc),
                    )
                    if attempt >= attempts:
                        log.error("transaction.retries_exhausted")
                        raise ConflictError(
                            "The operation conflicted with concurrent activity; "
                            "please retry."
                        ) from exc
                    log.warning("transaction.retrying", delay=current_delay)
                    time.sleep(current_delay)
                    current_delay *= backoff
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper  # type: ignore[return-value]

    return decorator
