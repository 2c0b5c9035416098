"""Generic repository contract.

Services depend on ``IRepository[T]`` and its per-aggregate extensions,
never on the ORM directly, so tests can swap in fakes or mocks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from django.db import models

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base contract shared by every aggregate repository.

    ``T`` is the aggregate managed by the repository (``Account``,
    ``Product``, ``Order``).  Lookups return ``None`` for unknown or
    soft-deleted rows; the service decides which error that becomes.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve a live entity by primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Any]":
        """Lazy queryset of live entities, optionally filtered."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete an entity; ``False`` when nothing matched."""
