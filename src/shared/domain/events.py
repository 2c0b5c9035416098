"""Domain event primitives.

Events are immutable dataclasses collected on an aggregate while a use
case runs, persisted to the outbox by the repository and rebuilt from
their JSON payload when the outbox is drained.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event."""

    aggregate_id: UUID
    actor_id: Optional[UUID] = None
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            payload[item.name] = value
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> DomainEvent:
        """Rebuild an event written by ``to_payload``.

        Extra keys a subclass declares are passed through untouched.
        """
        known = {item.name for item in fields(cls) if item.init}
        kwargs = {key: value for key, value in payload.items() if key in known}
        kwargs["aggregate_id"] = UUID(str(payload["aggregate_id"]))
        if payload.get("actor_id"):
            kwargs["actor_id"] = UUID(str(payload["actor_id"]))
        if payload.get("event_id"):
            kwargs["event_id"] = UUID(str(payload["event_id"]))
        if payload.get("occurred_on"):
            kwargs["occurred_on"] = datetime.fromisoformat(payload["occurred_on"])
        return cls(**kwargs)


class DomainEventMixin:
    """Collects events on an aggregate root until the repository flushes them."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        return list(getattr(self, "_domain_events", []))
