"""In-process event bus.

Handlers run synchronously in the publishing thread.  The outbox task is
the only publisher, so a failing handler marks the outbox row as failed
instead of breaking the request that produced the event.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}
        self._event_types: Dict[str, Type[DomainEvent]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        self._event_types[event_class.__name__] = event_class
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def resolve(self, event_name: str) -> Optional[Type[DomainEvent]]:
        return self._event_types.get(event_name)

    def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug(
            "event_bus.publish",
            event_name=event.event_name,
            handler_count=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)


# Wired in ``OrdersConfig.ready``.
event_bus = InMemoryEventBus()
