"""Celery tasks for the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int | None = None) -> dict:
    """Drain publishable outbox rows into the in-process event bus.

    Rows are claimed with ``SELECT ... FOR UPDATE SKIP LOCKED`` where the
    backend supports it, so concurrent workers never publish the same event
    twice.
    """
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
    max_retries = settings.OUTBOX_MAX_RETRIES
    published = failed = 0

    with transaction.atomic():
        events = list(
            OutboxEvent.objects.publishable(max_retries).select_for_update(
                skip_locked=True
            )[:batch_size]
        )
        for outbox in events:
            log = logger.bind(
                outbox_id=str(outbox.id),
                event_type=outbox.event_type,
                aggregate_id=outbox.aggregate_id,
            )
            event_class = event_bus.resolve(outbox.event_type)
            if event_class is None:
                outbox.mark_as_failed(f"No handler registered for {outbox.event_type}.")
                log.warning("outbox.unknown_event_type")
                failed += 1
                continue
            try:
                event_bus.publish(event_class.from_payload(outbox.payload))
            except Exception as exc:  # handler failures are recorded, not raised
                outbox.mark_as_failed(str(exc))
                log.exception("outbox.publish_failed")
                failed += 1
                continue
            outbox.mark_as_published()
            published += 1

    logger.info("outbox.drained", published=published, failed=failed)
    return {"published": published, "failed": failed}
