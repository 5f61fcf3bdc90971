"""Queue warehouse events for the customer portal once the current transaction commits."""

import logging

from django.db import transaction

from . import tasks

logger = logging.getLogger(__name__)


def _enqueue(event: str, data: dict) -> None:
    try:
        tasks.notify_portal_event.delay(event, data)
    except Exception:
        logger.exception(
            "warranty.enqueue_failed",
            extra={"event": "warranty.enqueue_failed", "portal_event": event},
        )


def queue_portal_event(event: str, data: dict) -> None:
    payload = dict(data)
    transaction.on_commit(lambda: _enqueue(event, payload))
