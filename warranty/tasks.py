import logging

import requests
from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Webhook-Secret"


@shared_task
def notify_portal_event(event, data):
    """POST a warehouse event to the customer portal webhook.

    Skipped when ``PORTAL_WEBHOOK_URL`` is not configured. Delivery failures are
    logged and reported in the result; they never reach the warehouse flow.
    """
    url = settings.PORTAL_WEBHOOK_URL
    if not url:
        return {"success": False, "skipped": True, "event": event}

    try:
        response = requests.post(
            url,
            json={"event": event, "data": data},
            headers={SECRET_HEADER: settings.PORTAL_WEBHOOK_SECRET},
            timeout=settings.PORTAL_WEBHOOK_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.warning(
            "warranty.portal_unreachable",
            extra={"event": "warranty.portal_unreachable", "portal_event": event, "reason": str(exc)},
        )
        return {"success": False, "event": event, "error": str(exc)}

    if not response.ok:
        logger.warning(
            "warranty.portal_rejected",
            extra={"event": "warranty.portal_rejected", "portal_event": event, "status": response.status_code},
        )
        return {"success": False, "event": event, "status": response.status_code}

    logger.info("warranty.portal_notified", extra={"event": "warranty.portal_notified", "portal_event": event})
    return {"success": True, "event": event, "status": response.status_code}
