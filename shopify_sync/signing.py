"""HMAC-SHA256 request signing for the storefront order webhook.

The signature is the hex digest of ``"{raw body}.{unix timestamp}"`` and
travels in ``X-Signature`` / ``X-Timestamp``.
"""

import hashlib
import hmac
import json
import logging
import time

from django.conf import settings

logger = logging.getLogger("warehouse.shopify")

SIGNATURE_HEADER = "X-Signature"
TIMESTAMP_HEADER = "X-Timestamp"


def sign_body(body: str, secret: str) -> str:
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def build_signed_headers(payload, secret: str, *, now: float | None = None) -> tuple[str, dict]:
    """Serialize ``payload`` and return ``(raw_body, headers)`` for an outgoing signed request."""
    raw = json.dumps(payload)
    timestamp = str(int(now if now is not None else time.time()))
    return raw, {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign_body(f"{raw}.{timestamp}", secret),
        TIMESTAMP_HEADER: timestamp,
    }


def verify_signature(
    body: str, signature: str, timestamp: str, secret: str, *, max_age: int | None = None, now: float | None = None
) -> bool:
    if max_age is None:
        max_age = settings.SHOPIFY_WEBHOOK_MAX_AGE_SECONDS
    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError):
        logger.warning("webhook.bad_timestamp", extra={"event": "webhook.bad_timestamp", "timestamp": timestamp})
        return False
    current = int(now if now is not None else time.time())
    if current - sent_at > max_age:
        logger.warning(
            "webhook.signature_expired",
            extra={"event": "webhook.signature_expired", "age_seconds": current - sent_at, "max_age": max_age},
        )
        return False
    expected = sign_body(f"{body}.{timestamp}", secret)
    return hmac.compare_digest(signature.encode(), expected.encode())


def verify_request(request, secret: str) -> tuple[bool, str, str]:
    """Check a Django/DRF request's signature headers against its raw body.

    Returns ``(valid, body, error)``.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    timestamp = request.headers.get(TIMESTAMP_HEADER)
    if not signature or not timestamp:
        return False, "", "Missing X-Signature or X-Timestamp header"
    body = request.body.decode("utf-8", errors="replace")
    if not body:
        return False, "", "Empty request body"
    if not verify_signature(body, signature, timestamp, secret):
        return False, body, "Invalid HMAC signature or expired timestamp"
    return True, body, ""
