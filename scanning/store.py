"""ORM-backed store for live scanning sessions.

Every write locks the user's session row and applies the merge policy from
``scanning.merge``, so phones and desktops scanning for the same user can
write at the same time without losing items.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from django.db import transaction
from django.utils import timezone

from .merge import merge_cart, merge_customer, remove_from_cart
from .models import ScanningSession, default_customer_info

logger = logging.getLogger(__name__)

DEVICE_WINDOW_SECONDS = 10


def session_payload(session: ScanningSession) -> dict:
    return {
        "id": session.id,
        "cart_items": session.cart_items,
        "customer_info": session.customer_info,
        "device_count": session.device_count,
        "last_updated": session.last_updated,
        "last_ping": session.last_ping,
    }


class SessionStore:
    def __init__(self, clock: Callable[[], datetime] = timezone.now):
        self.clock = clock

    def get_or_create(self, user) -> ScanningSession:
        now = self.clock()
        session, created = ScanningSession.objects.get_or_create(
            user=user, defaults={"last_updated": now, "last_ping": now}
        )
        if created:
            logger.info("scanning.session_created", extra={"event": "scanning.session_created", "user_id": user.id})
        return session

    def _locked(self, user) -> ScanningSession:
        self.get_or_create(user)
        return ScanningSession.objects.select_for_update().get(user=user)

    @transaction.atomic
    def update_cart(self, user, items: list[dict]) -> ScanningSession:
        session = self._locked(user)
        session.cart_items = merge_cart(session.cart_items, items)
        session.last_updated = self.clock()
        session.save(update_fields=["cart_items", "last_updated", "updated_at"])
        return session

    @transaction.atomic
    def remove_cart_items(self, user, shipment_item_ids) -> ScanningSession:
        session = self._locked(user)
        session.cart_items = remove_from_cart(session.cart_items, shipment_item_ids)
        session.last_updated = self.clock()
        session.save(update_fields=["cart_items", "last_updated", "updated_at"])
        return session

    @transaction.atomic
    def update_customer(self, user, info: dict, written_at: datetime | None = None) -> ScanningSession:
        """Apply a customer form write; each field keeps its newest value."""
        session = self._locked(user)
        now = self.clock()
        stamp = written_at or now
        stamps = dict(session.customer_stamps or {})
        session.customer_info = merge_customer(session.customer_info, info, stamps=stamps, written_at=stamp)
        stale = sorted(f for f, v in (info or {}).items() if v is not None and stamps.get(f) != stamp.isoformat())
        if stale:
            logger.info(
                "scanning.stale_customer_fields",
                extra={"event": "scanning.stale_customer_fields", "user_id": user.id, "fields": stale},
            )
        session.customer_stamps = stamps
        session.last_updated = now
        session.save(update_fields=["customer_info", "customer_stamps", "last_updated", "updated_at"])
        return session

    def sync(self, user, since: datetime | None = None) -> ScanningSession | None:
        """Return the session if it changed after ``since``, else ``None``."""
        session = ScanningSession.objects.filter(user=user).first()
        if session is None:
            return None
        now = self.clock()
        ScanningSession.objects.filter(id=session.id).update(last_ping=now)
        session.last_ping = now
        if since is not None and session.last_updated <= since:
            return None
        return session

    @transaction.atomic
    def ping(self, user, device_id: str) -> int:
        """Record a device heartbeat and return how many devices are live."""
        session = self._locked(user)
        now = self.clock()
        cutoff = now - timedelta(seconds=DEVICE_WINDOW_SECONDS)
        devices = {device_id: now.isoformat()}
        for other, seen in (session.devices or {}).items():
            if other != device_id and datetime.fromisoformat(seen) >= cutoff:
                devices[other] = seen
        session.devices = devices
        session.device_count = len(devices)
        session.last_ping = now
        session.save(update_fields=["devices", "device_count", "last_ping", "updated_at"])
        return session.device_count

    def clear(self, user) -> None:
        now = self.clock()
        ScanningSession.objects.filter(user=user).update(
            cart_items=[],
            customer_info=default_customer_info(),
            customer_stamps={field: now.isoformat() for field in default_customer_info()},
            last_updated=now,
            updated_at=timezone.now(),
        )
