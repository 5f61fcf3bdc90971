from django.conf import settings
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


def default_customer_info() -> dict:
    return {
        "name": "",
        "phone": "",
        "email": "",
        "address": "",
        "payment_method": "cash",
        "customer_type": "b2c",
    }


class ScanningSession(TimeStampedModel):
    """Shared cart and customer form for every device a staff member scans from.

    ``last_updated`` moves only when the cart or customer changes; pings move
    ``last_ping`` and the device map.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, related_name="scanning_session", on_delete=models.CASCADE)
    cart_items = models.JSONField(default=list, blank=True)
    customer_info = models.JSONField(default=default_customer_info, blank=True)
    # Field name to ISO time of its last accepted write
    customer_stamps = models.JSONField(default=dict, blank=True)
    devices = models.JSONField(default=dict, blank=True)
    device_count = models.PositiveIntegerField(default=1)
    last_updated = models.DateTimeField(default=timezone.now)
    last_ping = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:  # pragma: no cover
        return f"ScanningSession user={self.user_id} items={len(self.cart_items or [])}"
