from common.choices import DeliveryStatus, FailureCategory, ResolutionStatus, ResolutionType
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Delivery(TimeStampedModel):
    """Hand-off of an order to a shipper and its outcome."""

    STATUS_WAITING = DeliveryStatus.WAITING_FOR_DELIVERY
    STATUS_DELIVERED = DeliveryStatus.DELIVERED
    STATUS_FAILED = DeliveryStatus.FAILED
    STATUS_CANCELLED = DeliveryStatus.CANCELLED
    STATUS_CHOICES = DeliveryStatus.choices

    order = models.OneToOneField("orders.Order", related_name="delivery", on_delete=models.CASCADE)
    shipper_name = models.CharField(max_length=120)
    shipper_phone = models.CharField(max_length=32, blank=True, default="")
    tracking_number = models.CharField(max_length=120, blank=True, default="")
    shopify_fulfillment_id = models.CharField(max_length=120, blank=True, default="")
    status = models.CharField(max_length=24, choices=STATUS_CHOICES, default=STATUS_WAITING)
    delivered_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(blank=True, default="")
    failure_category = models.CharField(max_length=32, choices=FailureCategory.choices, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="confirmed_deliveries", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["status", "created_at"], name="delivery_status_created_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"Delivery#{self.id} order={self.order_id} ({self.status})"


class DeliveryHistory(TimeStampedModel):
    # to_status also records resolution steps such as "resolution_re_import"
    delivery = models.ForeignKey(Delivery, related_name="history", on_delete=models.CASCADE)
    from_status = models.CharField(max_length=48, blank=True, default="")
    to_status = models.CharField(max_length=48)
    notes = models.TextField(blank=True, default="")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.from_status or '-'} -> {self.to_status}"


class DeliveryResolution(TimeStampedModel):
    TYPE_RE_IMPORT = ResolutionType.RE_IMPORT
    TYPE_RETURN_TO_SUPPLIER = ResolutionType.RETURN_TO_SUPPLIER
    TYPE_RETRY_DELIVERY = ResolutionType.RETRY_DELIVERY
    TYPE_CHOICES = ResolutionType.choices

    STATUS_PENDING = ResolutionStatus.PENDING
    STATUS_IN_PROGRESS = ResolutionStatus.IN_PROGRESS
    STATUS_COMPLETED = ResolutionStatus.COMPLETED
    STATUS_CHOICES = ResolutionStatus.choices

    delivery = models.ForeignKey(Delivery, related_name="resolutions", on_delete=models.CASCADE)
    resolution_type = models.CharField(max_length=24, choices=TYPE_CHOICES)
    resolution_status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    target_storage = models.ForeignKey(
        "inventory.Storage", null=True, blank=True, related_name="resolutions", on_delete=models.SET_NULL
    )
    supplier_return_reason = models.TextField(blank=True, default="")
    scheduled_date = models.DateField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["delivery"],
                condition=models.Q(resolution_status__in=[ResolutionStatus.PENDING, ResolutionStatus.IN_PROGRESS]),
                name="delivery_one_open_resolution",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.resolution_type} ({self.resolution_status})"


# EOF
