"""Assembly models.

A bundle is assembled in ordered phases. Each phase (``BundleItem``) expects a
number of units of one product; each scanned unit is bound to the bundle by an
``AssemblyScan`` row, and a unit can be bound to at most one bundle.
"""

from common.choices import BundleStatus
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Bundle(TimeStampedModel):
    STATUS_PENDING = BundleStatus.PENDING
    STATUS_ASSEMBLING = BundleStatus.ASSEMBLING
    STATUS_COMPLETED = BundleStatus.COMPLETED
    STATUS_SOLD = BundleStatus.SOLD
    STATUS_ABANDONED = BundleStatus.ABANDONED
    STATUS_CHOICES = BundleStatus.choices

    name = models.CharField(max_length=200)
    qr_code = models.CharField(max_length=16, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    current_phase_index = models.PositiveIntegerField(default=0)
    assembly_started_at = models.DateTimeField(null=True, blank=True)
    assembly_completed_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="bundles_created", on_delete=models.SET_NULL
    )
    assembled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="bundles_assembled", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [models.Index(fields=["status"], name="bundle_status_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.qr_code})"


class BundleItem(TimeStampedModel):
    """One assembly phase."""

    bundle = models.ForeignKey(Bundle, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="+", on_delete=models.PROTECT)
    expected_count = models.PositiveIntegerField()
    scanned_count = models.PositiveIntegerField(default=0)
    phase_order = models.PositiveIntegerField()

    class Meta:
        ordering = ["bundle_id", "phase_order"]
        constraints = [
            models.UniqueConstraint(fields=["bundle", "phase_order"], name="bundle_phase_order_unique"),
            models.CheckConstraint(name="bundle_item_expected_positive", condition=models.Q(expected_count__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Phase {self.phase_order} of bundle {self.bundle_id}"

    @property
    def is_complete(self) -> bool:
        return self.scanned_count >= self.expected_count


class AssemblyScan(TimeStampedModel):
    bundle = models.ForeignKey(Bundle, related_name="scans", on_delete=models.CASCADE)
    bundle_item = models.ForeignKey(BundleItem, related_name="scans", on_delete=models.CASCADE)
    unit = models.OneToOneField("inventory.ShipmentItem", related_name="assembly_scan", on_delete=models.PROTECT)
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Scan of unit {self.unit_id} into bundle {self.bundle_id}"


# EOF
