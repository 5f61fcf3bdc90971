"""Customer portal records: scans, warranty claims and ownership transfers.

Warranty state itself lives on the unit (``inventory.ShipmentItem``); these
tables keep the history customers create through the portal. Customer ids are
portal owner ids such as ``email:buyer@example.com``.
"""

from common.choices import ClaimStatus, ClaimType
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CustomerScan(TimeStampedModel):
    qr_code = models.CharField(max_length=16, db_index=True)
    unit = models.ForeignKey(
        "inventory.ShipmentItem", null=True, blank=True, related_name="customer_scans", on_delete=models.SET_NULL
    )
    customer_id = models.CharField(max_length=255, blank=True, default="")
    scanned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-scanned_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.qr_code} @ {self.scanned_at:%Y-%m-%d %H:%M}"


class WarrantyClaim(TimeStampedModel):
    """A customer's request for repair or replacement of a unit under warranty."""

    TYPE_DEFECT = ClaimType.DEFECT
    TYPE_DAMAGE = ClaimType.DAMAGE
    TYPE_REPAIR = ClaimType.REPAIR
    TYPE_REPLACEMENT = ClaimType.REPLACEMENT
    TYPE_CHOICES = ClaimType.choices

    STATUS_PENDING = ClaimStatus.PENDING
    STATUS_APPROVED = ClaimStatus.APPROVED
    STATUS_REJECTED = ClaimStatus.REJECTED
    STATUS_COMPLETED = ClaimStatus.COMPLETED
    STATUS_CANCELLED = ClaimStatus.CANCELLED
    STATUS_CHOICES = ClaimStatus.choices

    unit = models.ForeignKey("inventory.ShipmentItem", related_name="warranty_claims", on_delete=models.CASCADE)
    customer_id = models.CharField(max_length=255)
    claim_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-submitted_at", "-id"]
        indexes = [models.Index(fields=["status", "submitted_at"], name="claim_status_submitted_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"Claim#{self.id} {self.claim_type} ({self.status})"


class OwnershipTransfer(TimeStampedModel):
    unit = models.ForeignKey("inventory.ShipmentItem", related_name="ownership_transfers", on_delete=models.CASCADE)
    from_owner_id = models.CharField(max_length=255)
    to_owner_id = models.CharField(max_length=255)
    warranty_transferred = models.BooleanField(default=True)
    transferred_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-transferred_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.from_owner_id} -> {self.to_owner_id}"


# EOF
