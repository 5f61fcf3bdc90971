"""Inventory models: storages, inbound shipments and QR-tagged units.

Every physical unit is a ``ShipmentItem`` carrying a unique short code. Its
``status`` only moves along ``inventory.transitions.UNIT_TRANSITIONS``.
Assembly output gets its own ``InventoryItem`` rows.
"""

from common.choices import InventoryItemStatus, InventorySource, ShipmentStatus, UnitStatus, WarrantyStatus
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Storage(TimeStampedModel):
    name = models.CharField(max_length=120)
    location = models.CharField(max_length=255, blank=True)
    capacity = models.PositiveIntegerField(default=0)
    used_capacity = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name", "id"]
        constraints = [
            models.CheckConstraint(name="storage_used_non_negative", condition=models.Q(used_capacity__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.used_capacity}/{self.capacity})"

    @property
    def free_capacity(self) -> int:
        return max(int(self.capacity) - int(self.used_capacity), 0)


class Shipment(TimeStampedModel):
    STATUS_PENDING = ShipmentStatus.PENDING
    STATUS_RECEIVED = ShipmentStatus.RECEIVED
    STATUS_COMPLETED = ShipmentStatus.COMPLETED
    STATUS_CHOICES = ShipmentStatus.choices

    receipt_number = models.CharField(max_length=64, db_index=True)
    receipt_date = models.DateField()
    supplier_name = models.CharField(max_length=200)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="shipments", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [models.Index(fields=["status", "created_at"], name="shipment_status_created_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"Shipment {self.receipt_number} ({self.status})"


class ShipmentItem(TimeStampedModel):
    """A single QR-tagged unit."""

    STATUS_PENDING = UnitStatus.PENDING
    STATUS_RECEIVED = UnitStatus.RECEIVED
    STATUS_ALLOCATED = UnitStatus.ALLOCATED
    STATUS_SOLD = UnitStatus.SOLD
    STATUS_SHIPPED = UnitStatus.SHIPPED
    STATUS_DELIVERED = UnitStatus.DELIVERED
    STATUS_RETURNED = UnitStatus.RETURNED
    STATUS_CHOICES = UnitStatus.choices

    WARRANTY_PENDING = WarrantyStatus.PENDING
    WARRANTY_ACTIVE = WarrantyStatus.ACTIVE
    WARRANTY_EXPIRED = WarrantyStatus.EXPIRED
    WARRANTY_VOID = WarrantyStatus.VOID
    WARRANTY_CHOICES = WarrantyStatus.choices

    shipment = models.ForeignKey(Shipment, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="units", on_delete=models.PROTECT)
    qr_code = models.CharField(max_length=16, unique=True)
    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    storage = models.ForeignKey(Storage, null=True, blank=True, related_name="units", on_delete=models.SET_NULL)
    scanned_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    # Warranty and ownership, maintained by the customer portal
    warranty_months = models.PositiveIntegerField(default=12)
    warranty_status = models.CharField(max_length=16, choices=WARRANTY_CHOICES, default=WARRANTY_PENDING)
    warranty_started_at = models.DateTimeField(null=True, blank=True)
    current_owner_id = models.CharField(max_length=255, blank=True, default="")
    customer_scan_count = models.PositiveIntegerField(default=0)
    first_scanned_by_customer_at = models.DateTimeField(null=True, blank=True)
    last_scanned_by_customer_at = models.DateTimeField(null=True, blank=True)
    is_authentic = models.BooleanField(default=True)

    class Meta:
        ordering = ["shipment_id", "id"]
        constraints = [
            models.CheckConstraint(name="unit_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]
        indexes = [
            models.Index(fields=["product", "status"], name="unit_product_status_idx"),
            models.Index(fields=["shipment", "status"], name="unit_shipment_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.qr_code} ({self.status})"

    @property
    def label(self) -> str:
        return f"Item {self.qr_code}"


class InventoryItem(TimeStampedModel):
    """Sellable item produced by bundle assembly."""

    STATUS_IN_STOCK = InventoryItemStatus.IN_STOCK
    STATUS_ALLOCATED = InventoryItemStatus.ALLOCATED
    STATUS_SOLD = InventoryItemStatus.SOLD
    STATUS_SHIPPED = InventoryItemStatus.SHIPPED
    STATUS_RETURNED = InventoryItemStatus.RETURNED
    STATUS_CHOICES = InventoryItemStatus.choices

    SOURCE_ASSEMBLY = InventorySource.ASSEMBLY
    SOURCE_INBOUND = InventorySource.INBOUND
    SOURCE_RETURN = InventorySource.RETURN
    SOURCE_CHOICES = InventorySource.choices

    qr_code = models.CharField(max_length=16, unique=True)
    product = models.ForeignKey("catalog.Product", related_name="inventory_items", on_delete=models.PROTECT)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_IN_STOCK)
    source_type = models.CharField(max_length=16, choices=SOURCE_CHOICES, default=SOURCE_ASSEMBLY)
    bundle = models.ForeignKey(
        "assembly.Bundle", null=True, blank=True, related_name="output_items", on_delete=models.SET_NULL
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [models.Index(fields=["product", "status"], name="invitem_product_status_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.qr_code} ({self.status})"


# EOF
