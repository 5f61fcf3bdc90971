"""Shared enumerations and choices used across apps."""

from django.db import models


class ProductType(models.TextChoices):
    GENERAL = "general", "General"
    INDIVIDUAL = "individual", "Individual"
    BALL = "ball", "Ball"


class ShipmentStatus(models.TextChoices):
    """Lifecycle of an inbound shipment."""

    PENDING = "pending", "Pending"
    RECEIVED = "received", "Received"
    COMPLETED = "completed", "Completed"


class UnitStatus(models.TextChoices):
    """Statuses of a single QR-tagged unit (see inventory.transitions)."""

    PENDING = "pending", "Pending"
    RECEIVED = "received", "Received"
    ALLOCATED = "allocated", "Allocated"
    SOLD = "sold", "Sold"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    RETURNED = "returned", "Returned"


class WarrantyStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    EXPIRED = "expired", "Expired"
    VOID = "void", "Void"


class InventoryItemStatus(models.TextChoices):
    IN_STOCK = "in_stock", "In stock"
    ALLOCATED = "allocated", "Allocated"
    SOLD = "sold", "Sold"
    SHIPPED = "shipped", "Shipped"
    RETURNED = "returned", "Returned"


class InventorySource(models.TextChoices):
    ASSEMBLY = "assembly", "Assembly"
    INBOUND = "inbound", "Inbound"
    RETURN = "return", "Return"


class BundleStatus(models.TextChoices):
    """Lifecycle statuses for assembly bundles."""

    PENDING = "pending", "Pending"
    ASSEMBLING = "assembling", "Assembling"
    COMPLETED = "completed", "Completed"
    SOLD = "sold", "Sold"
    ABANDONED = "abandoned", "Abandoned"


class OrderSource(models.TextChoices):
    IN_STORE = "in-store", "In store"
    SHOPIFY = "shopify", "Shopify"
    MANUAL = "manual", "Manual"


class CustomerType(models.TextChoices):
    B2B = "b2b", "B2B"
    B2C = "b2c", "B2C"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    BANK_TRANSFER = "bank_transfer", "Bank transfer"


class PaymentStatus(models.TextChoices):
    UNPAID = "Unpaid", "Unpaid"
    PAID = "Paid", "Paid"
    CANCELLED = "Cancelled", "Cancelled"
    REFUNDED = "Refunded", "Refunded"


class OrderDeliveryStatus(models.TextChoices):
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    WAITING_FOR_DELIVERY = "waiting_for_delivery", "Waiting for delivery"
    DELIVERED = "delivered", "Delivered"
    FAILED = "failed", "Failed"


class FulfillmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    FULFILLED = "fulfilled", "Fulfilled"


class DeliveryStatus(models.TextChoices):
    """Lifecycle statuses for deliveries."""

    WAITING_FOR_DELIVERY = "waiting_for_delivery", "Waiting for delivery"
    DELIVERED = "delivered", "Delivered"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"


class FailureCategory(models.TextChoices):
    CUSTOMER_UNAVAILABLE = "customer_unavailable", "Customer unavailable"
    WRONG_ADDRESS = "wrong_address", "Wrong address"
    DAMAGED_PACKAGE = "damaged_package", "Damaged package"
    REFUSED_DELIVERY = "refused_delivery", "Refused delivery"


class ResolutionType(models.TextChoices):
    RE_IMPORT = "re_import", "Re-import to storage"
    RETURN_TO_SUPPLIER = "return_to_supplier", "Return to supplier"
    RETRY_DELIVERY = "retry_delivery", "Retry delivery"


class ResolutionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"


class SyncStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    SUCCESS = "success", "Success"
    ERROR = "error", "Error"
    SKIPPED = "skipped", "Skipped"


class ClaimType(models.TextChoices):
    DEFECT = "defect", "Defect"
    DAMAGE = "damage", "Damage"
    REPAIR = "repair", "Repair"
    REPLACEMENT = "replacement", "Replacement"


class ClaimStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
