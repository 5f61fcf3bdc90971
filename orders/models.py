from common.choices import (
    CustomerType,
    FulfillmentStatus,
    OrderDeliveryStatus,
    OrderSource,
    PaymentMethod,
    PaymentStatus,
)
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Order(TimeStampedModel):
    """Outbound order from the shop floor or from Shopify.

    In-store orders bind units at sale time. Shopify orders start with unbound
    items that are filled in as staff scan units during fulfillment.
    """

    SOURCE_IN_STORE = OrderSource.IN_STORE
    SOURCE_SHOPIFY = OrderSource.SHOPIFY
    SOURCE_MANUAL = OrderSource.MANUAL
    SOURCE_CHOICES = OrderSource.choices

    PAYMENT_CASH = PaymentMethod.CASH
    PAYMENT_BANK_TRANSFER = PaymentMethod.BANK_TRANSFER
    PAYMENT_METHOD_CHOICES = PaymentMethod.choices

    PAYMENT_UNPAID = PaymentStatus.UNPAID
    PAYMENT_PAID = PaymentStatus.PAID
    PAYMENT_CANCELLED = PaymentStatus.CANCELLED
    PAYMENT_REFUNDED = PaymentStatus.REFUNDED
    PAYMENT_STATUS_CHOICES = PaymentStatus.choices

    DELIVERY_PROCESSING = OrderDeliveryStatus.PROCESSING
    DELIVERY_SHIPPED = OrderDeliveryStatus.SHIPPED
    DELIVERY_WAITING = OrderDeliveryStatus.WAITING_FOR_DELIVERY
    DELIVERY_DELIVERED = OrderDeliveryStatus.DELIVERED
    DELIVERY_FAILED = OrderDeliveryStatus.FAILED
    DELIVERY_STATUS_CHOICES = OrderDeliveryStatus.choices

    FULFILLMENT_PENDING = FulfillmentStatus.PENDING
    FULFILLMENT_IN_PROGRESS = FulfillmentStatus.IN_PROGRESS
    FULFILLMENT_FULFILLED = FulfillmentStatus.FULFILLED
    FULFILLMENT_CHOICES = FulfillmentStatus.choices

    organization = models.ForeignKey(
        "users.Organization", null=True, blank=True, related_name="orders", on_delete=models.SET_NULL
    )
    order_number = models.CharField(max_length=32, unique=True)
    customer = models.ForeignKey("customer.Customer", related_name="orders", on_delete=models.PROTECT)
    source = models.CharField(max_length=16, choices=SOURCE_CHOICES, default=SOURCE_IN_STORE)
    shopify_order_id = models.CharField(max_length=64, null=True, blank=True)
    shopify_order_number = models.CharField(max_length=64, blank=True, default="")
    customer_type = models.CharField(max_length=8, choices=CustomerType.choices, default=CustomerType.B2C)
    total_amount = models.PositiveBigIntegerField(default=0)
    payment_method = models.CharField(max_length=16, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_CASH)
    payment_status = models.CharField(max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_UNPAID)
    payment_code = models.CharField(max_length=64, blank=True, default="")
    delivery_status = models.CharField(max_length=24, choices=DELIVERY_STATUS_CHOICES, default=DELIVERY_PROCESSING)
    fulfillment_status = models.CharField(max_length=16, choices=FULFILLMENT_CHOICES, default=FULFILLMENT_FULFILLED)
    notes = models.TextField(blank=True, default="")
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="processed_orders", on_delete=models.SET_NULL
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "shopify_order_id"],
                condition=models.Q(shopify_order_id__isnull=False),
                name="orders_org_shopify_order_unique",
            ),
        ]
        indexes = [
            models.Index(fields=["source", "fulfillment_status"], name="order_source_fulfill_idx"),
            models.Index(fields=["delivery_status", "created_at"], name="order_delivery_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.order_number} ({self.source})"

    @property
    def is_shopify(self) -> bool:
        return self.source == self.SOURCE_SHOPIFY


class OrderItem(TimeStampedModel):
    """One unit of an order; ``unit`` stays empty until a unit is bound."""

    FULFILLMENT_PENDING = FulfillmentStatus.PENDING
    FULFILLMENT_FULFILLED = FulfillmentStatus.FULFILLED

    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    unit = models.ForeignKey(
        "inventory.ShipmentItem", null=True, blank=True, related_name="order_items", on_delete=models.PROTECT
    )
    product = models.ForeignKey("catalog.Product", related_name="order_items", on_delete=models.PROTECT)
    quantity = models.PositiveIntegerField(default=1)
    price = models.PositiveBigIntegerField(default=0)
    qr_code = models.CharField(max_length=16, null=True, blank=True)
    fulfillment_status = models.CharField(
        max_length=16,
        choices=[(FULFILLMENT_PENDING, "Pending"), (FULFILLMENT_FULFILLED, "Fulfilled")],
        default=FULFILLMENT_PENDING,
    )
    scanned_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["id"]
        indexes = [models.Index(fields=["order", "product", "fulfillment_status"], name="orderitem_pending_lookup_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"OrderItem#{self.id} order={self.order_id} product={self.product_id}"


# EOF
