from common.choices import SyncStatus
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ShopifySettings(TimeStampedModel):
    """Connection to the Shopify store an organization sells through."""

    DEFAULT_API_VERSION = "2025-04"

    organization = models.OneToOneField(
        "users.Organization", related_name="shopify_settings", on_delete=models.CASCADE
    )
    enabled = models.BooleanField(default=False)
    store_domain = models.CharField(max_length=255, blank=True, default="")
    access_token = models.CharField(max_length=255, blank=True, default="")
    api_version = models.CharField(max_length=16, default=DEFAULT_API_VERSION)
    location_id = models.CharField(max_length=120, blank=True, default="")
    webhook_secret = models.CharField(max_length=255, blank=True, default="")
    default_warranty_months = models.PositiveIntegerField(default=12)

    class Meta:
        verbose_name_plural = "Shopify settings"

    def __str__(self) -> str:  # pragma: no cover
        return f"ShopifySettings(org={self.organization_id}, {self.store_domain or '-'})"


class ShopifyProductMapping(TimeStampedModel):
    """Links a warehouse product to its Shopify product, variant and inventory item."""

    SYNC_PENDING = SyncStatus.PENDING
    SYNC_SUCCESS = SyncStatus.SUCCESS
    SYNC_ERROR = SyncStatus.ERROR
    SYNC_SKIPPED = SyncStatus.SKIPPED
    SYNC_CHOICES = SyncStatus.choices

    product = models.OneToOneField(
        "catalog.Product", primary_key=True, related_name="shopify_mapping", on_delete=models.CASCADE
    )
    shopify_product_id = models.CharField(max_length=120)
    shopify_variant_id = models.CharField(max_length=120, unique=True)
    shopify_inventory_item_id = models.CharField(max_length=120, blank=True, default="")
    last_synced_at = models.DateTimeField(null=True, blank=True)
    last_sync_status = models.CharField(max_length=16, choices=SYNC_CHOICES, default=SYNC_PENDING)
    last_sync_error = models.TextField(blank=True, default="")

    class Meta:
        indexes = [models.Index(fields=["shopify_product_id"], name="mapping_shopify_product_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product_id} -> {self.shopify_variant_id}"


# EOF
