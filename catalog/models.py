"""Catalog app models.

Products are the warehouse's catalog entries. A "pack product" is a child of
a base product, distinguished by ``pack_size`` (e.g. a 3-pack of balls); the
``base_product`` pointer forms a shallow tree with at most one pack row per
``(base_product, pack_size)`` pair.
"""

from common.choices import ProductType
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Core product entity."""

    TYPE_GENERAL = ProductType.GENERAL
    TYPE_INDIVIDUAL = ProductType.INDIVIDUAL
    TYPE_BALL = ProductType.BALL
    TYPE_CHOICES = ProductType.choices
    # Only these types may be received as packs
    PACKABLE_TYPES = frozenset({ProductType.BALL})

    organization = models.ForeignKey(
        "users.Organization", null=True, blank=True, related_name="products", on_delete=models.SET_NULL
    )
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=120)
    model = models.CharField(max_length=160)
    product_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_GENERAL)
    description = models.TextField(blank=True)
    price = models.PositiveIntegerField(default=0, help_text="Unit price in VND")
    attributes = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    is_pack_product = models.BooleanField(default=False)
    base_product = models.ForeignKey(
        "self", null=True, blank=True, related_name="pack_products", on_delete=models.PROTECT
    )
    pack_size = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["brand", "model", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["base_product", "pack_size"],
                condition=models.Q(is_pack_product=True),
                name="products_base_pack_unique",
            ),
            models.CheckConstraint(
                name="products_pack_fields_consistent",
                condition=models.Q(is_pack_product=False)
                | models.Q(base_product__isnull=False, pack_size__gte=2),
            ),
        ]
        indexes = [
            models.Index(fields=["brand", "model"], name="product_brand_model_idx"),
            models.Index(fields=["product_type"], name="product_type_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    @property
    def is_packable(self) -> bool:
        return self.product_type in self.PACKABLE_TYPES and not self.is_pack_product

    @property
    def color_hex(self) -> str | None:
        return (self.attributes or {}).get("colorHex")


# EOF
