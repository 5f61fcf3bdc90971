"""Catalog services: product creation and pack-product resolution."""

import logging

from common.exceptions import NotFound, ValidationFailed
from django.db import IntegrityError, transaction

from .models import Product

logger = logging.getLogger(__name__)


def pack_model_name(base: Product, pack_size: int) -> str:
    return f"{base.model} {pack_size}-Pack"


@transaction.atomic
def create_product(
    *,
    name: str,
    brand: str,
    model: str,
    product_type: str = Product.TYPE_GENERAL,
    price: int = 0,
    description: str = "",
    attributes: dict | None = None,
    organization=None,
) -> Product:
    """Create a base product and queue its Shopify listing after commit."""
    from shopify_sync.queue import queue_shopify_product_creation

    if not (name or "").strip() or not (brand or "").strip() or not (model or "").strip():
        raise ValidationFailed("Name, brand and model are required")
    if product_type not in dict(Product.TYPE_CHOICES):
        raise ValidationFailed(f"Unknown product type: {product_type}")
    product = Product.objects.create(
        organization=organization,
        name=name.strip(),
        brand=brand.strip(),
        model=model.strip(),
        product_type=product_type,
        price=price,
        description=description,
        attributes=attributes or {},
    )
    logger.info(
        "catalog.product_created",
        extra={"event": "catalog.product_created", "product_id": product.id, "product_type": product_type},
    )
    queue_shopify_product_creation([product.id])
    return product


@transaction.atomic
def update_product_price(*, product_id: int, price: int) -> Product:
    if price < 0:
        raise ValidationFailed("Price must not be negative")
    try:
        product = Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist:
        raise NotFound("Product not found")
    old_price = product.price
    product.price = price
    product.save(update_fields=["price", "updated_at"])
    logger.info(
        "catalog.price_updated",
        extra={
            "event": "catalog.price_updated",
            "product_id": product.id,
            "old_price": old_price,
            "new_price": price,
        },
    )
    return product


def find_or_create_pack_product(*, base_product: Product, pack_size: int) -> tuple[Product, bool]:
    """Return the pack product for ``(base_product, pack_size)``, creating it if needed.

    Insert-first: the create runs in a savepoint and a unique-constraint
    violation (a concurrent creator won) falls back to reading the winner's row.
    Returns ``(product, created)``.
    """
    if pack_size < 2:
        raise ValidationFailed("Pack size must be at least 2")
    if base_product.is_pack_product:
        raise ValidationFailed("Cannot build a pack from a pack product")

    pack_model = pack_model_name(base_product, pack_size)
    try:
        with transaction.atomic():
            pack = Product.objects.create(
                organization_id=base_product.organization_id,
                name=f"{base_product.brand} {pack_model}",
                brand=base_product.brand,
                model=pack_model,
                product_type=base_product.product_type,
                description=base_product.description,
                price=base_product.price * pack_size,
                attributes=dict(base_product.attributes or {}),
                is_pack_product=True,
                base_product=base_product,
                pack_size=pack_size,
            )
    except IntegrityError:
        pack = Product.objects.get(base_product=base_product, pack_size=pack_size, is_pack_product=True)
        return pack, False

    logger.info(
        "catalog.pack_product_created",
        extra={
            "event": "catalog.pack_product_created",
            "product_id": pack.id,
            "base_product_id": base_product.id,
            "pack_size": pack_size,
        },
    )
    return pack, True


# EOF
