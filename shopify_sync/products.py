"""Create Shopify listings for warehouse products.

A product whose brand and model already have a Shopify listing becomes a new
variant of that listing; otherwise a new Shopify product is created. The
resulting ids are stored as GIDs on ``ShopifyProductMapping``.
"""

import logging
import re

from catalog.models import Product
from django.utils import timezone

from .client import ShopifyClient, get_org_shopify_config, normalize_shopify_numeric_id, to_gid
from .models import ShopifyProductMapping

logger = logging.getLogger("warehouse.shopify")

DEFAULT_OPTION_VALUE = "Default"

TYPE_TAGS = {
    Product.TYPE_GENERAL: ["general"],
    Product.TYPE_INDIVIDUAL: ["individual", "paddle"],
    Product.TYPE_BALL: ["ball", "balls"],
}

SET_METAFIELDS_MUTATION = """
mutation setVariantMetafields($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id key value }
    userErrors { field message }
  }
}
"""


class ProductSyncError(Exception):
    pass


def format_price(value) -> str:
    return f"{float(value or 0):.2f}"


def _attribute(product: Product, key: str) -> str:
    return str((product.attributes or {}).get(key) or "").strip()


def product_tags(product: Product) -> list[str]:
    tags = list(TYPE_TAGS.get(product.product_type, []))
    if product.is_pack_product and product.pack_size:
        tags += ["pack", f"{product.pack_size}-pack"]
    return tags


def build_product_payload(product: Product) -> dict:
    """REST payload for ``products.json`` with a single variant."""
    color = _attribute(product, "colorName")
    size = _attribute(product, "size")

    options = []
    variant = {
        "sku": str(product.id),
        "price": format_price(product.price),
        "requires_shipping": True,
        "inventory_policy": "deny",
        "inventory_management": "shopify",
    }
    values = []
    if color:
        options.append({"name": "Color"})
        values.append(color)
    if size:
        options.append({"name": "Size"})
        values.append(size)
    for position, value in enumerate(values or [DEFAULT_OPTION_VALUE], start=1):
        variant[f"option{position}"] = value

    handle = re.sub(r"[^a-z0-9]+", "-", f"{product.brand} {product.model} {product.id}".lower()).strip("-")
    payload = {
        "title": product.name,
        "handle": handle,
        "body_html": product.description or "",
        "vendor": product.brand,
        "product_type": product.get_product_type_display(),
        "tags": ", ".join(product_tags(product)),
        "status": "active",
        "variants": [variant],
    }
    if options:
        payload["options"] = options
    return {"product": payload}


def build_variant_for_existing_product(options: list[dict], product: Product) -> dict:
    """Variant payload matching the option layout of an existing Shopify product."""
    color = _attribute(product, "colorName")
    size = _attribute(product, "size")
    variant = {
        "sku": str(product.id),
        "price": format_price(product.price),
        "requires_shipping": True,
        "inventory_policy": "deny",
        "inventory_management": "shopify",
    }
    positions = set()
    for option in sorted(options or [], key=lambda o: o.get("position", 0)):
        position = option.get("position")
        positions.add(position)
        name = str(option.get("name", "")).lower()
        if name == "color" and color:
            variant[f"option{position}"] = color
        elif name == "size" and size:
            variant[f"option{position}"] = size

    if not variant.get("option1"):
        variant["option1"] = color or size or DEFAULT_OPTION_VALUE
    if 2 in positions and not variant.get("option2"):
        if color and size:
            variant["option2"] = size if variant["option1"] == color else color
        else:
            variant["option2"] = DEFAULT_OPTION_VALUE
    if 3 in positions and not variant.get("option3"):
        variant["option3"] = DEFAULT_OPTION_VALUE
    return variant


def set_variant_color_hex(client: ShopifyClient, variant_gid: str, color_hex: str) -> bool:
    """Store the swatch colour on the variant; failures are logged and reported as ``False``."""
    try:
        data = client.graphql(
            SET_METAFIELDS_MUTATION,
            {
                "metafields": [
                    {
                        "ownerId": variant_gid,
                        "namespace": "custom",
                        "key": "color_hex",
                        "type": "single_line_text_field",
                        "value": color_hex,
                    }
                ]
            },
        )
    except Exception as exc:
        logger.warning(
            "shopify.metafield_failed",
            extra={"event": "shopify.metafield_failed", "variant_id": variant_gid, "reason": str(exc)},
        )
        return False
    errors = ((data or {}).get("metafieldsSet") or {}).get("userErrors") or []
    if errors:
        logger.warning(
            "shopify.metafield_failed",
            extra={
                "event": "shopify.metafield_failed",
                "variant_id": variant_gid,
                "reason": "; ".join(e.get("message", "") for e in errors),
            },
        )
        return False
    return True


def _sibling_shopify_product_id(product: Product) -> str | None:
    return (
        ShopifyProductMapping.objects.filter(product__brand=product.brand, product__model=product.model)
        .exclude(product_id=product.id)
        .values_list("shopify_product_id", flat=True)
        .first()
    )


def _create_variant(client: ShopifyClient, shopify_product_gid: str, product: Product) -> dict:
    numeric_id = normalize_shopify_numeric_id(shopify_product_gid)
    detail = client.rest("GET", f"products/{numeric_id}.json")
    if not (detail or {}).get("product"):
        raise ProductSyncError("Could not load the existing Shopify product")
    variant_payload = build_variant_for_existing_product(detail["product"].get("options") or [], product)
    response = client.rest("POST", f"products/{numeric_id}/variants.json", json={"variant": variant_payload})
    variant = (response or {}).get("variant")
    if not variant:
        raise ProductSyncError("Shopify did not return a variant after creation")
    return {
        "shopify_product_id": shopify_product_gid,
        "shopify_variant_id": to_gid("ProductVariant", variant["id"]),
        "shopify_inventory_item_id": (
            to_gid("InventoryItem", variant["inventory_item_id"]) if variant.get("inventory_item_id") else ""
        ),
    }


def _create_product(client: ShopifyClient, product: Product) -> dict:
    response = client.rest("POST", "products.json", json=build_product_payload(product))
    created = (response or {}).get("product")
    if not created:
        raise ProductSyncError("Shopify did not return a product after creation")
    variants = created.get("variants") or []
    if not variants:
        raise ProductSyncError("Shopify did not return a product variant after creation")
    variant = variants[0]
    return {
        "shopify_product_id": to_gid("Product", created["id"]),
        "shopify_variant_id": to_gid("ProductVariant", variant["id"]),
        "shopify_inventory_item_id": (
            to_gid("InventoryItem", variant["inventory_item_id"]) if variant.get("inventory_item_id") else ""
        ),
    }


def create_shopify_product_from_warehouse(product_id: int, *, session=None) -> dict:
    """List one warehouse product on its organization's Shopify store.

    Returns ``{product_id, status, ...ids, message}``; Shopify API failures
    propagate to the caller (the task logs them).
    """
    product = Product.objects.filter(id=product_id).first()
    if product is None:
        return {
            "product_id": product_id,
            "status": str(ShopifyProductMapping.SYNC_SKIPPED),
            "message": "Unknown product",
        }
    config = get_org_shopify_config(product.organization_id)
    if config is None:
        return {
            "product_id": product_id,
            "status": str(ShopifyProductMapping.SYNC_SKIPPED),
            "message": "Shopify is not configured",
        }

    client = ShopifyClient(config, session=session)
    mapping = ShopifyProductMapping.objects.filter(product_id=product_id).first()
    if mapping is not None:
        if product.color_hex:
            set_variant_color_hex(client, mapping.shopify_variant_id, product.color_hex)
        return {
            "product_id": product_id,
            "status": str(ShopifyProductMapping.SYNC_SKIPPED),
            "shopify_product_id": mapping.shopify_product_id,
            "shopify_variant_id": mapping.shopify_variant_id,
            "shopify_inventory_item_id": mapping.shopify_inventory_item_id,
            "message": "Product already linked to Shopify",
        }

    sibling = _sibling_shopify_product_id(product)
    ids = _create_variant(client, sibling, product) if sibling else _create_product(client, product)
    if product.color_hex:
        set_variant_color_hex(client, ids["shopify_variant_id"], product.color_hex)

    ShopifyProductMapping.objects.update_or_create(
        product=product,
        defaults={
            **ids,
            "last_synced_at": timezone.now(),
            "last_sync_status": ShopifyProductMapping.SYNC_SUCCESS,
            "last_sync_error": "",
        },
    )
    logger.info(
        "shopify.product_created",
        extra={
            "event": "shopify.product_created",
            "product_id": product_id,
            "organization_id": config.organization_id,
            "as_variant": bool(sibling),
            **ids,
        },
    )
    return {"product_id": product_id, "status": str(ShopifyProductMapping.SYNC_SUCCESS), **ids, "message": ""}
