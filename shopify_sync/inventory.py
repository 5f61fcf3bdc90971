"""Push warehouse availability to Shopify inventory levels."""

import logging
import time

from catalog.models import Product
from django.conf import settings
from django.utils import timezone
from inventory.selectors import calculate_available_quantity

from .client import ShopifyClient, get_org_shopify_config, normalize_shopify_numeric_id
from .models import ShopifyProductMapping

logger = logging.getLogger("warehouse.shopify")


def record_sync_state(product_id: int, status: str, error: str = "") -> None:
    ShopifyProductMapping.objects.filter(product_id=product_id).update(
        last_synced_at=timezone.now(), last_sync_status=status, last_sync_error=error or ""
    )


def _result(product_id, status, quantity, message="", inventory_item_id=None) -> dict:
    return {
        "product_id": product_id,
        "status": str(status),
        "quantity": quantity,
        "message": message,
        "shopify_inventory_item_id": inventory_item_id,
    }


def sync_inventory_for_product(product_id: int, *, session=None) -> dict:
    """Set the Shopify level of one product to its received-unit count.

    Never raises: every outcome, including Shopify failures, comes back as a
    result dict and is recorded on the product mapping when one exists.
    """
    quantity = calculate_available_quantity(product_id)
    organization_id = Product.objects.filter(id=product_id).values_list("organization_id", flat=True).first()
    config = get_org_shopify_config(organization_id)
    if config is None:
        return _result(product_id, ShopifyProductMapping.SYNC_SKIPPED, quantity, "Shopify is not configured")

    mapping = ShopifyProductMapping.objects.filter(product_id=product_id).first()
    if mapping is None:
        return _result(product_id, ShopifyProductMapping.SYNC_SKIPPED, quantity, "Product is not linked to Shopify")

    if not mapping.shopify_inventory_item_id:
        message = "Missing Shopify inventory item id"
        record_sync_state(product_id, ShopifyProductMapping.SYNC_ERROR, message)
        return _result(product_id, ShopifyProductMapping.SYNC_ERROR, quantity, message)

    if not config.location_id:
        message = "Missing Shopify location id"
        record_sync_state(product_id, ShopifyProductMapping.SYNC_ERROR, message)
        return _result(product_id, ShopifyProductMapping.SYNC_ERROR, quantity, message)

    client = ShopifyClient(config, session=session)
    try:
        client.rest(
            "POST",
            "inventory_levels/set.json",
            json={
                "inventory_item_id": normalize_shopify_numeric_id(mapping.shopify_inventory_item_id),
                "location_id": normalize_shopify_numeric_id(config.location_id),
                "available": quantity,
            },
        )
    except Exception as exc:
        message = str(exc) or type(exc).__name__
        record_sync_state(product_id, ShopifyProductMapping.SYNC_ERROR, message)
        logger.warning(
            "shopify.inventory_sync_failed",
            extra={"event": "shopify.inventory_sync_failed", "product_id": product_id, "reason": message},
        )
        return _result(
            product_id, ShopifyProductMapping.SYNC_ERROR, quantity, message, mapping.shopify_inventory_item_id
        )

    record_sync_state(product_id, ShopifyProductMapping.SYNC_SUCCESS)
    logger.info(
        "shopify.inventory_synced",
        extra={"event": "shopify.inventory_synced", "product_id": product_id, "quantity": quantity},
    )
    return _result(
        product_id, ShopifyProductMapping.SYNC_SUCCESS, quantity, inventory_item_id=mapping.shopify_inventory_item_id
    )


def sync_inventory_for_products(product_ids, *, session=None, sleep=time.sleep) -> list[dict]:
    """Sync products one by one, pausing between calls to stay under Shopify's rate limit."""
    product_ids = list(product_ids)
    results = []
    for index, product_id in enumerate(product_ids):
        try:
            results.append(sync_inventory_for_product(product_id, session=session))
        except Exception as exc:
            logger.exception(
                "shopify.inventory_sync_crashed",
                extra={"event": "shopify.inventory_sync_crashed", "product_id": product_id},
            )
            quantity = calculate_available_quantity(product_id)
            results.append(_result(product_id, ShopifyProductMapping.SYNC_ERROR, quantity, str(exc)))
        if index < len(product_ids) - 1 and settings.SHOPIFY_SYNC_DELAY_SECONDS:
            sleep(settings.SHOPIFY_SYNC_DELAY_SECONDS)
    return results
