"""Celery tasks that talk to Shopify.

Tasks never raise: each catches and logs its own failure and returns a result
dict, so outcomes are visible in the result backend and the logs.
"""

import logging

from celery import shared_task
from deliveries.models import Delivery

from .client import ShopifyClient, get_org_shopify_config
from .fulfillment import create_shopify_fulfillment, mark_shopify_fulfillment_delivered
from .inventory import sync_inventory_for_products
from .products import create_shopify_product_from_warehouse

logger = logging.getLogger("warehouse.shopify")

FULFILLMENT_ACTIONS = ("create", "delivered")


@shared_task
def sync_inventory(product_ids):
    try:
        results = sync_inventory_for_products(product_ids)
    except Exception as exc:
        logger.exception(
            "shopify.task_failed",
            extra={"event": "shopify.task_failed", "task": "sync_inventory", "product_ids": list(product_ids)},
        )
        return {"success": False, "error": str(exc)}
    return {"success": True, "results": results}


@shared_task
def create_shopify_products(product_ids):
    results = []
    created = []
    for product_id in product_ids:
        try:
            result = create_shopify_product_from_warehouse(product_id)
        except Exception as exc:
            logger.exception(
                "shopify.task_failed",
                extra={"event": "shopify.task_failed", "task": "create_shopify_products", "product_id": product_id},
            )
            result = {"product_id": product_id, "status": "error", "message": str(exc)}
        if result["status"] == "success":
            created.append(product_id)
        results.append(result)
    inventory = sync_inventory_for_products(created) if created else []
    return {"success": all(r["status"] != "error" for r in results), "results": results, "inventory": inventory}


def _fulfillment_client(organization_id):
    config = get_org_shopify_config(organization_id)
    return ShopifyClient(config) if config else None


@shared_task
def sync_shopify_fulfillment(action, params):
    """Create the Shopify fulfillment for a shipped order, or mark it delivered.

    ``create`` params: organization_id, shopify_order_id, tracking_number, delivery_id.
    ``delivered`` params: organization_id, shopify_fulfillment_id.
    """
    if action not in FULFILLMENT_ACTIONS:
        logger.error(
            "shopify.unknown_fulfillment_action",
            extra={"event": "shopify.unknown_fulfillment_action", "action": action},
        )
        return {"success": False, "error": f"Unknown action: {action}"}

    client = _fulfillment_client(params.get("organization_id"))
    if client is None:
        return {"success": False, "skipped": True, "error": "Shopify is not configured"}

    try:
        if action == "create":
            result = create_shopify_fulfillment(
                client, params["shopify_order_id"], params.get("tracking_number") or ""
            )
            if result["success"] and result["fulfillment_id"] and params.get("delivery_id"):
                Delivery.objects.filter(id=params["delivery_id"]).update(
                    shopify_fulfillment_id=result["fulfillment_id"]
                )
        else:
            result = mark_shopify_fulfillment_delivered(client, params["shopify_fulfillment_id"])
    except Exception as exc:
        logger.exception(
            "shopify.task_failed",
            extra={"event": "shopify.task_failed", "task": "sync_shopify_fulfillment", "action": action},
        )
        return {"success": False, "error": str(exc)}
    return result
