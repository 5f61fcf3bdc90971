"""Fire-and-forget scheduling of Shopify work.

Callers run inside a warehouse transaction; tasks are enqueued only after it
commits, and an unreachable broker is logged instead of failing the caller.
"""

import logging

from django.db import transaction

from . import tasks

logger = logging.getLogger("warehouse.shopify")


def _enqueue(task_name: str, *args) -> None:
    try:
        getattr(tasks, task_name).delay(*args)
    except Exception:
        logger.exception(
            "shopify.enqueue_failed",
            extra={"event": "shopify.enqueue_failed", "task": task_name},
        )


def _on_commit(task_name: str, *args) -> None:
    transaction.on_commit(lambda: _enqueue(task_name, *args))


def queue_inventory_sync(product_ids) -> None:
    product_ids = sorted({int(pid) for pid in product_ids or []})
    if product_ids:
        _on_commit("sync_inventory", product_ids)


def queue_shopify_product_creation(product_ids) -> None:
    product_ids = [int(pid) for pid in product_ids or []]
    if product_ids:
        _on_commit("create_shopify_products", product_ids)


def queue_shopify_fulfillment_sync(action: str, params: dict) -> None:
    _on_commit("sync_shopify_fulfillment", action, dict(params))
