"""Mirror shipping and delivery to Shopify fulfillments.

Creating a fulfillment sends the customer Shopify's "on the way" email;
a ``DELIVERED`` fulfillment event sends the "delivered" email.
"""

import logging

from .client import ShopifyClient, to_gid

logger = logging.getLogger("warehouse.shopify")

OPEN_FULFILLMENT_STATUSES = frozenset({"OPEN", "IN_PROGRESS", "SCHEDULED"})

GET_FULFILLMENT_ORDERS_QUERY = """
query GetFulfillmentOrders($orderId: ID!) {
  order(id: $orderId) {
    id
    fulfillmentOrders(first: 10) {
      edges { node { id status } }
    }
  }
}
"""

FULFILLMENT_CREATE_MUTATION = """
mutation FulfillmentCreate($fulfillment: FulfillmentInput!) {
  fulfillmentCreate(fulfillment: $fulfillment) {
    fulfillment { id status }
    userErrors { field message }
  }
}
"""

FULFILLMENT_EVENT_CREATE_MUTATION = """
mutation FulfillmentEventCreate($fulfillmentEventInput: FulfillmentEventInput!) {
  fulfillmentEventCreate(fulfillmentEventInput: $fulfillmentEventInput) {
    fulfillmentEvent { id status }
    userErrors { field message }
  }
}
"""


def order_gid(shopify_order_id: str) -> str:
    value = str(shopify_order_id)
    return value if value.startswith("gid://") else to_gid("Order", value)


def _user_errors(block: dict | None) -> str:
    return "; ".join(e.get("message", "") for e in ((block or {}).get("userErrors") or []))


def get_fulfillment_order_ids(client: ShopifyClient, shopify_order_id: str) -> list[str]:
    """Fulfillment orders of a Shopify order that can still be fulfilled."""
    data = client.graphql(GET_FULFILLMENT_ORDERS_QUERY, {"orderId": order_gid(shopify_order_id)})
    order = data.get("order")
    if not order:
        logger.warning(
            "shopify.order_not_found", extra={"event": "shopify.order_not_found", "shopify_order_id": shopify_order_id}
        )
        return []
    edges = (order.get("fulfillmentOrders") or {}).get("edges") or []
    return [edge["node"]["id"] for edge in edges if edge["node"].get("status") in OPEN_FULFILLMENT_STATUSES]


def create_shopify_fulfillment(
    client: ShopifyClient, shopify_order_id: str, tracking_number: str = "", tracking_company: str = ""
) -> dict:
    """Fulfil every open fulfillment order and notify the customer."""
    fulfillment_order_ids = get_fulfillment_order_ids(client, shopify_order_id)
    if not fulfillment_order_ids:
        logger.info(
            "shopify.fulfillment_nothing_open",
            extra={"event": "shopify.fulfillment_nothing_open", "shopify_order_id": shopify_order_id},
        )
        return {"success": True, "fulfillment_id": None, "error": "No open fulfillment orders found"}

    fulfillment = {
        "lineItemsByFulfillmentOrder": [{"fulfillmentOrderId": fid} for fid in fulfillment_order_ids],
        "notifyCustomer": True,
    }
    if tracking_number:
        fulfillment["trackingInfo"] = {"number": tracking_number}
        if tracking_company:
            fulfillment["trackingInfo"]["company"] = tracking_company

    data = client.graphql(FULFILLMENT_CREATE_MUTATION, {"fulfillment": fulfillment})
    block = data.get("fulfillmentCreate") or {}
    errors = _user_errors(block)
    if errors:
        logger.error(
            "shopify.fulfillment_rejected",
            extra={"event": "shopify.fulfillment_rejected", "shopify_order_id": shopify_order_id, "reason": errors},
        )
        return {"success": False, "fulfillment_id": None, "error": errors}
    created = block.get("fulfillment")
    if not created:
        return {"success": False, "fulfillment_id": None, "error": "No fulfillment returned from Shopify"}

    logger.info(
        "shopify.fulfillment_created",
        extra={
            "event": "shopify.fulfillment_created",
            "shopify_order_id": shopify_order_id,
            "fulfillment_id": created["id"],
        },
    )
    return {"success": True, "fulfillment_id": created["id"], "error": None}


def mark_shopify_fulfillment_delivered(client: ShopifyClient, fulfillment_id: str) -> dict:
    data = client.graphql(
        FULFILLMENT_EVENT_CREATE_MUTATION,
        {"fulfillmentEventInput": {"fulfillmentId": fulfillment_id, "status": "DELIVERED"}},
    )
    block = data.get("fulfillmentEventCreate") or {}
    errors = _user_errors(block)
    if errors:
        logger.error(
            "shopify.delivery_event_rejected",
            extra={"event": "shopify.delivery_event_rejected", "fulfillment_id": fulfillment_id, "reason": errors},
        )
        return {"success": False, "event_id": None, "error": errors}
    event = block.get("fulfillmentEvent")
    if not event:
        return {"success": False, "event_id": None, "error": "No fulfillment event returned from Shopify"}
    logger.info(
        "shopify.delivery_event_created",
        extra={"event": "shopify.delivery_event_created", "fulfillment_id": fulfillment_id, "event_id": event["id"]},
    )
    return {"success": True, "event_id": event["id"], "error": None}
