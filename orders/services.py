"""Order services: in-store sales, Shopify order intake and fulfillment scans."""

import logging
import secrets
from collections import Counter

from catalog.models import Product
from common.codes import extract_product_code
from common.exceptions import NotFound, UnitBoundToBundle, WarehouseError
from customer.services import upsert_customer
from django.db import IntegrityError, transaction
from django.utils import timezone
from inventory import transitions
from inventory.selectors import availability_by_product
from inventory.models import ShipmentItem

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 20


class OrderError(WarehouseError):
    code = "ORDER_ERROR"


class MissingSkuError(OrderError):
    code = "MISSING_SKU"


class InsufficientInventoryError(OrderError):
    code = "INSUFFICIENT_INVENTORY"


def generate_order_number(now=None) -> str:
    """``ORD-YYYYMMDD-XXXX`` with a random four digit suffix."""
    now = now or timezone.localtime()
    return f"ORD-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"


def _unique_order_number() -> str:
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if not Order.objects.filter(order_number=candidate).exists():
            return candidate
    raise OrderError("Could not allocate an order number")


def _queue_inventory_sync(product_ids) -> None:
    from shopify_sync.queue import queue_inventory_sync

    queue_inventory_sync(product_ids)


def validate_item_for_sale(qr_code: str) -> dict:
    """Look up a unit by code and confirm it can be sold."""
    code = extract_product_code(qr_code)
    try:
        unit = ShipmentItem.objects.select_related("product").get(qr_code=code)
    except ShipmentItem.DoesNotExist:
        raise NotFound(f"Item {code} not found")
    transitions.ensure_status(unit, transitions.SELLABLE, action="sale")
    transitions.ensure_unbound(unit, action="sale")
    return {
        "shipment_item_id": unit.id,
        "qr_code": unit.qr_code,
        "product_id": unit.product_id,
        "product_name": unit.product.name,
        "brand": unit.product.brand,
        "model": unit.product.model,
        "price": unit.product.price,
        "status": unit.status,
    }


@transaction.atomic
def process_outbound_order(
    *,
    user,
    cart_items: list[dict],
    customer_info: dict,
    payment_method: str = Order.PAYMENT_CASH,
    customer_type: str = "b2c",
    notes: str = "",
) -> dict:
    """Sell the scanned units in one transaction.

    Every unit is re-checked under a row lock; if any was taken since it was
    scanned the whole sale is rejected.
    """
    if not cart_items:
        raise OrderError("Cart is empty")
    unit_ids = [int(item["shipment_item_id"]) for item in cart_items]
    if len(set(unit_ids)) != len(unit_ids):
        raise OrderError("Cart contains the same item twice")

    units = list(
        ShipmentItem.objects.select_for_update().select_related("product").filter(id__in=unit_ids).order_by("id")
    )
    unavailable = len(unit_ids) - sum(1 for u in units if u.status in transitions.SELLABLE)
    if unavailable:
        raise OrderError(f"{unavailable} items are no longer available")
    bound = transitions.bundle_bindings(unit_ids)
    for unit in units:
        if unit.id in bound:
            raise UnitBoundToBundle(unit.label, bound[unit.id], action="sale")

    customer = upsert_customer(
        name=customer_info.get("name", ""),
        phone=customer_info.get("phone"),
        email=customer_info.get("email"),
        address=customer_info.get("address"),
    )
    total = sum(int(u.product.price) for u in units)
    order = Order.objects.create(
        organization=getattr(user, "organization", None),
        order_number=_unique_order_number(),
        customer=customer,
        source=Order.SOURCE_IN_STORE,
        customer_type=customer_type,
        total_amount=total,
        payment_method=payment_method,
        payment_status=Order.PAYMENT_PAID if payment_method == Order.PAYMENT_CASH else Order.PAYMENT_UNPAID,
        fulfillment_status=Order.FULFILLMENT_FULFILLED,
        notes=notes or "",
        processed_by=user if getattr(user, "is_authenticated", False) else None,
    )
    now = timezone.now()
    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                unit=unit,
                product_id=unit.product_id,
                price=unit.product.price,
                qr_code=unit.qr_code,
                fulfillment_status=OrderItem.FULFILLMENT_FULFILLED,
                scanned_at=now,
            )
            for unit in units
        ]
    )
    transitions.transition_units(units, ShipmentItem.STATUS_SOLD)

    if getattr(user, "is_authenticated", False):
        from scanning.store import SessionStore

        SessionStore().clear(user)

    logger.info(
        "orders.outbound_processed",
        extra={
            "event": "orders.outbound_processed",
            "order_id": order.id,
            "unit_count": len(units),
            "total_amount": total,
            "user_id": getattr(user, "id", None),
        },
    )
    _queue_inventory_sync(sorted({u.product_id for u in units}))
    return {"order_id": order.id, "order_number": order.order_number, "total_amount": total, "item_count": len(units)}


def validate_inventory_availability(line_items: list[dict]) -> dict:
    """Check every SKU exists and enough received units are on hand.

    SKUs are local product ids. Returns the products and their available
    counts keyed by product id.
    """
    skus = [str(item["sku"]) for item in line_items]
    ids = {int(s) for s in skus if s.isdigit()}
    products = Product.objects.in_bulk(ids)
    missing = [s for s in skus if not s.isdigit() or int(s) not in products]
    if missing:
        raise MissingSkuError(f"Products not found in warehouse: {', '.join(missing)}")

    needed: Counter = Counter()
    for item in line_items:
        needed[int(item["sku"])] += int(item["quantity"])

    available = availability_by_product(needed.keys())
    shortfalls = [
        f"{products[pid].name} (need {qty}, have {available.get(pid, 0)})"
        for pid, qty in needed.items()
        if available.get(pid, 0) < qty
    ]
    if shortfalls:
        raise InsufficientInventoryError(f"Insufficient inventory: {', '.join(shortfalls)}")
    return {"products": products, "available": available, "needed": dict(needed)}


def format_shipping_address(address: dict | None) -> str:
    address = address or {}
    parts = [address.get(key) for key in ("address1", "address2", "city", "province", "zip", "country")]
    return ", ".join(p for p in parts if p)


def _customer_from_payload(payload: dict):
    customer = payload.get("customer") or {}
    shipping = payload.get("shipping_address") or {}
    email = customer.get("email") or ""
    name = customer.get("name") or shipping.get("name") or (email.split("@")[0] if email else "") or "Shopify customer"
    phone = customer.get("phone") or shipping.get("phone") or ""
    return upsert_customer(name=name, phone=phone, email=email, address=format_shipping_address(shipping))


def allocate_inventory(*, payload: dict, customer, organization_id: int | None) -> Order:
    """Create a Shopify order with one unbound item per unit ordered.

    Units stay ``received`` until staff scan them during fulfillment.
    """
    cod = payload.get("provider") == "cod"
    order = Order.objects.create(
        organization_id=organization_id,
        order_number=_unique_order_number(),
        customer=customer,
        source=Order.SOURCE_SHOPIFY,
        shopify_order_id=str(payload["shopify_order_id"]),
        shopify_order_number=str(payload.get("shopify_order_number") or ""),
        customer_type="b2c",
        total_amount=int(round(float(payload.get("amount") or 0))),
        payment_method=Order.PAYMENT_CASH if cod else Order.PAYMENT_BANK_TRANSFER,
        payment_status=Order.PAYMENT_UNPAID if cod else Order.PAYMENT_PAID,
        payment_code=payload.get("payment_code") or "",
        delivery_status=Order.DELIVERY_PROCESSING,
        fulfillment_status=Order.FULFILLMENT_PENDING,
        notes=(
            f"Shopify order {payload.get('shopify_order_number')}. "
            f"Payment via {payload.get('gateway') or payload.get('provider')}. Awaiting fulfillment."
        ),
    )
    OrderItem.objects.bulk_create(
        [
            OrderItem(order=order, product_id=int(line["sku"]), price=int(round(float(line.get("price") or 0))))
            for line in payload["line_items"]
            for _ in range(int(line["quantity"]))
        ]
    )
    return order


def _shopify_result(order: Order, replayed: bool) -> dict:
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "shopify_order_id": order.shopify_order_id,
        "shopify_order_number": order.shopify_order_number,
        "item_count": order.items.count(),
        "items_fulfilled": order.items.filter(fulfillment_status=OrderItem.FULFILLMENT_FULFILLED).count(),
        "replayed": replayed,
    }


def process_shopify_order(payload: dict, organization_id: int | None) -> dict:
    """Turn a paid Shopify order into a warehouse order awaiting fulfillment.

    Replays of the same Shopify order id return the order created first.
    """
    shopify_order_id = str(payload["shopify_order_id"])
    existing = Order.objects.filter(organization_id=organization_id, shopify_order_id=shopify_order_id).first()
    if existing:
        logger.info(
            "orders.shopify_replayed",
            extra={"event": "orders.shopify_replayed", "order_id": existing.id, "shopify_order_id": shopify_order_id},
        )
        return _shopify_result(existing, replayed=True)

    try:
        with transaction.atomic():
            validate_inventory_availability(payload["line_items"])
            customer = _customer_from_payload(payload)
            order = allocate_inventory(payload=payload, customer=customer, organization_id=organization_id)
    except IntegrityError:
        order = Order.objects.filter(organization_id=organization_id, shopify_order_id=shopify_order_id).first()
        if order is None:
            raise
        return _shopify_result(order, replayed=True)

    logger.info(
        "orders.shopify_created",
        extra={
            "event": "orders.shopify_created",
            "order_id": order.id,
            "shopify_order_id": shopify_order_id,
            "organization_id": organization_id,
        },
    )
    return _shopify_result(order, replayed=False)


@transaction.atomic
def scan_and_fulfill_item(*, order_id: int, qr_code: str, user=None) -> dict:
    """Bind a scanned unit to the next pending item of the same product."""
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise NotFound("Order not found")
    if order.fulfillment_status == Order.FULFILLMENT_FULFILLED:
        raise OrderError(f"Order {order.order_number} is already fulfilled")

    code = extract_product_code(qr_code)
    try:
        unit = ShipmentItem.objects.select_for_update().select_related("product").get(qr_code=code)
    except ShipmentItem.DoesNotExist:
        raise NotFound(f"Item {code} not found")
    transitions.ensure_status(unit, transitions.PICKABLE, action="fulfillment")
    transitions.ensure_unbound(unit, action="fulfillment")

    item = (
        OrderItem.objects.select_for_update()
        .filter(
            order=order,
            product_id=unit.product_id,
            unit__isnull=True,
            fulfillment_status=OrderItem.FULFILLMENT_PENDING,
        )
        .order_by("id")
        .first()
    )
    if item is None:
        raise OrderError(f"{unit.product.name} is not needed for order {order.order_number}")

    transitions.transition_unit(unit, ShipmentItem.STATUS_ALLOCATED)
    item.unit = unit
    item.qr_code = unit.qr_code
    item.fulfillment_status = OrderItem.FULFILLMENT_FULFILLED
    item.scanned_at = timezone.now()
    item.save(update_fields=["unit", "qr_code", "fulfillment_status", "scanned_at", "updated_at"])

    remaining = order.items.filter(fulfillment_status=OrderItem.FULFILLMENT_PENDING).count()
    order.fulfillment_status = Order.FULFILLMENT_FULFILLED if remaining == 0 else Order.FULFILLMENT_IN_PROGRESS
    order.save(update_fields=["fulfillment_status", "updated_at"])

    logger.info(
        "orders.item_fulfilled",
        extra={
            "event": "orders.item_fulfilled",
            "order_id": order.id,
            "unit_id": unit.id,
            "remaining": remaining,
            "user_id": getattr(user, "id", None),
        },
    )
    _queue_inventory_sync([unit.product_id])
    total = order.items.count()
    return {
        "order_id": order.id,
        "item_id": item.id,
        "qr_code": unit.qr_code,
        "product_name": unit.product.name,
        "fulfilled_count": total - remaining,
        "total_count": total,
        "fulfillment_status": order.fulfillment_status,
    }


# EOF
