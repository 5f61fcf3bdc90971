"""Read-side helpers for orders."""

from common.exceptions import NotFound
from django.db.models import Count, Q, QuerySet

from .models import Order, OrderItem


def list_orders(
    *, source: str | None = None, delivery_status: str | None = None, search: str | None = None
) -> QuerySet:
    qs = Order.objects.select_related("customer").annotate(item_count=Count("items"))
    if source:
        qs = qs.filter(source=source)
    if delivery_status:
        qs = qs.filter(delivery_status=delivery_status)
    if search:
        qs = qs.filter(
            Q(order_number__icontains=search)
            | Q(shopify_order_number__icontains=search)
            | Q(customer__name__icontains=search)
            | Q(customer__phone__icontains=search)
        )
    return qs.order_by("-created_at", "-id")


def pending_fulfillment_orders() -> QuerySet:
    return (
        Order.objects.filter(
            source=Order.SOURCE_SHOPIFY,
            fulfillment_status__in=[Order.FULFILLMENT_PENDING, Order.FULFILLMENT_IN_PROGRESS],
        )
        .select_related("customer")
        .annotate(
            item_count=Count("items"),
            fulfilled_count=Count("items", filter=Q(items__fulfillment_status=OrderItem.FULFILLMENT_FULFILLED)),
        )
        .order_by("created_at", "id")
    )


def order_fulfillment_details(order_id: int) -> dict:
    """Products an order still needs, with needed and fulfilled counts."""
    try:
        order = Order.objects.select_related("customer").get(id=order_id)
    except Order.DoesNotExist:
        raise NotFound("Order not found")

    rows = (
        order.items.values("product_id", "product__name", "product__brand", "product__model")
        .annotate(
            needed=Count("id"),
            fulfilled=Count("id", filter=Q(fulfillment_status=OrderItem.FULFILLMENT_FULFILLED)),
        )
        .order_by("product_id")
    )
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "shopify_order_number": order.shopify_order_number,
        "fulfillment_status": order.fulfillment_status,
        "customer": {"name": order.customer.name, "phone": order.customer.phone, "address": order.customer.address},
        "products": [
            {
                "product_id": row["product_id"],
                "name": row["product__name"],
                "brand": row["product__brand"],
                "model": row["product__model"],
                "needed": row["needed"],
                "fulfilled": row["fulfilled"],
            }
            for row in rows
        ],
        "scanned": list(
            order.items.filter(unit__isnull=False).order_by("scanned_at", "id").values("id", "qr_code", "scanned_at")
        ),
    }


# EOF
