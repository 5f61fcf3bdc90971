"""Delivery services: shipping hand-off, outcomes and failure resolutions.

Every change to a delivery writes a ``DeliveryHistory`` row in the same
transaction. External notifications (Shopify fulfillment, customer portal)
are queued to run after commit.
"""

import logging

from catalog.models import Product
from common.choices import ResolutionType
from common.exceptions import ConflictError, NotFound, ValidationFailed, WarehouseError
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from inventory import transitions
from inventory.models import ShipmentItem, Storage
from orders.models import Order, OrderItem

from .models import Delivery, DeliveryHistory, DeliveryResolution

logger = logging.getLogger(__name__)

FINAL_STATUSES = {Delivery.STATUS_DELIVERED, Delivery.STATUS_FAILED, Delivery.STATUS_CANCELLED}

ORDER_STATUS_FOR = {
    Delivery.STATUS_DELIVERED: Order.DELIVERY_DELIVERED,
    Delivery.STATUS_FAILED: Order.DELIVERY_FAILED,
    Delivery.STATUS_CANCELLED: Order.DELIVERY_FAILED,
}

RESOLUTION_STEPS = {
    DeliveryResolution.STATUS_PENDING: {DeliveryResolution.STATUS_IN_PROGRESS, DeliveryResolution.STATUS_COMPLETED},
    DeliveryResolution.STATUS_IN_PROGRESS: {DeliveryResolution.STATUS_COMPLETED},
    DeliveryResolution.STATUS_COMPLETED: set(),
}
OPEN_RESOLUTION_STATUSES = (DeliveryResolution.STATUS_PENDING, DeliveryResolution.STATUS_IN_PROGRESS)
# Types that settle the units for good; a delivery keeps at most one
SETTLING_RESOLUTION_TYPES = (DeliveryResolution.TYPE_RE_IMPORT, DeliveryResolution.TYPE_RETURN_TO_SUPPLIER)


class DeliveryError(WarehouseError):
    pass


def _order_units(order_id: int) -> list[ShipmentItem]:
    unit_ids = OrderItem.objects.filter(order_id=order_id, unit__isnull=False).values_list("unit_id", flat=True)
    return list(ShipmentItem.objects.select_for_update().filter(id__in=list(unit_ids)).order_by("id"))


def _lock_delivery(delivery_id: int) -> Delivery:
    try:
        return Delivery.objects.select_for_update().select_related("order", "order__customer").get(id=delivery_id)
    except Delivery.DoesNotExist:
        raise NotFound("Delivery not found")


def _record(delivery: Delivery, to_status: str, *, from_status: str = "", notes: str = "", user=None):
    return DeliveryHistory.objects.create(
        delivery=delivery,
        from_status=from_status or "",
        to_status=to_status,
        notes=notes or "",
        changed_by=user if getattr(user, "is_authenticated", False) else None,
    )


def portal_owner_id(customer) -> str:
    """Owner id the customer portal knows this customer by."""
    if customer.email:
        return f"email:{customer.email.strip().lower()}"
    return f"phone:{customer.phone}"


@transaction.atomic
def mark_order_shipped(
    *, order_id: int, shipper_name: str, shipper_phone: str = "", tracking_number: str = "", user=None
) -> Delivery:
    """Hand an order to a shipper and move its units to ``shipped``."""
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise NotFound("Order not found")
    if Delivery.objects.filter(order=order).exists():
        raise DeliveryError("A delivery already exists for this order")
    if not (shipper_name or "").strip():
        raise ValidationFailed("Shipper name is required")
    if order.fulfillment_status != Order.FULFILLMENT_FULFILLED:
        raise DeliveryError(f"Order {order.order_number} has items waiting to be scanned")

    units = _order_units(order.id)
    for unit in units:
        transitions.ensure_status(unit, transitions.SHIPPABLE, action="shipping")
    allocated = [u for u in units if u.status == ShipmentItem.STATUS_ALLOCATED]
    transitions.transition_units(allocated, ShipmentItem.STATUS_SOLD)
    transitions.transition_units(units, ShipmentItem.STATUS_SHIPPED)

    order.delivery_status = Order.DELIVERY_WAITING
    order.save(update_fields=["delivery_status", "updated_at"])

    delivery = Delivery.objects.create(
        order=order,
        shipper_name=shipper_name.strip(),
        shipper_phone=shipper_phone or "",
        tracking_number=tracking_number or "",
    )
    _record(delivery, Delivery.STATUS_WAITING, notes="Handed over to shipper", user=user)

    logger.info(
        "deliveries.order_shipped",
        extra={
            "event": "deliveries.order_shipped",
            "order_id": order.id,
            "delivery_id": delivery.id,
            "unit_count": len(units),
            "user_id": getattr(user, "id", None),
        },
    )

    if order.is_shopify and order.shopify_order_id:
        from shopify_sync.queue import queue_shopify_fulfillment_sync

        queue_shopify_fulfillment_sync(
            "create",
            {
                "organization_id": order.organization_id,
                "shopify_order_id": order.shopify_order_id,
                "tracking_number": delivery.tracking_number,
                "delivery_id": delivery.id,
            },
        )
    return delivery


@transaction.atomic
def update_delivery_status(
    *,
    delivery_id: int,
    status: str,
    failure_reason: str = "",
    failure_category: str = "",
    notes: str = "",
    user=None,
) -> Delivery:
    """Record the outcome of a delivery that is out with a shipper."""
    delivery = _lock_delivery(delivery_id)
    if delivery.status != Delivery.STATUS_WAITING:
        raise DeliveryError(f"Delivery is already {delivery.status}")
    if status not in FINAL_STATUSES:
        raise ValidationFailed(f"Unsupported delivery status: {status}")
    if status == Delivery.STATUS_FAILED and not failure_category:
        raise ValidationFailed("Failure category is required for failed deliveries")

    previous = delivery.status
    now = timezone.now()
    order = delivery.order
    units = []
    if status == Delivery.STATUS_DELIVERED:
        units = _order_units(order.id)
        transitions.transition_units(units, ShipmentItem.STATUS_DELIVERED, delivered_at=now)

    delivery.status = status
    delivery.delivered_at = now if status == Delivery.STATUS_DELIVERED else None
    delivery.failure_reason = failure_reason or ""
    delivery.failure_category = failure_category or ""
    delivery.notes = notes or ""
    delivery.confirmed_by = user if getattr(user, "is_authenticated", False) else None
    delivery.save()

    order.delivery_status = ORDER_STATUS_FOR[status]
    order.save(update_fields=["delivery_status", "updated_at"])
    _record(delivery, status, from_status=previous, notes=notes, user=user)

    logger.info(
        "deliveries.status_changed",
        extra={
            "event": "deliveries.status_changed",
            "delivery_id": delivery.id,
            "from_status": previous,
            "to_status": status,
            "failure_category": failure_category or None,
            "user_id": getattr(user, "id", None),
        },
    )

    if status == Delivery.STATUS_DELIVERED:
        _queue_delivered_notifications(delivery, units)
    return delivery


def _queue_delivered_notifications(delivery: Delivery, units: list[ShipmentItem]) -> None:
    from shopify_sync.queue import queue_shopify_fulfillment_sync
    from warranty.notifier import queue_portal_event

    order = delivery.order
    if order.is_shopify and delivery.shopify_fulfillment_id:
        queue_shopify_fulfillment_sync(
            "delivered",
            {"organization_id": order.organization_id, "shopify_fulfillment_id": delivery.shopify_fulfillment_id},
        )
    owner = portal_owner_id(order.customer)
    products = Product.objects.in_bulk({u.product_id for u in units})
    for unit in units:
        product = products[unit.product_id]
        queue_portal_event(
            "product.sold",
            {
                "qrCode": unit.qr_code,
                "shopifyOrderId": order.shopify_order_id,
                "customerId": owner,
                "productDetails": {"name": product.name, "brand": product.brand, "model": product.model},
                "purchaseDate": delivery.delivered_at.isoformat(),
                "warrantyMonths": unit.warranty_months,
            },
        )


@transaction.atomic
def create_failure_resolution(
    *,
    delivery_id: int,
    resolution_type: str,
    target_storage_id: int | None = None,
    supplier_return_reason: str = "",
    scheduled_date=None,
    notes: str = "",
    user=None,
) -> DeliveryResolution:
    delivery = _lock_delivery(delivery_id)
    if delivery.status != Delivery.STATUS_FAILED:
        raise DeliveryError("Resolutions can only be created for failed deliveries")
    if resolution_type not in ResolutionType.values:
        raise ValidationFailed(f"Unsupported resolution type: {resolution_type}")
    if target_storage_id and not Storage.objects.filter(id=target_storage_id).exists():
        raise NotFound("Storage not found")
    earlier = delivery.resolutions.all()
    if earlier.filter(resolution_status__in=OPEN_RESOLUTION_STATUSES).exists():
        raise ConflictError("This delivery already has an open resolution")
    settled = earlier.filter(
        resolution_type__in=SETTLING_RESOLUTION_TYPES, resolution_status=DeliveryResolution.STATUS_COMPLETED
    )
    if settled.exists():
        raise ConflictError("The units of this delivery have already been settled")

    resolution = DeliveryResolution.objects.create(
        delivery=delivery,
        resolution_type=resolution_type,
        target_storage_id=target_storage_id,
        supplier_return_reason=supplier_return_reason or "",
        scheduled_date=scheduled_date,
        notes=notes or "",
        processed_by=user if getattr(user, "is_authenticated", False) else None,
    )
    _record(
        delivery,
        f"resolution_{resolution_type}",
        notes=f"Resolution created: {resolution.get_resolution_type_display()}",
        user=user,
    )
    logger.info(
        "deliveries.resolution_created",
        extra={
            "event": "deliveries.resolution_created",
            "delivery_id": delivery.id,
            "resolution_id": resolution.id,
            "resolution_type": resolution_type,
        },
    )
    return resolution


@transaction.atomic
def process_resolution(*, resolution_id: int, status: str, user=None) -> DeliveryResolution:
    """Advance a resolution; completing it applies its side effect."""
    try:
        resolution = DeliveryResolution.objects.select_for_update().get(id=resolution_id)
    except DeliveryResolution.DoesNotExist:
        raise NotFound("Resolution not found")
    current = resolution.resolution_status
    if status not in RESOLUTION_STEPS.get(current, set()):
        raise DeliveryError(f"Resolution cannot move from {current} to {status}")

    delivery = _lock_delivery(resolution.delivery_id)
    if delivery.status != Delivery.STATUS_FAILED:
        raise DeliveryError(f"Delivery is {delivery.status}, resolutions apply only to failed deliveries")
    resolution.resolution_status = status
    if status == DeliveryResolution.STATUS_COMPLETED:
        resolution.completed_at = timezone.now()
        _apply_resolution(resolution, delivery, user=user)
    resolution.processed_by = user if getattr(user, "is_authenticated", False) else resolution.processed_by
    resolution.save()

    verb = "completed" if status == DeliveryResolution.STATUS_COMPLETED else "started"
    _record(
        delivery,
        f"resolution_{status}",
        notes=f"Resolution {verb}: {resolution.get_resolution_type_display()}",
        user=user,
    )
    logger.info(
        "deliveries.resolution_processed",
        extra={
            "event": "deliveries.resolution_processed",
            "resolution_id": resolution.id,
            "resolution_type": resolution.resolution_type,
            "from_status": current,
            "to_status": status,
        },
    )
    return resolution


def _apply_resolution(resolution: DeliveryResolution, delivery: Delivery, *, user=None) -> None:
    if resolution.resolution_type == DeliveryResolution.TYPE_RETRY_DELIVERY:
        delivery.status = Delivery.STATUS_WAITING
        delivery.failure_reason = ""
        delivery.failure_category = ""
        delivery.delivered_at = None
        delivery.save(update_fields=["status", "failure_reason", "failure_category", "delivered_at", "updated_at"])
        Order.objects.filter(id=delivery.order_id).update(
            delivery_status=Order.DELIVERY_WAITING, updated_at=timezone.now()
        )
        _record(
            delivery,
            Delivery.STATUS_WAITING,
            from_status=Delivery.STATUS_FAILED,
            notes="Delivery retried after failure",
            user=user,
        )
        return

    units = _order_units(delivery.order_id)
    transitions.transition_units(units, ShipmentItem.STATUS_RETURNED)

    if resolution.resolution_type == DeliveryResolution.TYPE_RETURN_TO_SUPPLIER:
        logger.info(
            "deliveries.returned_to_supplier",
            extra={
                "event": "deliveries.returned_to_supplier",
                "delivery_id": delivery.id,
                "unit_ids": [u.id for u in units],
                "reason": resolution.supplier_return_reason,
            },
        )
        return

    fields = {}
    if resolution.target_storage_id:
        storage = Storage.objects.select_for_update().get(id=resolution.target_storage_id)
        if storage.free_capacity < len(units):
            raise DeliveryError(
                f"Storage {storage.name} has room for {storage.free_capacity} items, {len(units)} needed"
            )
        Storage.objects.filter(id=storage.id).update(used_capacity=F("used_capacity") + len(units))
        fields["storage"] = storage
    transitions.transition_units(units, ShipmentItem.STATUS_RECEIVED, **fields)

    from shopify_sync.queue import queue_inventory_sync

    queue_inventory_sync(sorted({u.product_id for u in units}))
