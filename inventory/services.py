"""Inventory services: shipment intake and inbound scanning.

All mutations run inside ``transaction.atomic``; rows that gate a decision
are locked with ``select_for_update`` and counters move with ``F()``.
Shopify side effects are queued after commit and never fail the caller.
"""

import logging
from collections import OrderedDict
from datetime import date

from catalog.models import Product
from catalog.services import find_or_create_pack_product
from common.codes import CodeGenerationError, extract_product_code, generate_unique_codes, is_valid_short_code
from common.exceptions import ConflictError, NotFound, ValidationFailed, WarehouseError
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from . import transitions
from .models import InventoryItem, Shipment, ShipmentItem, Storage

logger = logging.getLogger(__name__)

MAX_CODE_ROUNDS = 10


class ShipmentError(WarehouseError):
    pass


class ScanError(WarehouseError):
    pass


def codes_in_use(candidates) -> set[str]:
    """Return the subset of ``candidates`` already printed on any scannable record."""
    from assembly.models import Bundle

    candidates = list(candidates)
    taken = set(ShipmentItem.objects.filter(qr_code__in=candidates).values_list("qr_code", flat=True))
    taken |= set(Bundle.objects.filter(qr_code__in=candidates).values_list("qr_code", flat=True))
    taken |= set(InventoryItem.objects.filter(qr_code__in=candidates).values_list("qr_code", flat=True))
    return taken


def reserve_unique_codes(count: int) -> list[str]:
    """Produce ``count`` codes unique in the batch and unused in the database.

    Colliding slots are regenerated for a bounded number of rounds; the unique
    column on each table remains the final guard.
    """
    if count <= 0:
        return []
    codes = generate_unique_codes(count)
    for _ in range(MAX_CODE_ROUNDS):
        collisions = codes_in_use(codes)
        if not collisions:
            return codes
        keep = [c for c in codes if c not in collisions]
        fresh = generate_unique_codes(len(collisions), existing=set(keep) | collisions)
        codes = keep + fresh
    raise CodeGenerationError(f"Failed to reserve {count} unique codes after {MAX_CODE_ROUNDS} rounds")


def _queue_inventory_sync(product_ids) -> None:
    from shopify_sync.queue import queue_inventory_sync

    queue_inventory_sync(product_ids)


def _validate_shipment_input(receipt_number, receipt_date, supplier_name, items) -> None:
    if not (receipt_number or "").strip():
        raise ShipmentError("Receipt number is required")
    if not receipt_date:
        raise ShipmentError("Receipt date is required")
    if not (supplier_name or "").strip():
        raise ShipmentError("Supplier name is required")
    if not items:
        raise ShipmentError("At least one item is required")
    for item in items:
        if not item.get("product_id"):
            raise ShipmentError("Each item needs a product")
        pack_size = item.get("pack_size")
        if pack_size:
            if int(pack_size) < 2:
                raise ShipmentError("Pack size must be at least 2")
            if int(item.get("total_units") or 0) <= 0:
                raise ShipmentError("Total units must be positive when a pack size is given")
        elif int(item.get("quantity") or 0) <= 0:
            raise ShipmentError("Quantity must be positive")


@transaction.atomic
def create_shipment(
    *,
    receipt_number: str,
    receipt_date: date,
    supplier_name: str,
    items: list[dict],
    notes: str = "",
    user=None,
) -> dict:
    """Create a shipment and one pending unit per physical item.

    ``items`` entries carry ``product_id`` and ``quantity``; packable products
    may instead carry ``pack_size`` and ``total_units``, in which case one unit
    of the matching pack product is created per ``pack_size`` loose units.
    """
    _validate_shipment_input(receipt_number, receipt_date, supplier_name, items)

    product_ids = {int(item["product_id"]) for item in items}
    products = Product.objects.in_bulk(product_ids)
    missing = sorted(product_ids - set(products))
    if missing:
        raise NotFound(f"Product not found: {', '.join(str(pid) for pid in missing)}")

    # Divisibility is checked for every item before any pack row is written
    pack_pairs: "OrderedDict[tuple[int, int], Product]" = OrderedDict()
    for item in items:
        product = products[int(item["product_id"])]
        pack_size = item.get("pack_size")
        if not pack_size:
            continue
        if not product.is_packable:
            raise ShipmentError(f'"{product.name}" cannot be received in packs')
        total = int(item["total_units"])
        size = int(pack_size)
        if total % size != 0:
            raise ShipmentError(
                f'"{product.name}": total units ({total}) is not divisible by pack size ({size})'
            )
        pack_pairs.setdefault((product.id, size), product)

    resolved: dict[tuple[int, int], Product] = {}
    created_packs: list[int] = []
    for (base_id, size), base in pack_pairs.items():
        pack, created = find_or_create_pack_product(base_product=base, pack_size=size)
        resolved[(base_id, size)] = pack
        if created:
            created_packs.append(pack.id)

    plan: list[Product] = []
    for item in items:
        product = products[int(item["product_id"])]
        pack_size = item.get("pack_size")
        if pack_size:
            size = int(pack_size)
            plan.extend([resolved[(product.id, size)]] * (int(item["total_units"]) // size))
        else:
            plan.extend([product] * int(item["quantity"]))

    codes = reserve_unique_codes(len(plan))
    shipment = Shipment.objects.create(
        receipt_number=receipt_number.strip(),
        receipt_date=receipt_date,
        supplier_name=supplier_name.strip(),
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    units = [
        ShipmentItem(shipment=shipment, product=product, qr_code=code, quantity=1)
        for product, code in zip(plan, codes)
    ]
    created_units = ShipmentItem.objects.bulk_create(units, batch_size=settings.SHIPMENT_BATCH_SIZE)

    logger.info(
        "inventory.shipment_created",
        extra={
            "event": "inventory.shipment_created",
            "shipment_id": shipment.id,
            "unit_count": len(created_units),
            "pack_products_created": len(created_packs),
        },
    )

    if created_packs:
        from shopify_sync.queue import queue_shopify_product_creation

        queue_shopify_product_creation(created_packs)

    return {
        "shipment_id": shipment.id,
        "receipt_number": shipment.receipt_number,
        "items": [
            {
                "id": unit.id,
                "product_id": unit.product_id,
                "qr_code": unit.qr_code,
                "brand": unit.product.brand,
                "model": unit.product.model,
            }
            for unit in created_units
        ],
    }


SHIPMENT_FORWARD = {
    Shipment.STATUS_PENDING: {Shipment.STATUS_RECEIVED, Shipment.STATUS_COMPLETED},
    Shipment.STATUS_RECEIVED: {Shipment.STATUS_COMPLETED},
    Shipment.STATUS_COMPLETED: set(),
}


@transaction.atomic
def update_shipment_status(*, shipment_id: int, status: str) -> Shipment:
    try:
        shipment = Shipment.objects.select_for_update().get(id=shipment_id)
    except Shipment.DoesNotExist:
        raise NotFound("Shipment not found")
    if status not in SHIPMENT_FORWARD.get(shipment.status, set()):
        raise ShipmentError(f"Cannot change shipment status from {shipment.status} to {status}")
    previous = shipment.status
    shipment.status = status
    shipment.save(update_fields=["status", "updated_at"])
    logger.info(
        "inventory.shipment_status_changed",
        extra={
            "event": "inventory.shipment_status_changed",
            "shipment_id": shipment.id,
            "from_status": previous,
            "to_status": status,
        },
    )
    if status == Shipment.STATUS_RECEIVED:
        product_ids = shipment.items.values_list("product_id", flat=True).distinct()
        _queue_inventory_sync(list(product_ids))
    return shipment


@transaction.atomic
def delete_shipment(*, shipment_id: int) -> None:
    try:
        shipment = Shipment.objects.select_for_update().get(id=shipment_id)
    except Shipment.DoesNotExist:
        raise NotFound("Shipment not found")
    if shipment.status != Shipment.STATUS_PENDING:
        raise ConflictError("Only pending shipments can be deleted")
    if shipment.items.exclude(status=ShipmentItem.STATUS_PENDING).exists():
        raise ConflictError("Shipment has scanned items and cannot be deleted")
    shipment.delete()
    logger.info("inventory.shipment_deleted", extra={"event": "inventory.shipment_deleted", "shipment_id": shipment_id})


def reconcile_shipment_status(shipment_id: int) -> str:
    """Flip a pending shipment to received once none of its units is pending."""
    updated = (
        Shipment.objects.filter(id=shipment_id, status=Shipment.STATUS_PENDING)
        .exclude(items__status=ShipmentItem.STATUS_PENDING)
        .update(status=Shipment.STATUS_RECEIVED, updated_at=timezone.now())
    )
    if updated:
        logger.info(
            "inventory.shipment_status_changed",
            extra={
                "event": "inventory.shipment_status_changed",
                "shipment_id": shipment_id,
                "from_status": Shipment.STATUS_PENDING,
                "to_status": Shipment.STATUS_RECEIVED,
            },
        )
    return Shipment.objects.values_list("status", flat=True).get(id=shipment_id)


def _lock_storage(storage_id: int) -> Storage:
    try:
        return Storage.objects.select_for_update().get(id=storage_id, is_active=True)
    except Storage.DoesNotExist:
        raise NotFound("Storage not found")


@transaction.atomic
def scan_item(*, qr_code: str, storage_id: int, user=None) -> dict:
    """Receive one pending unit into a storage."""
    code = extract_product_code(qr_code)
    if not is_valid_short_code(code):
        raise ScanError("Invalid QR code format")

    try:
        unit = ShipmentItem.objects.select_for_update().select_related("product").get(qr_code=code)
    except ShipmentItem.DoesNotExist:
        raise NotFound(f"Item {code} not found")

    if unit.status == ShipmentItem.STATUS_RECEIVED:
        raise ScanError(f"Item {code} already received")
    transitions.ensure_status(unit, transitions.SCANNABLE_INBOUND, action="inbound scan")

    storage = _lock_storage(storage_id)
    if storage.used_capacity >= storage.capacity:
        raise ScanError(f"Storage {storage.name} is full")

    transitions.transition_unit(unit, ShipmentItem.STATUS_RECEIVED, storage=storage, scanned_at=timezone.now())
    Storage.objects.filter(id=storage.id).update(used_capacity=F("used_capacity") + unit.quantity)

    shipment_status = reconcile_shipment_status(unit.shipment_id)

    logger.info(
        "inventory.unit_received",
        extra={
            "event": "inventory.unit_received",
            "unit_id": unit.id,
            "product_id": unit.product_id,
            "shipment_id": unit.shipment_id,
            "storage_id": storage.id,
            "user_id": getattr(user, "id", None),
        },
    )
    _queue_inventory_sync([unit.product_id])

    return {
        "item_id": unit.id,
        "qr_code": unit.qr_code,
        "product_id": unit.product_id,
        "product_name": unit.product.name,
        "storage_id": storage.id,
        "shipment_id": unit.shipment_id,
        "shipment_status": shipment_status,
    }


@transaction.atomic
def bulk_receive(*, shipment_id: int, storage_id: int, user=None) -> dict:
    """Receive every pending unit of a shipment into one storage."""
    if not Shipment.objects.filter(id=shipment_id).exists():
        raise NotFound("Shipment not found")
    units = list(
        ShipmentItem.objects.select_for_update()
        .filter(shipment_id=shipment_id, status=ShipmentItem.STATUS_PENDING)
        .order_by("id")
    )
    if not units:
        raise ScanError("No pending items in this shipment")

    storage = _lock_storage(storage_id)
    needed = sum(unit.quantity for unit in units)
    if storage.free_capacity < needed:
        raise ScanError(f"Storage {storage.name} has room for {storage.free_capacity} items, {needed} needed")

    transitions.transition_units(units, ShipmentItem.STATUS_RECEIVED, storage=storage, scanned_at=timezone.now())
    Storage.objects.filter(id=storage.id).update(used_capacity=F("used_capacity") + needed)
    shipment_status = reconcile_shipment_status(shipment_id)

    product_ids = sorted({unit.product_id for unit in units})
    logger.info(
        "inventory.shipment_bulk_received",
        extra={
            "event": "inventory.shipment_bulk_received",
            "shipment_id": shipment_id,
            "storage_id": storage.id,
            "unit_count": len(units),
            "user_id": getattr(user, "id", None),
        },
    )
    _queue_inventory_sync(product_ids)
    return {"shipment_id": shipment_id, "received": len(units), "shipment_status": shipment_status}


@transaction.atomic
def create_storage(*, name: str, capacity: int, location: str = "") -> Storage:
    if not (name or "").strip():
        raise ValidationFailed("Storage name is required")
    if capacity < 0:
        raise ValidationFailed("Capacity must not be negative")
    return Storage.objects.create(name=name.strip(), capacity=capacity, location=location or "")


# EOF
