"""Selectors for the inventory domain."""

from collections import OrderedDict

from common.exceptions import NotFound
from django.db.models import Count, Q, QuerySet, Sum

from .models import Shipment, ShipmentItem, Storage


def available_units() -> QuerySet:
    """Received units that no bundle has claimed."""
    return ShipmentItem.objects.filter(status=ShipmentItem.STATUS_RECEIVED, assembly_scan__isnull=True)


def calculate_available_quantity(product_id: int) -> int:
    """Sum of ``quantity`` over available units of a product."""
    total = available_units().filter(product_id=product_id).aggregate(total=Sum("quantity"))["total"]
    return int(total or 0)


def availability_by_product(product_ids) -> dict[int, int]:
    product_ids = list(product_ids)
    rows = (
        available_units()
        .filter(product_id__in=product_ids)
        .values("product_id")
        .annotate(total=Sum("quantity"))
    )
    available = {pid: 0 for pid in product_ids}
    for row in rows:
        available[row["product_id"]] = int(row["total"] or 0)
    return available


def get_scan_progress(shipment_id: int) -> dict:
    counts = ShipmentItem.objects.filter(shipment_id=shipment_id).aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=ShipmentItem.STATUS_PENDING)),
    )
    total = counts["total"] or 0
    pending = counts["pending"] or 0
    return {"total": total, "scanned": total - pending, "pending": pending}


def get_shipment_detail(shipment_id: int) -> dict:
    """Shipment header plus its units grouped by ``(brand, model)``."""
    try:
        shipment = Shipment.objects.get(id=shipment_id)
    except Shipment.DoesNotExist:
        raise NotFound("Shipment not found")

    groups: "OrderedDict[tuple[str, str], dict]" = OrderedDict()
    units = shipment.items.select_related("product", "storage").order_by("product__brand", "product__model", "id")
    for unit in units:
        key = (unit.product.brand, unit.product.model)
        group = groups.setdefault(
            key,
            {
                "brand": unit.product.brand,
                "model": unit.product.model,
                "product_id": unit.product_id,
                "pack_size": unit.product.pack_size,
                "items": [],
            },
        )
        group["items"].append(
            {
                "id": unit.id,
                "qr_code": unit.qr_code,
                "status": unit.status,
                "storage": unit.storage.name if unit.storage else None,
                "scanned_at": unit.scanned_at,
            }
        )
    for group in groups.values():
        group["quantity"] = len(group["items"])

    return {
        "id": shipment.id,
        "receipt_number": shipment.receipt_number,
        "receipt_date": shipment.receipt_date,
        "supplier_name": shipment.supplier_name,
        "status": shipment.status,
        "notes": shipment.notes,
        "created_at": shipment.created_at,
        "progress": get_scan_progress(shipment.id),
        "groups": list(groups.values()),
    }


def list_shipments(*, status: str | None = None, search: str | None = None) -> QuerySet:
    qs = Shipment.objects.annotate(
        unit_count=Count("items"),
        pending_count=Count("items", filter=Q(items__status=ShipmentItem.STATUS_PENDING)),
    )
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(Q(receipt_number__icontains=search) | Q(supplier_name__icontains=search))
    return qs.order_by("-created_at", "id")


def shipment_metrics() -> dict:
    by_status = {row["status"]: row["n"] for row in Shipment.objects.values("status").annotate(n=Count("id"))}
    units = {row["status"]: row["n"] for row in ShipmentItem.objects.values("status").annotate(n=Count("id"))}
    return {
        "shipments": {value: by_status.get(value, 0) for value, _ in Shipment.STATUS_CHOICES},
        "shipments_total": sum(by_status.values()),
        "units": {value: units.get(value, 0) for value, _ in ShipmentItem.STATUS_CHOICES},
        "units_total": sum(units.values()),
    }


def list_storages() -> QuerySet:
    return Storage.objects.filter(is_active=True).order_by("name", "id")


# EOF
