"""Customer portal services: warehouse sync events, verification, claims, transfers.

The warehouse tells the portal when units are sold, delivered, returned or
replaced; the portal keeps warranty and ownership on the unit row. Only the
current owner may claim or transfer a unit.
"""

import calendar
import logging
from datetime import datetime

from common.codes import extract_product_code, is_valid_short_code
from common.exceptions import NotFound, ValidationFailed, WarehouseError
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from inventory.models import ShipmentItem

from .models import CustomerScan, OwnershipTransfer, WarrantyClaim

logger = logging.getLogger(__name__)

SYNC_EVENTS = ("product.sold", "product.returned", "product.replaced", "delivery.completed")


class PortalError(WarehouseError):
    pass


class NotOwner(PortalError):
    status_code = 403


def add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def warranty_expires_at(unit: ShipmentItem) -> datetime | None:
    if not unit.warranty_started_at:
        return None
    return add_months(unit.warranty_started_at, unit.warranty_months)


def effective_warranty_status(unit: ShipmentItem, now: datetime | None = None) -> str:
    """Stored status, except an active warranty past its term reads as expired."""
    now = now or timezone.now()
    expires = warranty_expires_at(unit)
    if unit.warranty_status == ShipmentItem.WARRANTY_ACTIVE and expires is not None and expires <= now:
        return str(ShipmentItem.WARRANTY_EXPIRED)
    return str(unit.warranty_status)


def _lock_unit(qr_code: str) -> ShipmentItem:
    try:
        return ShipmentItem.objects.select_for_update().get(qr_code=qr_code)
    except ShipmentItem.DoesNotExist:
        raise NotFound("Product not found")


# Warehouse sync events


def _activate(
    unit: ShipmentItem, *, owner_id: str, months: int, started_at: datetime, delivered_at: datetime | None = None
) -> None:
    fields = ["current_owner_id", "warranty_months", "warranty_status", "warranty_started_at", "updated_at"]
    unit.current_owner_id = owner_id
    unit.warranty_months = months
    unit.warranty_status = ShipmentItem.WARRANTY_ACTIVE
    unit.warranty_started_at = started_at
    if delivered_at is not None:
        unit.delivered_at = delivered_at
        fields.append("delivered_at")
    unit.save(update_fields=fields)


@transaction.atomic
def handle_product_sold(data: dict) -> dict:
    unit = _lock_unit(data["qr_code"])
    _activate(
        unit,
        owner_id=data["customer_id"],
        months=data.get("warranty_months") or 12,
        started_at=data["purchase_date"],
    )
    return {"product_unit_id": unit.id}


@transaction.atomic
def handle_product_returned(data: dict) -> dict:
    unit = _lock_unit(data["qr_code"])
    unit.warranty_status = ShipmentItem.WARRANTY_VOID
    unit.current_owner_id = ""
    unit.save(update_fields=["warranty_status", "current_owner_id", "updated_at"])
    return {"product_unit_id": unit.id}


@transaction.atomic
def handle_product_replaced(data: dict) -> dict:
    unit = _lock_unit(data["qr_code"])
    unit.warranty_status = ShipmentItem.WARRANTY_VOID
    unit.save(update_fields=["warranty_status", "updated_at"])
    return {"product_unit_id": unit.id}


@transaction.atomic
def handle_delivery_completed(data: dict) -> dict:
    """Activate the warranty of every delivered item; unknown codes are skipped."""
    delivered_at = data["delivered_at"]
    processed = []
    for item in data["items"]:
        unit = ShipmentItem.objects.select_for_update().filter(qr_code=item["qr_code"]).first()
        if unit is None:
            logger.warning(
                "warranty.unknown_unit",
                extra={"event": "warranty.unknown_unit", "qr_code": item["qr_code"]},
            )
            continue
        _activate(
            unit,
            owner_id=data["customer_id"],
            months=item.get("warranty_months") or 12,
            started_at=delivered_at,
            delivered_at=delivered_at,
        )
        processed.append(unit.id)
    return {"processed_count": len(processed), "product_unit_ids": processed}


SYNC_HANDLERS = {
    "product.sold": handle_product_sold,
    "product.returned": handle_product_returned,
    "product.replaced": handle_product_replaced,
    "delivery.completed": handle_delivery_completed,
}


def process_warehouse_sync_event(event: str, data: dict) -> dict:
    handler = SYNC_HANDLERS.get(event)
    if handler is None:
        raise ValidationFailed(f"Unknown event: {event}")
    result = handler(data)
    logger.info("warranty.sync_event", extra={"event": "warranty.sync_event", "sync_event": event, **result})
    return result


# Customer-facing operations


def _product_block(unit: ShipmentItem) -> dict:
    from shopify_sync.models import ShopifyProductMapping

    product = unit.product
    mapping = ShopifyProductMapping.objects.filter(product_id=product.id).first()
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "model": product.model,
        "product_type": product.product_type,
        "description": product.description,
        "color_hex": product.color_hex,
        "shopify_product_id": mapping.shopify_product_id if mapping else None,
    }


def _unit_block(unit: ShipmentItem, now: datetime) -> dict:
    expires = warranty_expires_at(unit)
    return {
        "id": unit.id,
        "qr_code": unit.qr_code,
        "status": unit.status,
        "is_authentic": unit.is_authentic,
        "delivered_at": unit.delivered_at,
        "customer_scan_count": unit.customer_scan_count,
        "warranty": {
            "status": effective_warranty_status(unit, now),
            "months": unit.warranty_months,
            "started_at": unit.warranty_started_at,
            "expires_at": expires,
        },
    }


def _ownership_block(unit: ShipmentItem) -> dict:
    claims = list(
        WarrantyClaim.objects.filter(unit=unit).values("id", "claim_type", "title", "status", "submitted_at")
    )
    return {
        "owner_id": unit.current_owner_id,
        "claims": claims,
        "transfer_count": OwnershipTransfer.objects.filter(unit=unit).count(),
    }


def normalize_portal_code(raw: str) -> str:
    code = extract_product_code(raw or "")
    if not is_valid_short_code(code):
        raise ValidationFailed("Invalid QR code format")
    return code


@transaction.atomic
def verify_product(qr_code: str, *, customer_id: str | None = None, now: datetime | None = None) -> dict:
    """Look a unit up for the public verification page and record the scan.

    The ownership block is only included for the unit's current owner.
    """
    now = now or timezone.now()
    code = normalize_portal_code(qr_code)
    try:
        unit = ShipmentItem.objects.select_for_update().select_related("product").get(qr_code=code)
    except ShipmentItem.DoesNotExist:
        raise NotFound("Product not found")

    CustomerScan.objects.create(qr_code=code, unit=unit, customer_id=customer_id or "", scanned_at=now)
    ShipmentItem.objects.filter(id=unit.id).update(
        customer_scan_count=F("customer_scan_count") + 1, last_scanned_by_customer_at=now
    )
    ShipmentItem.objects.filter(id=unit.id, first_scanned_by_customer_at__isnull=True).update(
        first_scanned_by_customer_at=now
    )
    unit.refresh_from_db()

    result = {"product": _product_block(unit), "unit": _unit_block(unit, now)}
    if customer_id and unit.current_owner_id and customer_id == unit.current_owner_id:
        result["ownership"] = _ownership_block(unit)
    logger.info(
        "warranty.verified",
        extra={"event": "warranty.verified", "unit_id": unit.id, "is_owner": "ownership" in result},
    )
    return result


def _owned_unit(qr_code: str, customer_id: str) -> ShipmentItem:
    unit = _lock_unit(normalize_portal_code(qr_code))
    if not customer_id or unit.current_owner_id != customer_id:
        raise NotOwner("You are not the owner of this product")
    return unit


@transaction.atomic
def submit_claim(
    *,
    customer_id: str,
    qr_code: str,
    claim_type: str,
    title: str,
    description: str,
    images: list | None = None,
    now: datetime | None = None,
) -> WarrantyClaim:
    now = now or timezone.now()
    unit = _owned_unit(qr_code, customer_id)
    status = effective_warranty_status(unit, now)
    if status == ShipmentItem.WARRANTY_PENDING:
        raise PortalError("Warranty is not active yet. Please wait until the product is delivered.")
    if status == ShipmentItem.WARRANTY_VOID:
        raise PortalError("Warranty has been voided")
    if status == ShipmentItem.WARRANTY_EXPIRED:
        raise PortalError("Warranty has expired")

    claim = WarrantyClaim.objects.create(
        unit=unit,
        customer_id=customer_id,
        claim_type=claim_type,
        title=title,
        description=description,
        images=list(images or []),
        submitted_at=now,
    )
    logger.info(
        "warranty.claim_submitted",
        extra={"event": "warranty.claim_submitted", "claim_id": claim.id, "unit_id": unit.id, "type": claim_type},
    )
    return claim


@transaction.atomic
def transfer_ownership(*, customer_id: str, qr_code: str, new_owner_email: str) -> OwnershipTransfer:
    """Hand a unit and its warranty to the owner of ``new_owner_email``."""
    unit = _owned_unit(qr_code, customer_id)
    new_owner_id = f"email:{new_owner_email.strip().lower()}"
    if new_owner_id == unit.current_owner_id:
        raise ValidationFailed("The product already belongs to this owner")

    transfer = OwnershipTransfer.objects.create(
        unit=unit, from_owner_id=customer_id, to_owner_id=new_owner_id, warranty_transferred=True
    )
    unit.current_owner_id = new_owner_id
    unit.save(update_fields=["current_owner_id", "updated_at"])
    logger.info(
        "warranty.ownership_transferred",
        extra={"event": "warranty.ownership_transferred", "transfer_id": transfer.id, "unit_id": unit.id},
    )
    return transfer


def expire_warranties(now: datetime | None = None) -> int:
    """Mark active warranties whose term has ended as expired. Returns the count."""
    now = now or timezone.now()
    candidates = ShipmentItem.objects.filter(
        warranty_status=ShipmentItem.WARRANTY_ACTIVE, warranty_started_at__isnull=False
    ).only("id", "warranty_started_at", "warranty_months")
    ended = [unit.id for unit in candidates.iterator() if warranty_expires_at(unit) <= now]
    if not ended:
        return 0
    updated = ShipmentItem.objects.filter(id__in=ended, warranty_status=ShipmentItem.WARRANTY_ACTIVE).update(
        warranty_status=ShipmentItem.WARRANTY_EXPIRED, updated_at=now
    )
    logger.info("warranty.expired", extra={"event": "warranty.expired", "count": updated})
    return updated
