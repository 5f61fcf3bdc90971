"""Assembly services: the bundle phase state machine.

The server owns the counts: each scan increments ``scanned_count`` with
``F()`` while the bundle row is locked, so concurrent devices can never push
a phase past ``expected_count``. Advancing to the next phase is an explicit
operator step (``confirm_phase_transition``).
"""

import logging

from catalog.models import Product
from common.codes import extract_product_code, generate_unique_short_code, is_valid_short_code
from common.exceptions import NotFound, WarehouseError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from inventory import transitions
from inventory.models import InventoryItem, ShipmentItem
from inventory.services import codes_in_use, reserve_unique_codes

from .models import AssemblyScan, Bundle, BundleItem
from .selectors import phases_for, session_payload

logger = logging.getLogger(__name__)


class AssemblyError(WarehouseError):
    pass


def _lock_bundle(bundle_id: int) -> Bundle:
    try:
        return Bundle.objects.select_for_update().get(id=bundle_id)
    except Bundle.DoesNotExist:
        raise NotFound("Bundle not found")


def _queue_inventory_sync(product_ids) -> None:
    from shopify_sync.queue import queue_inventory_sync

    queue_inventory_sync(product_ids)


def _new_bundle_code() -> str:
    for _ in range(10):
        candidate = generate_unique_short_code(set())
        if not codes_in_use([candidate]):
            return candidate
    raise AssemblyError("Could not allocate a bundle code")


@transaction.atomic
def create_bundle(*, name: str, items: list[dict], user=None) -> Bundle:
    """Create a pending bundle whose phases follow the order of ``items``."""
    if not (name or "").strip():
        raise AssemblyError("Bundle name is required")
    if not items:
        raise AssemblyError("A bundle needs at least one product")
    for item in items:
        if int(item.get("expected_count") or 0) < 1:
            raise AssemblyError("Expected count must be at least 1")

    product_ids = {int(item["product_id"]) for item in items}
    found = set(Product.objects.filter(id__in=product_ids).values_list("id", flat=True))
    missing = sorted(product_ids - found)
    if missing:
        raise NotFound(f"Product not found: {', '.join(str(pid) for pid in missing)}")

    bundle = Bundle.objects.create(
        name=name.strip(),
        qr_code=_new_bundle_code(),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    BundleItem.objects.bulk_create(
        [
            BundleItem(
                bundle=bundle,
                product_id=int(item["product_id"]),
                expected_count=int(item["expected_count"]),
                phase_order=index,
            )
            for index, item in enumerate(items)
        ]
    )
    logger.info(
        "assembly.bundle_created",
        extra={"event": "assembly.bundle_created", "bundle_id": bundle.id, "phase_count": len(items)},
    )
    return bundle


@transaction.atomic
def start_assembly_session(*, bundle_qr: str, user=None) -> dict:
    code = extract_product_code(bundle_qr)
    try:
        bundle = Bundle.objects.select_for_update().get(qr_code=code)
    except Bundle.DoesNotExist:
        raise NotFound("No bundle found for this QR code")
    if bundle.status == Bundle.STATUS_COMPLETED:
        raise AssemblyError("This bundle has already been assembled")
    if bundle.status == Bundle.STATUS_SOLD:
        raise AssemblyError("This bundle has already been sold")
    if bundle.status == Bundle.STATUS_ABANDONED:
        raise AssemblyError("This bundle was abandoned")
    if not bundle.items.exists():
        raise AssemblyError("This bundle has no products")

    if bundle.status == Bundle.STATUS_PENDING:
        bundle.status = Bundle.STATUS_ASSEMBLING
        bundle.assembly_started_at = timezone.now()
        bundle.save(update_fields=["status", "assembly_started_at", "updated_at"])
        logger.info(
            "assembly.session_started",
            extra={"event": "assembly.session_started", "bundle_id": bundle.id, "user_id": getattr(user, "id", None)},
        )
    return session_payload(bundle)


@transaction.atomic
def scan_assembly(*, bundle_id: int, code: str, user=None) -> dict:
    """Bind one received unit to the bundle's current phase."""
    bundle = _lock_bundle(bundle_id)
    if bundle.status != Bundle.STATUS_ASSEMBLING:
        raise AssemblyError("Bundle is not being assembled")

    normalized = extract_product_code(code)
    if not is_valid_short_code(normalized):
        raise AssemblyError("Invalid QR code format")
    try:
        unit = ShipmentItem.objects.select_for_update().select_related("product").get(qr_code=normalized)
    except ShipmentItem.DoesNotExist:
        raise NotFound("QR code does not exist")
    if AssemblyScan.objects.filter(unit=unit).exists():
        raise AssemblyError("QR code has already been used")
    transitions.ensure_status(unit, transitions.PICKABLE, action="assembly")

    phases = phases_for(bundle)
    if bundle.current_phase_index >= len(phases):
        raise AssemblyError("Current phase not found")
    current = phases[bundle.current_phase_index]
    if unit.product_id != current.product_id:
        owner = next((p for p in phases if p.product_id == unit.product_id), None)
        if owner is not None:
            raise AssemblyError(
                f"{unit.product.name} belongs to phase {owner.phase_order + 1}, "
                f"current phase is {current.phase_order + 1} ({current.product.name})"
            )
        raise AssemblyError(f"{unit.product.name} is not part of this bundle")
    if current.is_complete:
        raise AssemblyError("Current phase is complete. Confirm the transition to the next phase.")

    try:
        with transaction.atomic():
            AssemblyScan.objects.create(
                bundle=bundle,
                bundle_item=current,
                unit=unit,
                scanned_by=user if getattr(user, "is_authenticated", False) else None,
            )
    except IntegrityError:
        raise AssemblyError("QR code has already been used")

    BundleItem.objects.filter(id=current.id).update(scanned_count=F("scanned_count") + 1, updated_at=timezone.now())
    Bundle.objects.filter(id=bundle.id).update(updated_at=timezone.now())
    current.refresh_from_db(fields=["scanned_count"])
    is_all_complete = current.is_complete and all(p.is_complete for p in phases if p.id != current.id)

    logger.info(
        "assembly.unit_scanned",
        extra={
            "event": "assembly.unit_scanned",
            "bundle_id": bundle.id,
            "unit_id": unit.id,
            "phase": current.phase_order,
            "scanned_count": current.scanned_count,
        },
    )
    _queue_inventory_sync([unit.product_id])
    return {
        "scanned_count": current.scanned_count,
        "expected_count": current.expected_count,
        "is_phase_complete": current.is_complete,
        "is_all_complete": is_all_complete,
        "product_name": unit.product.name,
        "current_phase_index": bundle.current_phase_index,
    }


@transaction.atomic
def confirm_phase_transition(*, bundle_id: int) -> dict:
    bundle = _lock_bundle(bundle_id)
    if bundle.status != Bundle.STATUS_ASSEMBLING:
        raise AssemblyError("Bundle is not being assembled")
    phases = phases_for(bundle)
    if bundle.current_phase_index >= len(phases):
        raise AssemblyError("Current phase not found")
    current = phases[bundle.current_phase_index]
    if not current.is_complete:
        raise AssemblyError(
            f"Phase {current.phase_order + 1} is incomplete ({current.scanned_count}/{current.expected_count})"
        )
    if bundle.current_phase_index == len(phases) - 1:
        return {"is_complete": True, "current_phase_index": bundle.current_phase_index}

    bundle.current_phase_index += 1
    bundle.save(update_fields=["current_phase_index", "updated_at"])
    logger.info(
        "assembly.phase_advanced",
        extra={"event": "assembly.phase_advanced", "bundle_id": bundle.id, "phase": bundle.current_phase_index},
    )
    return {"is_complete": False, "current_phase_index": bundle.current_phase_index}


@transaction.atomic
def complete_assembly(*, bundle_id: int, user=None) -> dict:
    """Consume the scanned components and stock the assembled output."""
    bundle = _lock_bundle(bundle_id)
    if bundle.status != Bundle.STATUS_ASSEMBLING:
        raise AssemblyError("Bundle is not being assembled")
    phases = phases_for(bundle)
    if not phases or not all(p.is_complete for p in phases):
        raise AssemblyError("Not all products have been scanned")

    scans = list(bundle.scans.select_related("unit"))
    units = list(ShipmentItem.objects.select_for_update().filter(id__in=[s.unit_id for s in scans]).order_by("id"))
    transitions.transition_units(units, ShipmentItem.STATUS_SOLD)

    codes = reserve_unique_codes(len(units))
    creator = user if getattr(user, "is_authenticated", False) else None
    InventoryItem.objects.bulk_create(
        [
            InventoryItem(
                qr_code=code,
                product_id=unit.product_id,
                status=InventoryItem.STATUS_IN_STOCK,
                source_type=InventoryItem.SOURCE_ASSEMBLY,
                bundle=bundle,
                created_by=creator,
            )
            for unit, code in zip(units, codes)
        ]
    )

    bundle.status = Bundle.STATUS_COMPLETED
    bundle.assembly_completed_at = timezone.now()
    bundle.assembled_by = creator
    bundle.save(update_fields=["status", "assembly_completed_at", "assembled_by", "updated_at"])

    product_ids = sorted({unit.product_id for unit in units})
    logger.info(
        "assembly.bundle_completed",
        extra={"event": "assembly.bundle_completed", "bundle_id": bundle.id, "unit_count": len(units)},
    )

    _queue_inventory_sync(product_ids)
    return {"bundle_id": bundle.id, "status": bundle.status, "items_created": len(units)}


@transaction.atomic
def abandon_bundle(*, bundle_id: int) -> Bundle:
    bundle = _lock_bundle(bundle_id)
    if bundle.status not in (Bundle.STATUS_PENDING, Bundle.STATUS_ASSEMBLING):
        raise AssemblyError(f"Cannot abandon a {bundle.status} bundle")
    product_ids = set(bundle.scans.values_list("unit__product_id", flat=True))
    released, _ = bundle.scans.all().delete()
    bundle.items.update(scanned_count=0, updated_at=timezone.now())
    bundle.status = Bundle.STATUS_ABANDONED
    bundle.current_phase_index = 0
    bundle.save(update_fields=["status", "current_phase_index", "updated_at"])
    logger.info(
        "assembly.bundle_abandoned",
        extra={"event": "assembly.bundle_abandoned", "bundle_id": bundle.id, "released": released},
    )
    _queue_inventory_sync(product_ids)
    return bundle


@transaction.atomic
def delete_bundle(*, bundle_id: int) -> None:
    bundle = _lock_bundle(bundle_id)
    if bundle.status != Bundle.STATUS_PENDING:
        raise AssemblyError("Only pending bundles can be deleted")
    bundle.delete()


# EOF
