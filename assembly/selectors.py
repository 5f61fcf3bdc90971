"""Read-side helpers for bundles and live assembly sessions."""

from common.exceptions import NotFound
from django.db.models import Q, QuerySet, Sum

from .models import Bundle, BundleItem


def phases_for(bundle: Bundle) -> list[BundleItem]:
    return list(bundle.items.select_related("product").order_by("phase_order"))


def session_payload(bundle: Bundle) -> dict:
    """Polling state for every device viewing the session.

    ``version`` changes whenever the bundle or one of its phases is written,
    so viewers can skip re-rendering unchanged state.
    """
    phases = phases_for(bundle)
    current = phases[bundle.current_phase_index] if bundle.current_phase_index < len(phases) else None
    stamps = [bundle.updated_at, *(p.updated_at for p in phases)]
    version = max(s for s in stamps if s is not None)
    return {
        "bundle": {
            "id": bundle.id,
            "name": bundle.name,
            "qr_code": bundle.qr_code,
            "status": bundle.status,
            "current_phase_index": bundle.current_phase_index,
            "assembly_started_at": bundle.assembly_started_at,
        },
        "phases": [
            {
                "id": phase.id,
                "phase_order": phase.phase_order,
                "product_id": phase.product_id,
                "product_name": phase.product.name,
                "expected_count": phase.expected_count,
                "scanned_count": phase.scanned_count,
                "is_complete": phase.is_complete,
            }
            for phase in phases
        ],
        "current_phase": (
            {"id": current.id, "product_id": current.product_id, "product_name": current.product.name}
            if current
            else None
        ),
        "is_all_complete": bool(phases) and all(p.is_complete for p in phases),
        "version": version.isoformat(),
    }


def get_assembly_session(bundle_id: int) -> dict:
    try:
        bundle = Bundle.objects.get(id=bundle_id)
    except Bundle.DoesNotExist:
        raise NotFound("Bundle not found")
    return session_payload(bundle)


def list_bundles(*, status: str | None = None, search: str | None = None) -> QuerySet:
    qs = Bundle.objects.annotate(
        expected_total=Sum("items__expected_count"),
        scanned_total=Sum("items__scanned_count"),
    )
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(qr_code__icontains=search.upper()))
    return qs.order_by("-created_at", "id")


def get_bundle_detail(bundle_id: int) -> dict:
    try:
        bundle = Bundle.objects.select_related("created_by", "assembled_by").get(id=bundle_id)
    except Bundle.DoesNotExist:
        raise NotFound("Bundle not found")
    payload = session_payload(bundle)
    payload["scans"] = list(
        bundle.scans.order_by("created_at", "id").values("id", "bundle_item_id", "unit__qr_code", "created_at")
    )
    payload["output_items"] = list(bundle.output_items.order_by("id").values("id", "qr_code", "product_id", "status"))
    payload["bundle"]["assembly_completed_at"] = bundle.assembly_completed_at
    return payload
