"""Read-side helpers for deliveries."""

from common.exceptions import NotFound
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from .models import Delivery, DeliveryHistory, DeliveryResolution


def list_deliveries(*, status: str | None = None, search: str | None = None) -> QuerySet:
    qs = Delivery.objects.select_related("order", "order__customer")
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(
            Q(order__order_number__icontains=search)
            | Q(tracking_number__icontains=search)
            | Q(shipper_name__icontains=search)
            | Q(order__customer__name__icontains=search)
            | Q(order__customer__phone__icontains=search)
        )
    return qs.order_by("-created_at", "-id")


def delivery_history(delivery_id: int) -> list[dict]:
    if not Delivery.objects.filter(id=delivery_id).exists():
        raise NotFound("Delivery not found")
    return list(
        DeliveryHistory.objects.filter(delivery_id=delivery_id)
        .order_by("created_at", "id")
        .values("id", "from_status", "to_status", "notes", "changed_by_id", "created_at")
    )


def delivery_stats(now=None) -> dict:
    """Totals by status, today's hand-offs, order value and resolution counters."""
    now = now or timezone.localtime()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    counts = Delivery.objects.aggregate(
        total=Count("id"),
        today=Count("id", filter=Q(created_at__gte=start_of_day)),
        waiting=Count("id", filter=Q(status=Delivery.STATUS_WAITING)),
        delivered=Count("id", filter=Q(status=Delivery.STATUS_DELIVERED)),
        failed=Count("id", filter=Q(status=Delivery.STATUS_FAILED)),
        cancelled=Count("id", filter=Q(status=Delivery.STATUS_CANCELLED)),
        delivered_value=Sum("order__total_amount", filter=Q(status=Delivery.STATUS_DELIVERED)),
        failed_value=Sum("order__total_amount", filter=Q(status=Delivery.STATUS_FAILED)),
    )
    open_ = ~Q(resolution_status=DeliveryResolution.STATUS_COMPLETED)
    resolutions = DeliveryResolution.objects.aggregate(
        pending=Count("id", filter=Q(resolution_status=DeliveryResolution.STATUS_PENDING)),
        completed=Count("id", filter=Q(resolution_status=DeliveryResolution.STATUS_COMPLETED)),
        re_importing=Count("id", filter=open_ & Q(resolution_type=DeliveryResolution.TYPE_RE_IMPORT)),
        returning=Count("id", filter=open_ & Q(resolution_type=DeliveryResolution.TYPE_RETURN_TO_SUPPLIER)),
        retrying=Count("id", filter=open_ & Q(resolution_type=DeliveryResolution.TYPE_RETRY_DELIVERY)),
    )
    return {
        "total_deliveries": counts["total"],
        "today_deliveries": counts["today"],
        "waiting_for_delivery_count": counts["waiting"],
        "delivered_count": counts["delivered"],
        "failed_count": counts["failed"],
        "cancelled_count": counts["cancelled"],
        "total_delivered_value": int(counts["delivered_value"] or 0),
        "total_failed_value": int(counts["failed_value"] or 0),
        "pending_resolution_count": resolutions["pending"],
        "resolutions": {
            "re_importing_count": resolutions["re_importing"],
            "returning_count": resolutions["returning"],
            "retrying_count": resolutions["retrying"],
            "completed_count": resolutions["completed"],
        },
    }
