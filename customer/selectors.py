"""Read-only query helpers for customers."""

from django.db.models import Count, Q, QuerySet

from .models import Customer


def search_customers(*, query: str | None = None) -> QuerySet:
    qs = Customer.objects.annotate(order_count=Count("orders"))
    if query:
        qs = qs.filter(Q(name__icontains=query) | Q(phone__icontains=query) | Q(email__icontains=query))
    return qs.order_by("name", "id")
