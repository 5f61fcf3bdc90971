"""Read-side query helpers for the catalog app."""

from django.db.models import IntegerField, OuterRef, Q, QuerySet, Subquery, Sum, Value
from django.db.models.functions import Coalesce

from .models import Product


def list_products(*, search: str | None = None, product_type: str | None = None, organization=None) -> QuerySet:
    """Active products annotated with their available-unit count."""
    from inventory.selectors import available_units

    received = (
        available_units()
        .filter(product_id=OuterRef("pk"))
        .values("product_id")
        .annotate(total=Sum("quantity"))
        .values("total")
    )
    qs = Product.objects.filter(is_active=True).annotate(
        available_quantity=Coalesce(Subquery(received, output_field=IntegerField()), Value(0))
    )
    if organization is not None:
        qs = qs.filter(organization=organization)
    if product_type:
        qs = qs.filter(product_type=product_type)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(brand__icontains=search) | Q(model__icontains=search))
    return qs.select_related("base_product")


def pack_products_for(base_product_id: int) -> QuerySet:
    return Product.objects.filter(base_product_id=base_product_id, is_pack_product=True).order_by("pack_size")
