"""Customer lookup endpoints."""

from common.throttling import SettingsScopedRateThrottle
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from .selectors import search_customers
from .serializers import CustomerSerializer


class CustomerListView(generics.ListAPIView):
    """Search customers by name, phone or email."""

    permission_classes = [IsAuthenticated]
    serializer_class = CustomerSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return search_customers(query=self.request.query_params.get("q"))

    @extend_schema(
        tags=["Customer Endpoints"],
        summary="Search customers",
        parameters=[OpenApiParameter("q", OpenApiTypes.STR, location="query")],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class CustomerDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CustomerSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]
    lookup_url_kwarg = "customer_id"

    def get_queryset(self):
        return search_customers()

    @extend_schema(tags=["Customer Endpoints"], summary="Get customer")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
