"""Order endpoints: in-store sale, order lists and Shopify fulfillment scanning."""

from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from django.http import Http404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from . import selectors, services
from .models import Order
from .serializers import (
    FulfillScanSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    OutboundOrderSerializer,
    PendingFulfillmentSerializer,
    ValidateItemSerializer,
)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class OrderListView(generics.ListAPIView):
    """List orders with basic filters.

    Filters:
    - `source`: in-store, shopify or manual
    - `delivery_status`: one of the order delivery statuses
    - `search`: order number, Shopify number, customer name or phone
    """

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        params = self.request.query_params
        return selectors.list_orders(
            source=params.get("source"),
            delivery_status=params.get("delivery_status"),
            search=params.get("search"),
        )

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        parameters=[
            OpenApiParameter("source", OpenApiTypes.STR, location="query"),
            OpenApiParameter("delivery_status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("page_size", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderDetailSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_object(self):
        try:
            return Order.objects.select_related("customer").prefetch_related("items__product").get(
                id=int(self.kwargs["order_id"])
            )
        except (Order.DoesNotExist, ValueError):
            raise Http404("Not found.")

    @extend_schema(tags=["Orders"], summary="Get order detail")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ValidateItemView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "scanning"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(
        tags=["Orders"],
        summary="Check a unit can be sold",
        request=ValidateItemSerializer,
        examples=[OpenApiExample("Scan", value={"qr_code": "ABCD1234"}, request_only=True)],
    )
    def post(self, request):
        serializer = ValidateItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "orders.validate_item",
            lambda: services.validate_item_for_sale(serializer.validated_data["qr_code"]),
            request=request,
            success_message="Item available",
        )


class OutboundOrderView(APIView):
    """Sell the scanned cart to a customer in one transaction."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse_write"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(
        tags=["Orders"],
        summary="Process in-store sale",
        description="Locks every unit, creates the order and moves the units to `sold`. Clears the scanning session.",
        request=OutboundOrderSerializer,
        examples=[
            OpenApiExample(
                "Cash sale",
                value={
                    "cart_items": [{"shipment_item_id": 12}, {"shipment_item_id": 13}],
                    "customer_info": {"name": "Nguyen Van A", "phone": "0901234567"},
                    "payment_method": "cash",
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = OutboundOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "orders.process_outbound",
            lambda: services.process_outbound_order(user=request.user, **serializer.validated_data),
            request=request,
            success_message="Order created",
            success_status=201,
        )


class PendingFulfillmentView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PendingFulfillmentSerializer
    pagination_class = DefaultPagination
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return selectors.pending_fulfillment_orders()

    @extend_schema(tags=["Orders"], summary="Shopify orders awaiting fulfillment")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class FulfillmentDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Orders"], summary="Products an order still needs")
    def get(self, request, order_id: int):
        return envelope_response("orders.fulfillment_details", lambda: selectors.order_fulfillment_details(order_id))


class FulfillScanView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "scanning"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Orders"], summary="Scan a unit into a Shopify order", request=FulfillScanSerializer)
    def post(self, request, order_id: int):
        serializer = FulfillScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "orders.fulfill_scan",
            lambda: services.scan_and_fulfill_item(
                order_id=order_id, qr_code=serializer.validated_data["qr_code"], user=request.user
            ),
            request=request,
            context={"order_id": order_id},
            success_message="Item fulfilled",
        )
