"""Delivery endpoints: shipping hand-off, outcomes, resolutions and stats."""

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
from .models import Delivery
from .serializers import (
    CreateResolutionSerializer,
    DeliveryDetailSerializer,
    DeliveryResolutionSerializer,
    DeliverySerializer,
    DeliveryStatusSerializer,
    ProcessResolutionSerializer,
    ShipOrderSerializer,
)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class DeliveryWriteView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse_write"
    throttle_classes = [SettingsScopedRateThrottle]


class DeliveryListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DeliverySerializer
    pagination_class = DefaultPagination
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return selectors.list_deliveries(
            status=self.request.query_params.get("status"),
            search=self.request.query_params.get("search"),
        )

    @extend_schema(
        tags=["Deliveries"],
        summary="List deliveries",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Order, tracking or customer"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class DeliveryDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DeliveryDetailSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_object(self):
        try:
            return (
                Delivery.objects.select_related("order", "order__customer")
                .prefetch_related("resolutions")
                .get(id=int(self.kwargs["delivery_id"]))
            )
        except (Delivery.DoesNotExist, ValueError):
            raise Http404("Not found.")

    @extend_schema(tags=["Deliveries"], summary="Delivery detail")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class DeliveryStatsView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Deliveries"], summary="Delivery statistics")
    def get(self, request):
        return envelope_response("deliveries.stats", selectors.delivery_stats)


class DeliveryHistoryView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Deliveries"], summary="Delivery history")
    def get(self, request, delivery_id: int):
        return envelope_response("deliveries.history", lambda: selectors.delivery_history(delivery_id))


class ShipOrderView(DeliveryWriteView):
    @extend_schema(
        tags=["Deliveries"],
        summary="Hand an order to a shipper",
        description="Moves the order's units to `shipped`. Shopify orders get a fulfillment after commit.",
        request=ShipOrderSerializer,
        examples=[
            OpenApiExample(
                "Ship",
                value={"shipper_name": "GHN", "shipper_phone": "0900000000", "tracking_number": "GHN123"},
                request_only=True,
            )
        ],
    )
    def post(self, request, order_id: int):
        serializer = ShipOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _ship():
            delivery = services.mark_order_shipped(order_id=order_id, user=request.user, **serializer.validated_data)
            return DeliverySerializer(delivery).data

        return envelope_response(
            "deliveries.ship",
            _ship,
            request=request,
            context={"order_id": order_id},
            success_message="Order handed to shipper",
            success_status=201,
        )


class DeliveryStatusView(DeliveryWriteView):
    @extend_schema(tags=["Deliveries"], summary="Record delivery outcome", request=DeliveryStatusSerializer)
    def post(self, request, delivery_id: int):
        serializer = DeliveryStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _update():
            delivery = services.update_delivery_status(
                delivery_id=delivery_id, user=request.user, **serializer.validated_data
            )
            return DeliverySerializer(delivery).data

        status = serializer.validated_data["status"]
        return envelope_response(
            "deliveries.update_status",
            _update,
            request=request,
            context={"delivery_id": delivery_id},
            success_message="Delivery confirmed" if status == Delivery.STATUS_DELIVERED else "Delivery updated",
        )


class CreateResolutionView(DeliveryWriteView):
    @extend_schema(tags=["Deliveries"], summary="Open a failure resolution", request=CreateResolutionSerializer)
    def post(self, request, delivery_id: int):
        serializer = CreateResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _create():
            resolution = services.create_failure_resolution(
                delivery_id=delivery_id, user=request.user, **serializer.validated_data
            )
            return DeliveryResolutionSerializer(resolution).data

        return envelope_response(
            "deliveries.create_resolution",
            _create,
            request=request,
            context={"delivery_id": delivery_id},
            success_message="Resolution created",
            success_status=201,
        )


class ProcessResolutionView(DeliveryWriteView):
    @extend_schema(tags=["Deliveries"], summary="Advance a resolution", request=ProcessResolutionSerializer)
    def post(self, request, resolution_id: int):
        serializer = ProcessResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _process():
            resolution = services.process_resolution(
                resolution_id=resolution_id, status=serializer.validated_data["status"], user=request.user
            )
            return DeliveryResolutionSerializer(resolution).data

        return envelope_response(
            "deliveries.process_resolution",
            _process,
            request=request,
            context={"resolution_id": resolution_id},
            success_message="Resolution updated",
        )
