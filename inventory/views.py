"""Inventory endpoints: shipments, inbound scanning, storages, availability."""

from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import selectors, services
from .serializers import (
    BulkReceiveSerializer,
    ScanItemSerializer,
    ShipmentCreateSerializer,
    ShipmentListSerializer,
    ShipmentStatusSerializer,
    StorageSerializer,
)


class WarehouseView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]


class ShipmentListCreateView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ShipmentListSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return selectors.list_shipments(
            status=self.request.query_params.get("status"),
            search=self.request.query_params.get("search"),
        )

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List shipments",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Receipt number or supplier"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Create shipment",
        description=(
            "Creates a shipment and one pending QR-coded unit per item. Packable products may be sent as "
            "`pack_size` + `total_units`; the matching pack product is created on first use."
        ),
        request=ShipmentCreateSerializer,
        examples=[
            OpenApiExample(
                "Created",
                value={
                    "success": True,
                    "message": "Shipment created",
                    "data": {
                        "shipment_id": 12,
                        "receipt_number": "RN-001",
                        "items": [{"id": 1, "product_id": 3, "qr_code": "ABCD1234", "brand": "Joola", "model": "X"}],
                    },
                },
                response_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = ShipmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "inventory.create_shipment",
            lambda: services.create_shipment(user=request.user, **serializer.validated_data),
            request=request,
            context={"receipt_number": serializer.validated_data["receipt_number"]},
            success_message="Shipment created",
            success_status=201,
        )


class ShipmentDetailView(WarehouseView):
    @extend_schema(tags=["Inventory Endpoints"], summary="Shipment detail grouped by brand and model")
    def get(self, request, shipment_id: int):
        return envelope_response(
            "inventory.shipment_detail", lambda: selectors.get_shipment_detail(shipment_id), request=request
        )

    @extend_schema(tags=["Inventory Endpoints"], summary="Delete a pending shipment")
    def delete(self, request, shipment_id: int):
        return envelope_response(
            "inventory.delete_shipment",
            lambda: services.delete_shipment(shipment_id=shipment_id),
            request=request,
            context={"shipment_id": shipment_id},
            success_message="Shipment deleted",
        )


class ShipmentStatusView(WarehouseView):
    throttle_scope = "warehouse_write"

    @extend_schema(tags=["Inventory Endpoints"], summary="Advance shipment status", request=ShipmentStatusSerializer)
    def patch(self, request, shipment_id: int):
        serializer = ShipmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _update():
            shipment = services.update_shipment_status(
                shipment_id=shipment_id, status=serializer.validated_data["status"]
            )
            return {"id": shipment.id, "status": shipment.status}

        return envelope_response(
            "inventory.update_shipment_status",
            _update,
            request=request,
            context={"shipment_id": shipment_id},
            success_message="Shipment updated",
        )


class ShipmentProgressView(WarehouseView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Scan progress",
        examples=[OpenApiExample("Progress", value={"total": 10, "scanned": 4, "pending": 6}, response_only=True)],
    )
    def get(self, request, shipment_id: int):
        return Response(selectors.get_scan_progress(shipment_id))


class ShipmentBulkReceiveView(WarehouseView):
    throttle_scope = "warehouse_write"

    @extend_schema(tags=["Inventory Endpoints"], summary="Receive all pending units", request=BulkReceiveSerializer)
    def post(self, request, shipment_id: int):
        serializer = BulkReceiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "inventory.bulk_receive",
            lambda: services.bulk_receive(
                shipment_id=shipment_id, storage_id=serializer.validated_data["storage_id"], user=request.user
            ),
            request=request,
            context={"shipment_id": shipment_id},
            success_message="Shipment received",
        )


class ShipmentMetricsView(WarehouseView):
    @extend_schema(tags=["Inventory Endpoints"], summary="Shipment and unit counts by status")
    def get(self, request):
        return Response(selectors.shipment_metrics())


class ScanItemView(WarehouseView):
    throttle_scope = "scanning"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inbound scan",
        description="Receives one pending unit into a storage. Accepts a bare code or a full label URL.",
        request=ScanItemSerializer,
    )
    def post(self, request):
        serializer = ScanItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "inventory.scan_item",
            lambda: services.scan_item(user=request.user, **serializer.validated_data),
            request=request,
            context={"qr_code": serializer.validated_data["qr_code"]},
            success_message="Item received",
        )


class StorageListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StorageSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return selectors.list_storages()

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = services.create_storage(
            name=data["name"], capacity=data.get("capacity", 0), location=data.get("location", "")
        )


class AvailabilityView(WarehouseView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Available quantity per product",
        parameters=[OpenApiParameter("product_ids", OpenApiTypes.STR, location="query", description="Comma list")],
    )
    def get(self, request):
        raw = request.query_params.get("product_ids", "")
        ids = [int(p) for p in raw.split(",") if p.strip().isdigit()]
        data = selectors.availability_by_product(ids)
        return Response({str(pid): qty for pid, qty in data.items()})
