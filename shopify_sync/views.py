"""Shopify endpoints: the signed order webhook and staff sync controls."""

import json
import logging

from common.exceptions import WarehouseError
from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from django_filters import rest_framework as filters
from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from orders.services import process_shopify_order
from rest_framework import filters as drf_filters
from rest_framework import generics
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .client import get_org_shopify_config
from .models import ShopifyProductMapping
from .queue import queue_inventory_sync
from .serializers import OrderPaidEventSerializer, ShopifyProductMappingSerializer, SyncProductsSerializer
from .signing import verify_request

logger = logging.getLogger("warehouse.shopify")


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class ShopifyOrderWebhookView(APIView):
    """Receive ``order.paid`` events for one organization's store.

    The body is verified against the organization's webhook secret before it
    is parsed. Replayed events answer with the order created the first time.
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_scope = "webhooks"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(
        tags=["Shopify"],
        summary="Shopify order.paid webhook",
        request=OrderPaidEventSerializer,
        responses={
            200: OpenApiResponse(description="Order recorded"),
            400: OpenApiResponse(description="VALIDATION_ERROR, INVALID_JSON, MISSING_SKU or INSUFFICIENT_INVENTORY"),
            401: OpenApiResponse(description="Bad or expired signature"),
            404: OpenApiResponse(description="Organization has no Shopify store"),
        },
        examples=[
            OpenApiExample(
                "Paid order",
                value={
                    "event": "order.paid",
                    "provider": "sepay",
                    "shopifyOrderId": "820982911946154508",
                    "shopifyOrderNumber": "#1001",
                    "paymentCode": "SP1001",
                    "amount": 400000,
                    "currency": "VND",
                    "paidAt": "2025-06-01T10:00:00Z",
                    "referenceCode": "FT2515200001",
                    "gateway": "SePay",
                    "lineItems": [
                        {"sku": "12", "variantId": "4455", "quantity": 2, "price": 200000, "title": "Pro Paddle"}
                    ],
                    "customer": {"email": "buyer@example.com", "name": "Le Van C", "phone": None},
                    "shippingAddress": {"address1": "12 Nguyen Hue", "city": "Ho Chi Minh", "phone": "0933333333"},
                },
                request_only=True,
            )
        ],
    )
    def post(self, request, organization_id: int):
        config = get_org_shopify_config(organization_id)
        if config is None:
            logger.warning(
                "shopify.webhook_rejected",
                extra={
                    "event": "shopify.webhook_rejected",
                    "organization_id": organization_id,
                    "reason": "unconfigured",
                },
            )
            return Response({"error": "Organization not found or Shopify not configured"}, status=404)
        if not config.webhook_secret:
            logger.error(
                "shopify.webhook_rejected",
                extra={
                    "event": "shopify.webhook_rejected",
                    "organization_id": organization_id,
                    "reason": "no_secret",
                },
            )
            return Response({"error": "Webhook secret not configured for this organization"}, status=500)

        valid, body, error = verify_request(request, config.webhook_secret)
        if not valid:
            logger.warning(
                "shopify.webhook_unauthorized",
                extra={"event": "shopify.webhook_unauthorized", "organization_id": organization_id, "reason": error},
            )
            return Response({"error": "Unauthorized", "details": error}, status=401)

        try:
            raw = json.loads(body)
        except ValueError:
            return Response({"error": "Invalid JSON payload", "code": "INVALID_JSON"}, status=400)

        serializer = OrderPaidEventSerializer(data=raw)
        if not serializer.is_valid():
            return Response(
                {"error": "Invalid webhook payload", "code": "VALIDATION_ERROR", "details": serializer.errors},
                status=400,
            )

        try:
            result = process_shopify_order(dict(serializer.validated_data), config.organization_id)
        except WarehouseError as exc:
            code = getattr(exc, "code", "PROCESSING_ERROR")
            logger.info(
                "shopify.webhook_order_rejected",
                extra={"event": "shopify.webhook_order_rejected", "organization_id": organization_id, "code": code},
            )
            return Response({"error": exc.message, "code": code}, status=exc.status_code)
        except Exception:
            logger.exception(
                "shopify.webhook_failed",
                extra={"event": "shopify.webhook_failed", "organization_id": organization_id},
            )
            return Response({"error": "Internal server error", "code": "INTERNAL_ERROR"}, status=500)

        return Response(
            {
                "success": True,
                "warehouseOrderId": result["order_id"],
                "warehouseOrderNumber": result["order_number"],
                "shopifyOrderId": result["shopify_order_id"],
                "shopifyOrderNumber": result["shopify_order_number"],
                "itemsFulfilled": result["items_fulfilled"],
            },
            status=200,
        )


class ProductMappingFilterSet(filters.FilterSet):
    status = filters.CharFilter(field_name="last_sync_status")
    organization = filters.NumberFilter(field_name="product__organization_id")

    class Meta:
        model = ShopifyProductMapping
        fields = ["status", "organization"]


class ProductMappingListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ShopifyProductMappingSerializer
    pagination_class = DefaultPagination
    filterset_class = ProductMappingFilterSet
    filter_backends = [filters.DjangoFilterBackend, drf_filters.SearchFilter]
    search_fields = ["product__name", "product__brand", "product__model"]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_queryset(self):
        return ShopifyProductMapping.objects.select_related("product").order_by("product_id")

    @extend_schema(tags=["Shopify"], summary="List Shopify product mappings")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class InventorySyncView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse_write"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Shopify"], summary="Queue a Shopify inventory sync", request=SyncProductsSerializer)
    def post(self, request):
        serializer = SyncProductsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_ids = serializer.validated_data["product_ids"]

        def _queue():
            queue_inventory_sync(product_ids)
            return {"queued": sorted(set(product_ids))}

        return envelope_response(
            "shopify.queue_inventory_sync",
            _queue,
            request=request,
            success_message="Inventory sync queued",
            success_status=202,
        )
