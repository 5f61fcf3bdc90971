"""Customer portal endpoints and the warehouse-to-portal sync webhook.

Portal responses use ``{success, ...}`` on success and ``{success: false, error}``
otherwise. The signed-in customer is read from the ``portal_customer_id``
session key, which the storefront login sets.
"""

import hmac
import logging

from common.results import run_action
from common.throttling import SettingsScopedRateThrottle
from django.conf import settings
from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import ClaimSerializer, TransferSerializer, WarehouseSyncEventSerializer

logger = logging.getLogger(__name__)

SESSION_CUSTOMER_KEY = "portal_customer_id"
SECRET_HEADER = "HTTP_X_WEBHOOK_SECRET"


def portal_response(operation: str, func, shape, *, context: dict | None = None) -> Response:
    """Run a portal service call and render it in the portal's response format."""
    result, status_code = run_action(operation, func, context=context)
    if not result.success:
        return Response({"success": False, "error": result.message}, status=status_code)
    return Response({"success": True, **shape(result.data)}, status=status_code)


def _unauthorized() -> Response:
    return Response({"success": False, "error": "Unauthorized"}, status=401)


class PortalAPIView(APIView):
    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_scope = "portal"
    throttle_classes = [SettingsScopedRateThrottle]

    def customer_id(self, request) -> str:
        return request.session.get(SESSION_CUSTOMER_KEY) or ""


class WarehouseSyncWebhookView(APIView):
    """Apply a warehouse event (sale, delivery, return, replacement) to unit warranty state."""

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_scope = "webhooks"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(
        tags=["Warranty"],
        summary="Warehouse sync webhook",
        request=WarehouseSyncEventSerializer,
        responses={
            200: OpenApiResponse(description="Event applied"),
            400: OpenApiResponse(description="Invalid payload"),
            401: OpenApiResponse(description="Missing or wrong X-Webhook-Secret"),
            404: OpenApiResponse(description="Unit not found"),
        },
        examples=[
            OpenApiExample(
                "Product sold",
                value={
                    "event": "product.sold",
                    "data": {
                        "qrCode": "ABCD1234",
                        "shopifyOrderId": "820982911946154508",
                        "customerId": "email:buyer@example.com",
                        "productDetails": {"name": "Pro Paddle", "brand": "Joola", "model": "Hyperion"},
                        "purchaseDate": "2025-06-01T10:00:00Z",
                        "warrantyMonths": 12,
                    },
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        secret = settings.WAREHOUSE_WEBHOOK_SECRET
        if not secret:
            logger.error("warranty.webhook_unconfigured", extra={"event": "warranty.webhook_unconfigured"})
            return Response({"success": False, "error": "Webhook secret not configured"}, status=500)
        provided = request.META.get(SECRET_HEADER, "")
        if not hmac.compare_digest(provided.encode(), secret.encode()):
            logger.warning("warranty.webhook_unauthorized", extra={"event": "warranty.webhook_unauthorized"})
            return _unauthorized()

        serializer = WarehouseSyncEventSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "error": "Invalid payload", "details": serializer.errors},
                status=400,
            )
        event = serializer.validated_data["event"]
        data = serializer.validated_data["data"]

        def shape(result):
            if event == "delivery.completed":
                return {"processedCount": result["processed_count"]}
            return {"productUnitId": result["product_unit_id"]}

        return portal_response(
            "warranty.sync_event",
            lambda: services.process_warehouse_sync_event(event, data),
            shape,
            context={"sync_event": event},
        )


class ProductVerifyView(PortalAPIView):
    @extend_schema(
        tags=["Warranty"],
        summary="Verify a product by its QR code",
        responses={
            200: OpenApiResponse(description="Product, unit and warranty details; ownership for the owner"),
            400: OpenApiResponse(description="Invalid QR code format"),
            404: OpenApiResponse(description="Product not found"),
        },
    )
    def get(self, request, qr_code: str):
        customer_id = self.customer_id(request) or None
        return portal_response(
            "warranty.verify",
            lambda: services.verify_product(qr_code, customer_id=customer_id),
            lambda data: data,
        )


class ClaimView(PortalAPIView):
    @extend_schema(
        tags=["Warranty"],
        summary="Submit a warranty claim",
        request=ClaimSerializer,
        responses={
            200: OpenApiResponse(description="Claim submitted"),
            400: OpenApiResponse(description="Invalid payload or warranty not claimable"),
            401: OpenApiResponse(description="Not signed in"),
            403: OpenApiResponse(description="Not the owner"),
        },
    )
    def post(self, request):
        customer_id = self.customer_id(request)
        if not customer_id:
            return _unauthorized()
        serializer = ClaimSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "error": "Invalid payload", "details": serializer.errors},
                status=400,
            )
        payload = serializer.validated_data
        return portal_response(
            "warranty.claim",
            lambda: services.submit_claim(customer_id=customer_id, **payload),
            lambda claim: {"claimId": claim.id, "message": "Warranty claim submitted successfully"},
        )


class TransferView(PortalAPIView):
    @extend_schema(
        tags=["Warranty"],
        summary="Transfer ownership of a product",
        request=TransferSerializer,
        responses={
            200: OpenApiResponse(description="Ownership transferred"),
            400: OpenApiResponse(description="Invalid payload"),
            401: OpenApiResponse(description="Not signed in"),
            403: OpenApiResponse(description="Not the owner"),
        },
    )
    def post(self, request):
        customer_id = self.customer_id(request)
        if not customer_id:
            return _unauthorized()
        serializer = TransferSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "error": "Invalid payload", "details": serializer.errors},
                status=400,
            )
        payload = serializer.validated_data
        return portal_response(
            "warranty.transfer",
            lambda: services.transfer_ownership(customer_id=customer_id, **payload),
            lambda transfer: {"transferId": transfer.id, "message": "Ownership transferred successfully"},
        )
