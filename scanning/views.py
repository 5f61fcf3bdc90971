"""Live scanning session endpoints shared by a user's devices."""

from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from .serializers import (
    CartRemoveSerializer,
    CartUpdateSerializer,
    CustomerUpdateSerializer,
    PingSerializer,
    SyncQuerySerializer,
)
from .store import SessionStore, session_payload


class ScanningView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "scanning"
    throttle_classes = [SettingsScopedRateThrottle]
    store_class = SessionStore

    def get_store(self) -> SessionStore:
        return self.store_class()


class SessionView(ScanningView):
    @extend_schema(tags=["Scanning"], summary="Get or create the scanning session")
    def get(self, request):
        return envelope_response(
            "scanning.get_session", lambda: session_payload(self.get_store().get_or_create(request.user))
        )

    @extend_schema(tags=["Scanning"], summary="Clear cart and customer")
    def delete(self, request):
        return envelope_response(
            "scanning.clear", lambda: self.get_store().clear(request.user), request=request, success_message="Cleared"
        )


class CartView(ScanningView):
    @extend_schema(
        tags=["Scanning"],
        summary="Merge items into the cart",
        description="Items are merged by `shipment_item_id`; other devices' items are kept.",
        request=CartUpdateSerializer,
    )
    def post(self, request):
        serializer = CartUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "scanning.update_cart",
            lambda: session_payload(self.get_store().update_cart(request.user, serializer.validated_data["items"])),
            request=request,
        )


class CartRemoveView(ScanningView):
    @extend_schema(tags=["Scanning"], summary="Remove items from the cart", request=CartRemoveSerializer)
    def post(self, request):
        serializer = CartRemoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data["shipment_item_ids"]
        return envelope_response(
            "scanning.remove_cart_items",
            lambda: session_payload(self.get_store().remove_cart_items(request.user, ids)),
            request=request,
        )


class CustomerView(ScanningView):
    @extend_schema(tags=["Scanning"], summary="Update the customer form", request=CustomerUpdateSerializer)
    def post(self, request):
        serializer = CustomerUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return envelope_response(
            "scanning.update_customer",
            lambda: session_payload(
                self.get_store().update_customer(request.user, data["customer_info"], data.get("written_at"))
            ),
            request=request,
        )


class SyncView(ScanningView):
    @extend_schema(
        tags=["Scanning"],
        summary="Poll for changes",
        description="`data` is null when nothing changed since `since`.",
        parameters=[OpenApiParameter("since", OpenApiTypes.DATETIME, location="query")],
    )
    def get(self, request):
        query = SyncQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        since = query.validated_data.get("since")

        def _sync():
            session = self.get_store().sync(request.user, since)
            return session_payload(session) if session is not None else None

        return envelope_response("scanning.sync", _sync)


class PingView(ScanningView):
    @extend_schema(tags=["Scanning"], summary="Device heartbeat", request=PingSerializer)
    def post(self, request):
        serializer = PingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "scanning.ping",
            lambda: {"device_count": self.get_store().ping(request.user, serializer.validated_data["device_id"])},
        )
