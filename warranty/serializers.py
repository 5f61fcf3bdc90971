from common.codes import extract_product_code, is_valid_short_code
from rest_framework import serializers

from .models import WarrantyClaim
from .services import SYNC_EVENTS


class PortalCodeField(serializers.CharField):
    """Accepts a bare code, a dashed code or a ``/p/<code>`` link."""

    default_error_messages = {"invalid_code": "Invalid QR code format"}

    def to_internal_value(self, data):
        code = extract_product_code(super().to_internal_value(data))
        if not is_valid_short_code(code):
            self.fail("invalid_code")
        return code


class ProductDetailsSerializer(serializers.Serializer):
    name = serializers.CharField()
    brand = serializers.CharField(required=False, allow_blank=True)
    model = serializers.CharField(required=False, allow_blank=True)


class ProductSoldSerializer(serializers.Serializer):
    qrCode = PortalCodeField(source="qr_code")
    shopifyOrderId = serializers.CharField(source="shopify_order_id", required=False, allow_null=True, allow_blank=True)
    customerId = serializers.CharField(source="customer_id")
    productDetails = ProductDetailsSerializer(source="product_details", required=False)
    purchaseDate = serializers.DateTimeField(source="purchase_date")
    warrantyMonths = serializers.IntegerField(source="warranty_months", min_value=0, default=12)


class UnitEventSerializer(serializers.Serializer):
    qrCode = PortalCodeField(source="qr_code")


class DeliveredItemSerializer(serializers.Serializer):
    qrCode = PortalCodeField(source="qr_code")
    warrantyMonths = serializers.IntegerField(source="warranty_months", min_value=0, default=12)


class DeliveryCompletedSerializer(serializers.Serializer):
    deliveredAt = serializers.DateTimeField(source="delivered_at")
    customerId = serializers.CharField(source="customer_id")
    items = DeliveredItemSerializer(many=True, allow_empty=False)


EVENT_SERIALIZERS = {
    "product.sold": ProductSoldSerializer,
    "product.returned": UnitEventSerializer,
    "product.replaced": UnitEventSerializer,
    "delivery.completed": DeliveryCompletedSerializer,
}


class WarehouseSyncEventSerializer(serializers.Serializer):
    """Envelope ``{event, data}``; ``data`` is validated by the event's own serializer."""

    event = serializers.ChoiceField(choices=SYNC_EVENTS)
    data = serializers.DictField()

    def validate(self, attrs):
        inner = EVENT_SERIALIZERS[attrs["event"]](data=attrs["data"])
        if not inner.is_valid():
            raise serializers.ValidationError({"data": inner.errors})
        attrs["data"] = dict(inner.validated_data)
        return attrs


class ClaimSerializer(serializers.Serializer):
    qrCode = PortalCodeField(source="qr_code")
    claimType = serializers.ChoiceField(source="claim_type", choices=WarrantyClaim.TYPE_CHOICES)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=2000)
    images = serializers.ListField(child=serializers.URLField(), required=False, default=list)


class TransferSerializer(serializers.Serializer):
    qrCode = PortalCodeField(source="qr_code")
    newOwnerEmail = serializers.EmailField(source="new_owner_email")
