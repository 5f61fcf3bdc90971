from common.choices import CustomerType
from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "unit", "qr_code", "price", "fulfillment_status", "scanned_at"]


class OrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    customer_phone = serializers.CharField(source="customer.phone", read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "source",
            "shopify_order_id",
            "shopify_order_number",
            "customer",
            "customer_name",
            "customer_phone",
            "customer_type",
            "total_amount",
            "payment_method",
            "payment_status",
            "delivery_status",
            "fulfillment_status",
            "item_count",
            "notes",
            "created_at",
        ]


class OrderDetailSerializer(OrderSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["items"]


class PendingFulfillmentSerializer(OrderSerializer):
    fulfilled_count = serializers.IntegerField(read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["fulfilled_count"]


class ValidateItemSerializer(serializers.Serializer):
    qr_code = serializers.CharField(max_length=255)


class CartItemSerializer(serializers.Serializer):
    shipment_item_id = serializers.IntegerField(min_value=1)
    qr_code = serializers.CharField(required=False, allow_blank=True)


class CustomerInfoInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("phone") and not attrs.get("email"):
            raise serializers.ValidationError("phone or email is required")
        return attrs


class OutboundOrderSerializer(serializers.Serializer):
    cart_items = CartItemSerializer(many=True, allow_empty=False)
    customer_info = CustomerInfoInputSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default=Order.PAYMENT_CASH)
    customer_type = serializers.ChoiceField(choices=CustomerType.choices, default=CustomerType.B2C)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class FulfillScanSerializer(serializers.Serializer):
    qr_code = serializers.CharField(max_length=255)
