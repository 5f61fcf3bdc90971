from rest_framework import serializers

from .models import ShopifyProductMapping


class LineItemSerializer(serializers.Serializer):
    sku = serializers.CharField()
    variantId = serializers.CharField(source="variant_id")
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.FloatField(min_value=0)
    title = serializers.CharField()
    variantTitle = serializers.CharField(source="variant_title", required=False, allow_blank=True)


class WebhookCustomerSerializer(serializers.Serializer):
    email = serializers.EmailField(allow_blank=True)
    name = serializers.CharField(allow_null=True, allow_blank=True)
    phone = serializers.CharField(allow_null=True, allow_blank=True)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    address1 = serializers.CharField(required=False, allow_blank=True)
    address2 = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True)
    province = serializers.CharField(required=False, allow_blank=True)
    zip = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)


class OrderPaidEventSerializer(serializers.Serializer):
    """``order.paid`` event posted by the storefront.

    Accepts the camelCase wire format; ``validated_data`` uses the snake_case
    keys ``orders.services.process_shopify_order`` reads.
    """

    event = serializers.ChoiceField(choices=["order.paid"])
    provider = serializers.ChoiceField(choices=["sepay", "cod"])
    shopifyOrderId = serializers.CharField(source="shopify_order_id")
    shopifyOrderNumber = serializers.CharField(source="shopify_order_number")
    paymentCode = serializers.CharField(source="payment_code")
    amount = serializers.FloatField()
    currency = serializers.ChoiceField(choices=["VND"])
    paidAt = serializers.CharField(source="paid_at")
    referenceCode = serializers.CharField(source="reference_code")
    gateway = serializers.CharField()
    lineItems = LineItemSerializer(source="line_items", many=True, allow_empty=False)
    customer = WebhookCustomerSerializer()
    shippingAddress = ShippingAddressSerializer(source="shipping_address")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0")
        return value


class ShopifyProductMappingSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = ShopifyProductMapping
        fields = [
            "product",
            "product_name",
            "shopify_product_id",
            "shopify_variant_id",
            "shopify_inventory_item_id",
            "last_synced_at",
            "last_sync_status",
            "last_sync_error",
        ]
        read_only_fields = fields


class SyncProductsSerializer(serializers.Serializer):
    product_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
