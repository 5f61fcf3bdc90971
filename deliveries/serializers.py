from common.choices import FailureCategory
from rest_framework import serializers

from .models import Delivery, DeliveryResolution


class DeliveryResolutionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryResolution
        fields = [
            "id",
            "resolution_type",
            "resolution_status",
            "target_storage",
            "supplier_return_reason",
            "scheduled_date",
            "completed_at",
            "notes",
            "created_at",
        ]


class DeliverySerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    order_source = serializers.CharField(source="order.source", read_only=True)
    total_amount = serializers.IntegerField(source="order.total_amount", read_only=True)
    customer_name = serializers.CharField(source="order.customer.name", read_only=True)
    customer_phone = serializers.CharField(source="order.customer.phone", read_only=True)

    class Meta:
        model = Delivery
        fields = [
            "id",
            "order",
            "order_number",
            "order_source",
            "total_amount",
            "customer_name",
            "customer_phone",
            "shipper_name",
            "shipper_phone",
            "tracking_number",
            "status",
            "delivered_at",
            "failure_reason",
            "failure_category",
            "notes",
            "created_at",
        ]


class DeliveryDetailSerializer(DeliverySerializer):
    resolutions = DeliveryResolutionSerializer(many=True, read_only=True)

    class Meta(DeliverySerializer.Meta):
        fields = DeliverySerializer.Meta.fields + ["resolutions"]


class ShipOrderSerializer(serializers.Serializer):
    shipper_name = serializers.CharField(max_length=120)
    shipper_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class DeliveryStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[Delivery.STATUS_DELIVERED, Delivery.STATUS_FAILED, Delivery.STATUS_CANCELLED]
    )
    failure_reason = serializers.CharField(required=False, allow_blank=True, default="")
    failure_category = serializers.ChoiceField(
        choices=FailureCategory.choices, required=False, allow_blank=True, default=""
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CreateResolutionSerializer(serializers.Serializer):
    resolution_type = serializers.ChoiceField(choices=DeliveryResolution.TYPE_CHOICES)
    target_storage_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    supplier_return_reason = serializers.CharField(required=False, allow_blank=True, default="")
    scheduled_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ProcessResolutionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[DeliveryResolution.STATUS_IN_PROGRESS, DeliveryResolution.STATUS_COMPLETED]
    )
