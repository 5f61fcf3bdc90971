from rest_framework import serializers

from .models import Shipment, Storage


class StorageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Storage
        fields = ["id", "name", "location", "capacity", "used_capacity", "is_active"]
        read_only_fields = ["used_capacity"]


class ShipmentListSerializer(serializers.ModelSerializer):
    unit_count = serializers.IntegerField(read_only=True)
    pending_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Shipment
        fields = [
            "id",
            "receipt_number",
            "receipt_date",
            "supplier_name",
            "status",
            "notes",
            "unit_count",
            "pending_count",
            "created_at",
        ]


class ShipmentItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, required=False)
    pack_size = serializers.IntegerField(min_value=2, required=False, allow_null=True)
    total_units = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate(self, attrs):
        if attrs.get("pack_size"):
            if not attrs.get("total_units"):
                raise serializers.ValidationError("total_units is required with pack_size")
        elif not attrs.get("quantity"):
            raise serializers.ValidationError("quantity is required")
        return attrs


class ShipmentCreateSerializer(serializers.Serializer):
    receipt_number = serializers.CharField(max_length=64)
    receipt_date = serializers.DateField()
    supplier_name = serializers.CharField(max_length=200)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = ShipmentItemInputSerializer(many=True, allow_empty=False)


class ShipmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Shipment.STATUS_CHOICES)


class ScanItemSerializer(serializers.Serializer):
    qr_code = serializers.CharField(max_length=255)
    storage_id = serializers.IntegerField(min_value=1)


class BulkReceiveSerializer(serializers.Serializer):
    storage_id = serializers.IntegerField(min_value=1)
