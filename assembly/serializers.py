from rest_framework import serializers

from .models import Bundle


class BundleItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    expected_count = serializers.IntegerField(min_value=1)


class BundleCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    items = BundleItemInputSerializer(many=True, allow_empty=False)


class BundleListSerializer(serializers.ModelSerializer):
    expected_total = serializers.IntegerField(read_only=True)
    scanned_total = serializers.IntegerField(read_only=True)

    class Meta:
        model = Bundle
        fields = [
            "id",
            "name",
            "qr_code",
            "status",
            "current_phase_index",
            "expected_total",
            "scanned_total",
            "assembly_started_at",
            "assembly_completed_at",
            "created_at",
        ]


class StartSessionSerializer(serializers.Serializer):
    bundle_qr = serializers.CharField(max_length=255)


class AssemblyScanSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=255)
