from rest_framework import serializers


class CartUpdateSerializer(serializers.Serializer):
    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class CartRemoveSerializer(serializers.Serializer):
    shipment_item_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class CustomerUpdateSerializer(serializers.Serializer):
    customer_info = serializers.DictField()
    written_at = serializers.DateTimeField(required=False, allow_null=True)


class PingSerializer(serializers.Serializer):
    device_id = serializers.CharField(max_length=64)


class SyncQuerySerializer(serializers.Serializer):
    since = serializers.DateTimeField(required=False)
