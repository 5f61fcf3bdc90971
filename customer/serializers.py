from rest_framework import serializers

from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    order_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Customer
        fields = ["id", "name", "phone", "email", "address", "order_count", "created_at"]
        read_only_fields = ["id", "created_at"]
