"""Serializers for the catalog app."""

from rest_framework import serializers

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    available_quantity = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "brand",
            "model",
            "product_type",
            "price",
            "description",
            "attributes",
            "is_active",
            "is_pack_product",
            "base_product",
            "pack_size",
            "available_quantity",
            "created_at",
        ]
        read_only_fields = fields


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    brand = serializers.CharField(max_length=120)
    model = serializers.CharField(max_length=160)
    product_type = serializers.ChoiceField(choices=Product.TYPE_CHOICES, default=Product.TYPE_GENERAL)
    price = serializers.IntegerField(min_value=0, default=0)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    attributes = serializers.DictField(required=False, default=dict)


class ProductPriceSerializer(serializers.Serializer):
    price = serializers.IntegerField(min_value=0)
