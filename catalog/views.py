"""Warehouse catalog endpoints."""

from common.throttling import SettingsScopedRateThrottle
from common.views import envelope_response
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import selectors, services
from .models import Product
from .serializers import ProductCreateSerializer, ProductPriceSerializer, ProductSerializer


class ProductListCreateView(generics.ListAPIView):
    """List catalog products with availability; create new base products."""

    permission_classes = [IsAuthenticated]
    serializer_class = ProductSerializer
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    def get_throttles(self):
        if self.request.method == "POST":
            self.throttle_scope = "warehouse_write"
        return super().get_throttles()

    def get_queryset(self):
        params = self.request.query_params
        return selectors.list_products(
            search=params.get("search"),
            product_type=params.get("type"),
            organization=getattr(self.request.user, "organization", None),
        )

    @extend_schema(
        tags=["Catalog Endpoints"],
        summary="List products",
        parameters=[
            OpenApiParameter("search", str, description="Match name, brand or model"),
            OpenApiParameter("type", str, description="Filter by product type"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Catalog Endpoints"], summary="Create product", request=ProductCreateSerializer)
    def post(self, request):
        serializer = ProductCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _create():
            product = services.create_product(
                organization=getattr(request.user, "organization", None), **serializer.validated_data
            )
            return ProductSerializer(product).data

        return envelope_response(
            "catalog.create_product",
            _create,
            request=request,
            success_message="Product created",
            success_status=201,
        )


class ProductDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "warehouse"
    throttle_classes = [SettingsScopedRateThrottle]

    @extend_schema(tags=["Catalog Endpoints"], summary="Get product", responses=ProductSerializer)
    def get(self, request, product_id: int):
        product = generics.get_object_or_404(Product, id=product_id)
        data = ProductSerializer(product).data
        data["pack_products"] = ProductSerializer(selectors.pack_products_for(product.id), many=True).data
        return Response(data)

    @extend_schema(tags=["Catalog Endpoints"], summary="Update product price", request=ProductPriceSerializer)
    def patch(self, request, product_id: int):
        serializer = ProductPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return envelope_response(
            "catalog.update_price",
            lambda: ProductSerializer(
                services.update_product_price(product_id=product_id, price=serializer.validated_data["price"])
            ).data,
            request=request,
            context={"product_id": product_id},
            success_message="Price updated",
        )
