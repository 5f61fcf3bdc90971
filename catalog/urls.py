"""URL routes for the catalog app."""

from django.urls import path

from .views import ProductDetailView, ProductListCreateView

urlpatterns = [
    path("products/", ProductListCreateView.as_view(), name="product-list"),
    path("products/<int:product_id>/", ProductDetailView.as_view(), name="product-detail"),
]
