"""URL routes for the shopify_sync app (v1)."""

from django.urls import path

from .views import InventorySyncView, ProductMappingListView, ShopifyOrderWebhookView

urlpatterns = [
    path(
        "webhooks/shopify/<int:organization_id>/orders/",
        ShopifyOrderWebhookView.as_view(),
        name="shopify-order-webhook",
    ),
    path("shopify/mappings/", ProductMappingListView.as_view(), name="shopify-mapping-list"),
    path("shopify/inventory/sync/", InventorySyncView.as_view(), name="shopify-inventory-sync"),
]
