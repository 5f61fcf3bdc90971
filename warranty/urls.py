"""URL routes for the customer portal."""

from django.urls import path

from .views import ClaimView, ProductVerifyView, TransferView, WarehouseSyncWebhookView

urlpatterns = [
    path("webhooks/warehouse-sync", WarehouseSyncWebhookView.as_view(), name="warehouse-sync-webhook"),
    path("products/verify/<str:qr_code>", ProductVerifyView.as_view(), name="portal-product-verify"),
    path("warranty/claim", ClaimView.as_view(), name="portal-warranty-claim"),
    path("warranty/transfer", TransferView.as_view(), name="portal-warranty-transfer"),
]
