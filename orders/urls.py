"""URL routes for the orders app (v1)."""

from django.urls import path

from .views import (
    FulfillmentDetailView,
    FulfillScanView,
    OrderDetailView,
    OrderListView,
    OutboundOrderView,
    PendingFulfillmentView,
    ValidateItemView,
)

urlpatterns = [
    path("orders/", OrderListView.as_view(), name="order-list"),
    path("orders/outbound/", OutboundOrderView.as_view(), name="order-outbound"),
    path("orders/validate-item/", ValidateItemView.as_view(), name="order-validate-item"),
    path("orders/fulfillment/", PendingFulfillmentView.as_view(), name="order-fulfillment-list"),
    path("orders/<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("orders/<int:order_id>/fulfillment/", FulfillmentDetailView.as_view(), name="order-fulfillment-detail"),
    path("orders/<int:order_id>/fulfillment/scan/", FulfillScanView.as_view(), name="order-fulfill-scan"),
]
