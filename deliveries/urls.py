from django.urls import path

from .views import (
    CreateResolutionView,
    DeliveryDetailView,
    DeliveryHistoryView,
    DeliveryListView,
    DeliveryStatsView,
    DeliveryStatusView,
    ProcessResolutionView,
    ShipOrderView,
)

urlpatterns = [
    path("deliveries/", DeliveryListView.as_view(), name="delivery-list"),
    path("deliveries/stats/", DeliveryStatsView.as_view(), name="delivery-stats"),
    path("deliveries/<int:delivery_id>/", DeliveryDetailView.as_view(), name="delivery-detail"),
    path("deliveries/<int:delivery_id>/status/", DeliveryStatusView.as_view(), name="delivery-status"),
    path("deliveries/<int:delivery_id>/history/", DeliveryHistoryView.as_view(), name="delivery-history"),
    path("deliveries/<int:delivery_id>/resolutions/", CreateResolutionView.as_view(), name="delivery-resolutions"),
    path("resolutions/<int:resolution_id>/", ProcessResolutionView.as_view(), name="resolution-process"),
    path("orders/<int:order_id>/ship/", ShipOrderView.as_view(), name="order-ship"),
]
