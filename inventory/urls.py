from django.urls import path

from .views import (
    AvailabilityView,
    ScanItemView,
    ShipmentBulkReceiveView,
    ShipmentDetailView,
    ShipmentListCreateView,
    ShipmentMetricsView,
    ShipmentProgressView,
    ShipmentStatusView,
    StorageListCreateView,
)

urlpatterns = [
    path("shipments/", ShipmentListCreateView.as_view(), name="shipment-list"),
    path("shipments/metrics/", ShipmentMetricsView.as_view(), name="shipment-metrics"),
    path("shipments/<int:shipment_id>/", ShipmentDetailView.as_view(), name="shipment-detail"),
    path("shipments/<int:shipment_id>/status/", ShipmentStatusView.as_view(), name="shipment-status"),
    path("shipments/<int:shipment_id>/progress/", ShipmentProgressView.as_view(), name="shipment-progress"),
    path("shipments/<int:shipment_id>/receive/", ShipmentBulkReceiveView.as_view(), name="shipment-receive"),
    path("inventory/scan/", ScanItemView.as_view(), name="inventory-scan"),
    path("inventory/availability/", AvailabilityView.as_view(), name="inventory-availability"),
    path("storages/", StorageListCreateView.as_view(), name="storage-list"),
]

# EOF
