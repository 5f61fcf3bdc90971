"""
URL configuration for config project.

Warehouse routes are versioned under ``api/v1/``. The customer portal keeps
its unversioned ``api/`` paths because storefront links and the warehouse
sync webhook point at them.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "Warehouse Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Warehouse v1
    path("api/v1/", include("users.urls")),
    path("api/v1/", include("catalog.urls")),
    path("api/v1/", include("inventory.urls")),
    path("api/v1/", include("assembly.urls")),
    path("api/v1/", include("customer.urls")),
    path("api/v1/", include("orders.urls")),
    path("api/v1/", include("scanning.urls")),
    path("api/v1/", include("deliveries.urls")),
    path("api/v1/", include("shopify_sync.urls")),
    # Customer portal
    path("api/", include("warranty.urls")),
]
