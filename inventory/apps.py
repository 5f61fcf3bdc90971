"""Django app configuration for the inventory app."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Storages, shipments and QR-tagged units."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
