"""Django app configuration for the shopify_sync app."""

from django.apps import AppConfig


class ShopifySyncConfig(AppConfig):
    """Per-organization Shopify mirroring."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "shopify_sync"
