"""Django app configuration for the orders app."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """In-store sales and Shopify order fulfillment."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
