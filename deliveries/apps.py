"""Django app configuration for the deliveries app."""

from django.apps import AppConfig


class DeliveriesConfig(AppConfig):
    """Delivery tracking and failure resolution."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "deliveries"
