"""Django app configuration for the warranty app."""

from django.apps import AppConfig


class WarrantyConfig(AppConfig):
    """Customer warranty portal."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "warranty"
