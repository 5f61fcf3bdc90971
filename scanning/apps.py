"""Django app configuration for the scanning app."""

from django.apps import AppConfig


class ScanningConfig(AppConfig):
    """Live per-user scanning sessions."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "scanning"
