"""Django app configuration for the assembly app."""

from django.apps import AppConfig


class AssemblyConfig(AppConfig):
    """Bundle assembly sessions."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "assembly"
