"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "micaglow.core"
    verbose_name = "MicaGlow Core"
    default_auto_field = "django.db.models.BigAutoField"
