"""App configuration for the rental application workflow."""

from django.apps import AppConfig


class ApplicationsConfig(AppConfig):
    """Register the applications app with sane defaults."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "applications"
