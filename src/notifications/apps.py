"""Notifications app configuration."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for the notifications app."""

    name = "notifications"
    verbose_name = "Notifications"

    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        import notifications.signals  # noqa: F401
