"""Notification signal handlers.

Receivers for the domain signals of the events app, organized by domain.
"""

from notifications.signals import order, ticket  # noqa: F401
