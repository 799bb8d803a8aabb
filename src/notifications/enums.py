"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types in the system."""

    TICKET_ISSUED = "ticket_issued"
    TICKET_TRANSFERRED_OUT = "ticket_transferred_out"
    TICKET_RECEIVED = "ticket_received"
    PAYMENT_PENDING = "payment_pending"


class DeliveryStatus(TextChoices):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
