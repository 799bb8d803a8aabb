"""Signal handlers for ticket notifications."""

import typing as t

import structlog
from django.conf import settings
from django.dispatch import receiver

from accounts.models import User
from events.models import Event, Ticket
from events.signals import ticket_issued, ticket_transferred
from notifications.enums import NotificationType
from notifications.service.dispatcher import create_notification

logger = structlog.get_logger(__name__)


def build_event_context(event: Event) -> dict[str, t.Any]:
    """Common event fields used across notifications."""
    return {
        "event_id": str(event.pk),
        "event_title": event.title,
        "event_starts_at": event.starts_at.isoformat(),
        "event_venue": event.venue,
        "frontend_url": f"{settings.FRONTEND_BASE_URL}/events/{event.pk}",
    }


@receiver(ticket_issued)
def handle_ticket_issued(sender: type[Ticket], ticket: Ticket, **kwargs: t.Any) -> None:
    """Send the buyer their ticket once payment is confirmed."""
    context = {
        **build_event_context(ticket.event),
        "ticket_id": str(ticket.pk),
        "ticket_type": ticket.ticket_type.name,
        "tier_name": ticket.tier.name,
        "price_paid": str(ticket.price_paid),
        "expires_at": ticket.expires_at.isoformat(),
        "frontend_url": f"{settings.FRONTEND_BASE_URL}/tickets/{ticket.pk}",
    }
    create_notification(NotificationType.TICKET_ISSUED, ticket.owner, context)


@receiver(ticket_transferred)
def handle_ticket_transferred(
    sender: type[Ticket], ticket: Ticket, from_user: User, to_user: User, **kwargs: t.Any
) -> None:
    """Tell both sides of a transfer. ``ticket`` is the recipient's new record."""
    event_context = build_event_context(ticket.event)
    create_notification(
        NotificationType.TICKET_TRANSFERRED_OUT,
        from_user,
        {**event_context, "ticket_type": ticket.ticket_type.name, "recipient_name": to_user.display_name},
    )
    create_notification(
        NotificationType.TICKET_RECEIVED,
        to_user,
        {
            **event_context,
            "ticket_id": str(ticket.pk),
            "ticket_type": ticket.ticket_type.name,
            "sender_name": from_user.display_name,
            "expires_at": ticket.expires_at.isoformat(),
            "frontend_url": f"{settings.FRONTEND_BASE_URL}/tickets/{ticket.pk}",
        },
    )
    logger.debug("transfer_notifications_created", ticket_id=str(ticket.pk))
