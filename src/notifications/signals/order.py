"""Signal handlers for order notifications."""

import typing as t

from django.dispatch import receiver

from events.models import Order
from events.signals import payment_pending
from notifications.enums import NotificationType
from notifications.service.dispatcher import create_notification
from notifications.signals.ticket import build_event_context


@receiver(payment_pending)
def handle_payment_pending(sender: type[Order], order: Order, **kwargs: t.Any) -> None:
    """Remind a cash or bank transfer buyer how much to pay and by when."""
    tickets = list(order.tickets.all())
    due = min((ticket.payment_due_at for ticket in tickets if ticket.payment_due_at), default=None)
    context = {
        **build_event_context(order.event),
        "order_id": str(order.pk),
        "order_code": order.code,
        "payment_method": order.get_payment_method_display(),
        "total_amount": str(order.total_amount),
        "currency": order.currency,
        "payment_due_at": due.isoformat() if due else "",
        "ticket_count": len(tickets),
    }
    create_notification(NotificationType.PAYMENT_PENDING, order.buyer, context)
