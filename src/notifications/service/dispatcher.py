"""Core notification dispatcher service."""

import typing as t

import structlog
from django.db import transaction

from accounts.models import User
from notifications.context_schemas import validate_notification_context
from notifications.enums import NotificationType
from notifications.models import Notification

logger = structlog.get_logger(__name__)

TITLES: dict[NotificationType, str] = {
    NotificationType.TICKET_ISSUED: "Your ticket for {event_title}",
    NotificationType.TICKET_TRANSFERRED_OUT: "You transferred a ticket for {event_title}",
    NotificationType.TICKET_RECEIVED: "You received a ticket for {event_title}",
    NotificationType.PAYMENT_PENDING: "Complete your payment for {event_title}",
}


def create_notification(
    notification_type: NotificationType | str,
    user: User,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record and queue its email once the transaction commits.

    Raises:
        ValueError: If context validation fails
    """
    from notifications.tasks import send_notification_email

    if isinstance(notification_type, str):
        notification_type = NotificationType(notification_type)

    validate_notification_context(notification_type, context)

    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
        title=TITLES[notification_type].format(**context),
    )
    transaction.on_commit(lambda: send_notification_email.delay(str(notification.pk)))

    logger.info(
        "notification_created",
        notification_id=str(notification.pk),
        notification_type=notification_type,
        user_id=str(user.pk),
    )
    return notification
