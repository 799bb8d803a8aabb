"""Context schemas for notifications using TypedDict for type safety.

Each notification type has a context schema naming the keys its templates use.
"""

import typing as t

from notifications.enums import NotificationType


class BaseNotificationContext(t.TypedDict, total=False):
    # Frontend URL for deep linking
    frontend_url: str


class EventContext(BaseNotificationContext):
    event_id: t.Required[str]
    event_title: t.Required[str]
    event_starts_at: t.Required[str]  # ISO format
    event_venue: t.Required[str]


class TicketIssuedContext(EventContext):
    ticket_id: t.Required[str]
    ticket_type: t.Required[str]
    tier_name: t.Required[str]
    price_paid: t.Required[str]
    expires_at: t.Required[str]


class TicketTransferredOutContext(EventContext):
    ticket_type: t.Required[str]
    recipient_name: t.Required[str]


class TicketReceivedContext(EventContext):
    ticket_id: t.Required[str]
    ticket_type: t.Required[str]
    sender_name: t.Required[str]
    expires_at: t.Required[str]


class PaymentPendingContext(EventContext):
    order_id: t.Required[str]
    order_code: t.Required[str]
    payment_method: t.Required[str]
    total_amount: t.Required[str]
    currency: t.Required[str]
    payment_due_at: t.Required[str]
    ticket_count: t.Required[int]


NOTIFICATION_CONTEXT_SCHEMAS: dict[NotificationType, type] = {
    NotificationType.TICKET_ISSUED: TicketIssuedContext,
    NotificationType.TICKET_TRANSFERRED_OUT: TicketTransferredOutContext,
    NotificationType.TICKET_RECEIVED: TicketReceivedContext,
    NotificationType.PAYMENT_PENDING: PaymentPendingContext,
}


def validate_notification_context(notification_type: NotificationType, context: dict[str, t.Any]) -> None:
    """Validate that context matches expected schema for notification type.

    Raises:
        ValueError: If context is invalid or notification type has no schema
    """
    schema = NOTIFICATION_CONTEXT_SCHEMAS.get(notification_type)
    if schema is None:
        raise ValueError(f"No schema defined for notification type: {notification_type}")

    required_keys: set[str] = getattr(schema, "__required_keys__", set())
    missing_keys = required_keys - context.keys()
    if missing_keys:
        raise ValueError(f"Missing required context keys for {notification_type}: {missing_keys}")
