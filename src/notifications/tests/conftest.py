"""Shared fixtures for notification tests."""

import typing as t
from datetime import datetime
from decimal import Decimal

import pytest

from accounts.models import User
from events.models import Event, Order, PaymentMethod, Ticket, TicketType, TierAllocation
from events.service import lifecycle
from notifications.enums import NotificationType
from notifications.models import Notification


@pytest.fixture
def ticket_context(event: Event) -> dict[str, t.Any]:
    return {
        "event_id": str(event.pk),
        "event_title": event.title,
        "event_starts_at": event.starts_at.isoformat(),
        "event_venue": event.venue,
        "ticket_id": "7b0e8d5c-3f61-4bd4-8c43-0f7e34d0e9a1",
        "ticket_type": "General",
        "tier_name": "Preventa",
        "price_paid": "100.00",
        "expires_at": "2030-01-01T12:00:00+00:00",
    }


@pytest.fixture
def notification(user: User, ticket_context: dict[str, t.Any]) -> Notification:
    return Notification.objects.create(
        notification_type=NotificationType.TICKET_ISSUED,
        user=user,
        title="Your ticket for Noche de Tango",
        context=ticket_context,
    )


@pytest.fixture
def issued_ticket(
    priced_event: Event, general: TicketType, allocation_a: TierAllocation, user: User, day0: datetime
) -> Ticket:
    order = Order.objects.create(
        buyer=user,
        event=priced_event,
        payment_method=PaymentMethod.ONLINE,
        status=Order.Status.COMPLETED,
        subtotal=allocation_a.price,
        total_amount=allocation_a.price,
    )
    return Ticket.objects.create(
        owner=user,
        event=priced_event,
        ticket_type=general,
        tier=allocation_a.tier,
        order=order,
        price_paid=Decimal(allocation_a.price),
        status=Ticket.Status.ACTIVE,
        purchased_at=day0,
        expires_at=lifecycle.compute_expiry(day0),
    )
