import typing as t
from datetime import datetime
from decimal import Decimal

import pytest

from accounts.models import User
from events.models import Event, Order, PaymentMethod, Ticket, TicketType, TierAllocation
from events.service import lifecycle

TicketFactory = t.Callable[..., Ticket]


@pytest.fixture
def make_ticket(
    priced_event: Event, general: TicketType, allocation_a: TierAllocation, user: User, day0: datetime
) -> TicketFactory:
    """Tickets of a completed order in the Preventa tier, bypassing checkout."""

    def factory(
        *,
        owner: User | None = None,
        status: str = Ticket.Status.ACTIVE,
        purchased_at: datetime | None = None,
        **kwargs: t.Any,
    ) -> Ticket:
        owner = owner or user
        purchased_at = purchased_at or day0
        order = Order.objects.create(
            buyer=owner,
            event=priced_event,
            payment_method=PaymentMethod.ONLINE,
            status=Order.Status.COMPLETED if status != Ticket.Status.PENDING_PAYMENT else Order.Status.PENDING,
            subtotal=allocation_a.price,
            total_amount=allocation_a.price,
        )
        return Ticket.objects.create(
            owner=owner,
            event=priced_event,
            ticket_type=general,
            tier=allocation_a.tier,
            order=order,
            price_paid=Decimal(allocation_a.price),
            status=status,
            purchased_at=purchased_at,
            expires_at=kwargs.pop("expires_at", lifecycle.compute_expiry(purchased_at)),
            **kwargs,
        )

    return factory


@pytest.fixture
def ticket(make_ticket: TicketFactory) -> Ticket:
    return make_ticket()
