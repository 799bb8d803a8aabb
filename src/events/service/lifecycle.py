"""Ticket lifecycle.

::

    pending_payment -> active -> used
    pending_payment -> expired
    active -> expired
    active -> transferred_out

``used``, ``expired`` and ``transferred_out`` are terminal. Every transition is
an optimistic UPDATE guarded by the status and version that were read, so a
transition applied against a stale read affects no row and is rejected.
"""

import typing as t
from datetime import datetime

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from common.utils import add_business_days
from events.exceptions import InvalidState
from events.models import Order, Reservation, Ticket, TierAllocation
from events.service import inventory
from events.utils import evict_ticket_qr

logger = structlog.get_logger(__name__)

Status = Ticket.Status

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    Status.PENDING_PAYMENT: frozenset({Status.ACTIVE, Status.EXPIRED}),
    Status.ACTIVE: frozenset({Status.USED, Status.EXPIRED, Status.TRANSFERRED_OUT}),
}


class StaleTicket(InvalidState):
    """Another writer changed the ticket between read and write."""

    def __init__(self, ticket: Ticket) -> None:
        self.current_status = ticket.status
        super().__init__(f"Ticket is {ticket.status}.")


def compute_expiry(purchased_at: datetime) -> datetime:
    """Validity window runs from purchase, in business days."""
    return add_business_days(purchased_at, settings.TICKET_VALIDITY_BUSINESS_DAYS)


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def transition(ticket: Ticket, to_status: str, **fields: t.Any) -> Ticket:
    """Move a ticket to ``to_status`` if nobody else moved it first.

    Raises:
        InvalidState: if the transition is not allowed from the current state.
        StaleTicket: if the row changed since ``ticket`` was read.
    """
    if not can_transition(ticket.status, to_status):
        raise InvalidState(f"A {ticket.status} ticket cannot become {to_status}.")
    updated = Ticket.objects.filter(pk=ticket.pk, status=ticket.status, version=ticket.version).update(
        status=to_status, version=F("version") + 1, updated_at=timezone.now(), **fields
    )
    from_status = ticket.status
    ticket.refresh_from_db()
    if not updated:
        raise StaleTicket(ticket)
    if to_status != Status.ACTIVE:
        evict_ticket_qr(ticket.pk)
    logger.info("ticket_transitioned", ticket_id=str(ticket.pk), from_status=from_status, to_status=to_status)
    return ticket


def is_lapsed(ticket: Ticket, now: datetime) -> bool:
    """Whether the ticket's current window has run out."""
    if ticket.status == Status.ACTIVE:
        return now >= ticket.expires_at
    if ticket.status == Status.PENDING_PAYMENT:
        return ticket.payment_due_at is not None and now >= ticket.payment_due_at
    return False


def refresh(ticket: Ticket, now: datetime) -> Ticket:
    """Apply time-triggered expiry on read."""
    if not is_lapsed(ticket, now):
        return ticket
    try:
        return expire(ticket)
    except StaleTicket:
        return ticket


def expire(ticket: Ticket) -> Ticket:
    """Expire a lapsed ticket.

    An active ticket is counted as a return on its allocation. A pending one
    lapses its whole order, which gives the held units back to the pool.
    """
    if ticket.status == Status.PENDING_PAYMENT:
        lapse_order(ticket.order)
        ticket.refresh_from_db()
        return ticket
    with transaction.atomic():
        transition(ticket, Status.EXPIRED)
        allocation_id = (
            TierAllocation.objects.filter(tier_id=ticket.tier_id, ticket_type_id=ticket.ticket_type_id)
            .values_list("pk", flat=True)
            .first()
        )
        if allocation_id:
            inventory.record_return(allocation_id, 1)
    return ticket


@transaction.atomic
def lapse_order(order: Order) -> Order:
    """Fail an unpaid order: release its holds and expire its pending tickets.

    Completed orders are left alone; lapsing twice is a no-op.
    """
    locked = Order.objects.select_for_update().get(pk=order.pk)
    if locked.status != Order.Status.PENDING:
        return locked
    for reservation in locked.reservations.filter(status=Reservation.Status.HELD):
        inventory.release(reservation)
    for ticket in locked.tickets.filter(status=Status.PENDING_PAYMENT):
        transition(ticket, Status.EXPIRED)
    locked.status = Order.Status.FAILED
    locked.save(update_fields=["status", "updated_at"])
    logger.info("order_lapsed", order_id=str(locked.pk))
    order.status = locked.status
    return locked


def activate(ticket: Ticket) -> Ticket:
    """Payment confirmed: the ticket becomes usable and gets its QR."""
    if ticket.status != Status.PENDING_PAYMENT:
        raise InvalidState(f"Only pending tickets can be activated; this one is {ticket.status}.")
    return transition(ticket, Status.ACTIVE)


def mark_used(ticket: Ticket, *, validator: t.Any, device: str, now: datetime) -> Ticket:
    return transition(ticket, Status.USED, scanned_at=now, scanned_by=validator, scanned_device=device[:120])


def mark_transferred_out(ticket: Ticket) -> Ticket:
    return transition(ticket, Status.TRANSFERRED_OUT)


def qr_payload(ticket: Ticket) -> str:
    """Signed token for the ticket's QR. Pending tickets have none."""
    if not ticket.has_qr:
        raise InvalidState("The ticket has no QR code until its payment is confirmed.")
    return ticket.signed_payload


def expire_stale_tickets(now: datetime) -> int:
    """Sweep tickets whose window ran out without anyone reading them."""
    lapsed = Ticket.objects.filter(
        Q(status=Status.ACTIVE, expires_at__lte=now)
        | Q(status=Status.PENDING_PAYMENT, payment_due_at__lte=now)
    ).select_related("order")
    count = 0
    for ticket in lapsed.iterator():
        ticket = refresh(ticket, now)
        if ticket.status == Status.EXPIRED:
            count += 1
    if count:
        logger.info("stale_tickets_expired", count=count)
    return count
