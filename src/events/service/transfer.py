"""Peer-to-peer ticket transfer.

Transfers are synchronous: in one transaction the sender's record becomes
``transferred_out`` and a fresh ``active`` record is created for the
recipient, pointing back through ``transferred_from``. Inventory is not
touched. The recipient's record has its own id, hence its own QR payload;
the sender's old QR scans as transferred.
"""

from dataclasses import dataclass
from datetime import datetime

import structlog
from django.db import transaction
from django.db.models import Q, QuerySet

from accounts.models import User
from accounts.service.account import find_registered_user, find_user_by_personal_code
from events.exceptions import InvalidCode, InvalidState, NotOwner, NotRegistered
from events.models import Ticket, TicketTransfer
from events.service import lifecycle
from events.signals import ticket_transferred

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransferHistory:
    sent: list[TicketTransfer]
    received: list[TicketTransfer]


def _check_transferable(ticket: Ticket, sender: User, now: datetime) -> Ticket:
    if ticket.owner_id != sender.pk:
        raise NotOwner()
    ticket = lifecycle.refresh(ticket, now)
    if ticket.status != Ticket.Status.ACTIVE:
        raise InvalidState(f"Only active tickets can be transferred; this one is {ticket.status}.")
    return ticket


@transaction.atomic
def _reassign(ticket: Ticket, sender: User, recipient: User, method: str) -> Ticket:
    if recipient.pk == sender.pk:
        raise InvalidState("You already own this ticket.")

    lifecycle.mark_transferred_out(ticket)
    new_ticket = Ticket.objects.create(
        owner=recipient,
        event_id=ticket.event_id,
        ticket_type_id=ticket.ticket_type_id,
        tier_id=ticket.tier_id,
        order_id=ticket.order_id,
        price_paid=ticket.price_paid,
        status=Ticket.Status.ACTIVE,
        purchased_at=ticket.purchased_at,
        expires_at=ticket.expires_at,
        transferred_from=ticket,
    )
    TicketTransfer.objects.create(
        source_ticket=ticket,
        resulting_ticket=new_ticket,
        from_user=sender,
        to_user=recipient,
        method=method,
    )
    logger.info(
        "ticket_transferred",
        ticket_id=str(ticket.pk),
        new_ticket_id=str(new_ticket.pk),
        from_user_id=str(sender.pk),
        to_user_id=str(recipient.pk),
        method=method,
    )
    ticket_transferred.send(sender=Ticket, ticket=new_ticket, from_user=sender, to_user=recipient)
    return new_ticket


def transfer_by_email(ticket: Ticket, sender: User, recipient_email: str, now: datetime) -> Ticket:
    """Give an active ticket to the account registered under ``recipient_email``.

    Accounts are never created on the fly: an unknown address fails closed.

    Raises:
        NotOwner, InvalidState, NotRegistered
    """
    ticket = _check_transferable(ticket, sender, now)
    recipient = find_registered_user(recipient_email)
    if recipient is None:
        raise NotRegistered()
    return _reassign(ticket, sender, recipient, TicketTransfer.Method.EMAIL)


def transfer_by_personal_qr(ticket: Ticket, sender: User, scanned_code: str, now: datetime) -> Ticket:
    """Give an active ticket to the owner of a scanned personal QR code.

    Raises:
        NotOwner, InvalidState, InvalidCode
    """
    ticket = _check_transferable(ticket, sender, now)
    recipient = find_user_by_personal_code(scanned_code)
    if recipient is None:
        raise InvalidCode("That personal code does not belong to any account.")
    return _reassign(ticket, sender, recipient, TicketTransfer.Method.PERSONAL_QR)


def transfers_for(user: User) -> QuerySet[TicketTransfer]:
    return TicketTransfer.objects.filter(Q(from_user=user) | Q(to_user=user)).select_related(
        "from_user", "to_user", "resulting_ticket__event", "resulting_ticket__ticket_type"
    )


def transfer_history(user: User) -> TransferHistory:
    """Transfers a user sent and received, newest first."""
    rows = list(transfers_for(user))
    return TransferHistory(
        sent=[row for row in rows if row.from_user_id == user.pk],
        received=[row for row in rows if row.to_user_id == user.pk],
    )
