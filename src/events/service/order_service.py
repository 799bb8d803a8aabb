"""Checkout: from a basket to reserved stock, and from payment to tickets.

An order is priced against the tier active on the server clock when it is
placed. Its holds are taken through the inventory ledger in one transaction,
so an order either reserves every line or nothing.
"""

import typing as t
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from events.exceptions import ExpiredWindow, InvalidState, OutOfStock
from events.models import Event, Order, OrderItem, PromoCode, Referral, Reservation, Ticket
from events.service import inventory, lifecycle, pricing, promo_service, referral_service
from events.service.payment_provider import PaymentProviderError, get_payment_provider
from events.signals import payment_pending, ticket_issued

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderLine:
    ticket_type_id: UUID
    quantity: int


def _merge_lines(items: Sequence[OrderLine]) -> "OrderedDict[UUID, int]":
    merged: OrderedDict[UUID, int] = OrderedDict()
    for item in items:
        if item.quantity < 1:
            raise InvalidState("Quantities must be at least 1.")
        merged[item.ticket_type_id] = merged.get(item.ticket_type_id, 0) + item.quantity
    if not merged:
        raise InvalidState("The order has no items.")
    for quantity in merged.values():
        if quantity > settings.MAX_TICKETS_PER_ORDER_LINE:
            raise InvalidState(f"At most {settings.MAX_TICKETS_PER_ORDER_LINE} tickets per ticket type.")
    return merged


def _mint_tickets(order: Order, status: str, now: datetime, payment_due_at: datetime | None = None) -> list[Ticket]:
    expires_at = lifecycle.compute_expiry(now)
    tickets = []
    for item in order.items.all():
        for _ in range(item.quantity):
            tickets.append(
                Ticket.objects.create(
                    owner_id=order.buyer_id,
                    event_id=order.event_id,
                    ticket_type_id=item.ticket_type_id,
                    tier_id=item.tier_id,
                    order=order,
                    price_paid=item.unit_price,
                    status=status,
                    purchased_at=now,
                    expires_at=expires_at,
                    payment_due_at=payment_due_at,
                )
            )
    return tickets


@transaction.atomic
def _reserve_order(
    event: Event,
    buyer: User,
    lines: "OrderedDict[UUID, int]",
    payment_method: str,
    promo_code: str | None,
    referral_code: str | None,
    now: datetime,
) -> Order:
    snap = pricing.snapshot(event, now)
    if snap.tier is None:
        raise OutOfStock("There are no tickets on sale for this event.")

    promo = promo_service.resolve_promo_code(event, promo_code, now) if promo_code else None
    referral = referral_service.find_for_order(event, referral_code)

    order = Order.objects.create(
        buyer=buyer, event=event, payment_method=payment_method, promo_code=promo, referral=referral
    )
    hold_until = inventory.hold_expiry(payment_method, now)
    subtotal = Decimal("0")
    for ticket_type_id, quantity in lines.items():
        line = snap.line_for(ticket_type_id)
        if line is None or not line.purchasable or line.allocation is None:
            raise OutOfStock("That ticket type is not on sale in the current tier.")
        inventory.reserve(line.allocation, order, quantity, hold_until)
        OrderItem.objects.create(
            order=order, ticket_type=line.ticket_type, tier=snap.tier, unit_price=line.price, quantity=quantity
        )
        subtotal += line.price * quantity

    order.subtotal = subtotal
    order.discount_amount = promo.discount_for(subtotal) if promo else Decimal("0")
    order.total_amount = subtotal - order.discount_amount
    order.save(update_fields=["subtotal", "discount_amount", "total_amount", "updated_at"])

    if order.is_deferred:
        _mint_tickets(order, Ticket.Status.PENDING_PAYMENT, now, payment_due_at=hold_until)
        transaction.on_commit(lambda: payment_pending.send(sender=Order, order=order))

    logger.info(
        "order_placed",
        order_id=str(order.pk),
        event_id=str(event.pk),
        tier_id=str(snap.tier.pk),
        payment_method=payment_method,
        total=str(order.total_amount),
    )
    return order


def place_order(
    *,
    event: Event,
    buyer: User,
    items: Sequence[OrderLine],
    payment_method: str,
    promo_code: str | None = None,
    referral_code: str | None = None,
    now: datetime | None = None,
) -> Order:
    """Reserve stock for a basket and start payment.

    Cash and bank transfer orders get ``pending_payment`` tickets straight
    away. Online orders get tickets on confirmation; the buyer is sent to the
    provider's checkout. Free orders are confirmed immediately.

    Raises:
        OutOfStock: a line is not on sale or not enough units are left.
        InvalidCode: the promo code cannot be used.
        InvalidState: the event is closed or the basket is malformed.
    """
    now = now or timezone.now()
    if not event.is_active:
        raise InvalidState("This event is not on sale.")
    lines = _merge_lines(items)
    order = _reserve_order(event, buyer, lines, payment_method, promo_code, referral_code, now)

    if order.is_deferred:
        return order
    if order.total_amount == 0:
        return confirm_payment(order, now=now)

    try:
        intent = get_payment_provider().create_payment_intent(order)
    except PaymentProviderError:
        lifecycle.lapse_order(order)
        raise
    order.payment_reference = intent.reference
    order.checkout_url = intent.redirect_url
    order.save(update_fields=["payment_reference", "checkout_url", "updated_at"])
    return order


def confirm_payment(order: Order, *, now: datetime | None = None, payment_reference: str | None = None) -> Order:
    """Payment arrived: commit holds and issue tickets.

    Confirming a completed order again is a no-op.

    Raises:
        InvalidState: the order already failed.
        ExpiredWindow: the hold lapsed before the payment was confirmed.
    """
    now = now or timezone.now()
    try:
        locked, tickets = _confirm(order, now, payment_reference)
    except ExpiredWindow:
        lifecycle.lapse_order(order)
        raise
    if tickets:
        logger.info("order_confirmed", order_id=str(locked.pk), tickets=len(tickets))
    order.status = locked.status
    return locked


@transaction.atomic
def _confirm(order: Order, now: datetime, payment_reference: str | None) -> tuple[Order, list[Ticket]]:
    locked = Order.objects.select_for_update().get(pk=order.pk)
    if locked.status == Order.Status.COMPLETED:
        logger.info("order_already_confirmed", order_id=str(locked.pk))
        return locked, []
    if locked.status == Order.Status.FAILED:
        raise InvalidState("This order has failed and cannot be paid.")

    for reservation in locked.reservations.filter(status=Reservation.Status.HELD):
        inventory.commit(reservation, now)

    if locked.is_deferred:
        pending = locked.tickets.filter(status=Ticket.Status.PENDING_PAYMENT)
        tickets = [lifecycle.activate(ticket) for ticket in pending]
    else:
        tickets = _mint_tickets(locked, Ticket.Status.ACTIVE, now)

    if locked.promo_code_id:
        promo_service.record_use(t.cast(PromoCode, locked.promo_code))
    if locked.referral_id:
        referral_service.record_conversion(t.cast(Referral, locked.referral))

    locked.status = Order.Status.COMPLETED
    locked.paid_at = now
    if payment_reference:
        locked.payment_reference = payment_reference
    locked.save(update_fields=["status", "paid_at", "payment_reference", "updated_at"])

    for ticket in tickets:
        transaction.on_commit(lambda ticket=ticket: ticket_issued.send(sender=Ticket, ticket=ticket))
    return locked, tickets


def fail_payment(order: Order) -> Order:
    """Payment failed or was abandoned: release holds and expire pending tickets.

    Failing an already failed order is a no-op.

    Raises:
        InvalidState: the order was already completed.
    """
    if order.status == Order.Status.COMPLETED:
        raise InvalidState("A completed order cannot fail.")
    failed = lifecycle.lapse_order(order)
    if failed.status == Order.Status.COMPLETED:
        raise InvalidState("A completed order cannot fail.")
    logger.info("order_failed", order_id=str(failed.pk))
    return failed


def find_order_by_reference(reference: str) -> Order | None:
    return Order.objects.filter(payment_reference=reference).first()
