"""Inventory ledger for tier allocations.

``TierAllocation.quantity_sold`` is the one contended counter of the system.
It is only written here, through conditional UPDATEs that the database
applies atomically, so concurrent checkouts can never push it past
``quantity``.
"""

import typing as t
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Q, Sum

from events.exceptions import ExpiredWindow, InvalidState, OutOfStock
from events.models import DEFERRED_PAYMENT_METHODS, Event, Order, Reservation, Ticket, TierAllocation

logger = structlog.get_logger(__name__)


def hold_expiry(payment_method: str, now: datetime) -> datetime:
    """When a hold placed at ``now`` lapses if payment has not been confirmed."""
    if payment_method in DEFERRED_PAYMENT_METHODS:
        return now + timedelta(days=settings.DEFERRED_PAYMENT_WINDOW_DAYS)
    return now + timedelta(minutes=settings.ONLINE_PAYMENT_WINDOW_MINUTES)


@transaction.atomic
def reserve(allocation: TierAllocation, order: Order, quantity: int, expires_at: datetime) -> Reservation:
    """Hold ``quantity`` units of an allocation for an order.

    Raises:
        OutOfStock: if fewer than ``quantity`` units remain.
    """
    if quantity < 1:
        raise ValueError("quantity must be positive")
    updated = TierAllocation.objects.filter(
        pk=allocation.pk,
        quantity__gte=F("quantity_sold") + quantity,
    ).update(quantity_sold=F("quantity_sold") + quantity)
    if not updated:
        logger.info("reservation_out_of_stock", allocation_id=str(allocation.pk), requested=quantity)
        raise OutOfStock(f"Only {_remaining(allocation)} left for {allocation}.")

    reservation = Reservation.objects.create(
        order=order, allocation=allocation, quantity=quantity, expires_at=expires_at
    )
    logger.info(
        "reservation_held",
        reservation_id=str(reservation.pk),
        allocation_id=str(allocation.pk),
        order_id=str(order.pk),
        quantity=quantity,
    )
    return reservation


def _remaining(allocation: TierAllocation) -> int:
    allocation.refresh_from_db(fields=["quantity", "quantity_sold"])
    return allocation.available


def commit(reservation: Reservation, now: datetime) -> Reservation:
    """Turn a hold into a sale.

    Raises:
        InvalidState: if the reservation is not held.
        ExpiredWindow: if the hold lapsed before payment was confirmed.
    """
    updated = Reservation.objects.filter(pk=reservation.pk, status=Reservation.Status.HELD, expires_at__gt=now).update(
        status=Reservation.Status.COMMITTED
    )
    reservation.refresh_from_db(fields=["status", "expires_at"])
    if updated:
        logger.info("reservation_committed", reservation_id=str(reservation.pk))
        return reservation
    if reservation.status != Reservation.Status.HELD:
        raise InvalidState(f"Reservation is {reservation.status}.")
    raise ExpiredWindow("The payment window for this order has elapsed.")


@transaction.atomic
def release(reservation: Reservation) -> bool:
    """Give held units back to the pool. Returns False when there was nothing to release."""
    updated = Reservation.objects.filter(pk=reservation.pk, status=Reservation.Status.HELD).update(
        status=Reservation.Status.RELEASED
    )
    if not updated:
        return False
    TierAllocation.objects.filter(
        pk=reservation.allocation_id,
        quantity_sold__gte=reservation.quantity,
    ).update(quantity_sold=F("quantity_sold") - reservation.quantity)
    reservation.status = Reservation.Status.RELEASED
    logger.info(
        "reservation_released",
        reservation_id=str(reservation.pk),
        allocation_id=str(reservation.allocation_id),
        quantity=reservation.quantity,
    )
    return True


def record_return(allocation_id: t.Any, quantity: int = 1) -> None:
    """Count units whose tickets expired unused.

    Returned units stay sold: they are not offered again at the tier price.
    """
    TierAllocation.objects.filter(pk=allocation_id).update(quantity_returned=F("quantity_returned") + quantity)
    logger.info("allocation_units_returned", allocation_id=str(allocation_id), quantity=quantity)


def release_expired_reservations(now: datetime) -> int:
    """Lapse every pending order whose hold has run out. Returns how many orders lapsed."""
    from events.service.lifecycle import lapse_order

    order_ids = (
        Reservation.objects.filter(status=Reservation.Status.HELD, expires_at__lte=now, order__status=Order.Status.PENDING)
        .values_list("order_id", flat=True)
        .distinct()
    )
    lapsed = 0
    for order in Order.objects.filter(pk__in=list(order_ids)):
        lapse_order(order)
        lapsed += 1
    if lapsed:
        logger.info("expired_reservations_released", orders=lapsed)
    return lapsed


@dataclass(frozen=True)
class AllocationDrift:
    allocation_id: str
    label: str
    quantity_sold: int
    expected_sold: int
    quantity_returned: int
    expected_returned: int


def reconcile(event: Event) -> list[AllocationDrift]:
    """Compare ledger counters with reservations and tickets.

    Background consistency check only; counters are reported, never rewritten.
    """
    drifts = []
    allocations = TierAllocation.objects.filter(tier__event=event).select_related("tier", "ticket_type").annotate(
        expected_sold=Sum(
            "reservations__quantity",
            filter=Q(reservations__status__in=[Reservation.Status.HELD, Reservation.Status.COMMITTED]),
            default=0,
        ),
    )
    for allocation in allocations:
        expected_returned = Ticket.objects.filter(
            tier_id=allocation.tier_id,
            ticket_type_id=allocation.ticket_type_id,
            status=Ticket.Status.EXPIRED,
            order__status=Order.Status.COMPLETED,
        ).aggregate(n=Count("pk"))["n"]
        if allocation.quantity_sold != allocation.expected_sold or allocation.quantity_returned != expected_returned:
            drift = AllocationDrift(
                allocation_id=str(allocation.pk),
                label=str(allocation),
                quantity_sold=allocation.quantity_sold,
                expected_sold=allocation.expected_sold,
                quantity_returned=allocation.quantity_returned,
                expected_returned=expected_returned,
            )
            logger.warning("inventory_drift_detected", **asdict(drift))
            drifts.append(drift)
    return drifts
