import typing as t
from decimal import Decimal

import structlog
from django.db import transaction
from django.db.models import Count, Q, Sum

from accounts.models import User
from events import schema
from events.exceptions import InvalidState, NotRegistered
from events.models import Event, Order, Reservation, Ticket, TierAllocation

logger = structlog.get_logger(__name__)


def create_event(organizer: User, payload: schema.EventCreateSchema) -> Event:
    if not organizer.is_organizer:
        raise InvalidState("Only organizers can create events.")
    event = Event.objects.create(organizer=organizer, **payload.model_dump())
    logger.info("event_created", event_id=str(event.pk), organizer_id=str(organizer.pk))
    return event


def get_event_stats(event: Event) -> dict[str, t.Any]:
    """Sales figures of an event, overall and per allocation."""
    ticket_counts = Ticket.objects.filter(event=event).aggregate(
        sold=Count("pk", filter=Q(status__in=[Ticket.Status.ACTIVE, Ticket.Status.USED, Ticket.Status.EXPIRED])),
        pending=Count("pk", filter=Q(status=Ticket.Status.PENDING_PAYMENT)),
    )
    used = Ticket.objects.filter(event=event, status=Ticket.Status.USED).count()
    revenue = Order.objects.filter(event=event, status=Order.Status.COMPLETED).aggregate(
        total=Sum("total_amount", default=Decimal("0"))
    )["total"]

    allocations = []
    for allocation in (
        TierAllocation.objects.filter(tier__event=event)
        .select_related("tier", "ticket_type")
        .annotate(
            committed=Sum(
                "reservations__quantity",
                filter=Q(reservations__status=Reservation.Status.COMMITTED),
                default=0,
            )
        )
        .order_by("tier__created_at", "tier__display_order", "ticket_type__display_order")
    ):
        allocations.append(
            {
                "tier": allocation.tier.name,
                "ticket_type": allocation.ticket_type.name,
                "price": allocation.price,
                "quantity": allocation.quantity,
                "sold": allocation.quantity_sold,
                "returned": allocation.quantity_returned,
                "revenue": allocation.price * allocation.committed,
            }
        )

    return {
        "tickets_sold": ticket_counts["sold"],
        "tickets_used": used,
        "tickets_pending": ticket_counts["pending"],
        "revenue": revenue,
        "allocations": allocations,
    }


def list_orders(event: Event, status: str | None = None) -> t.Any:
    qs = Order.objects.filter(event=event).prefetch_related("items")
    if status:
        qs = qs.filter(status=status)
    return qs


@transaction.atomic
def add_gatekeeper(event: Event, email: str) -> User:
    user = User.objects.filter(email__iexact=email.strip()).first()
    if user is None:
        raise NotRegistered("There is no account registered with that email.")
    event.gatekeepers.add(user)
    logger.info("gatekeeper_added", event_id=str(event.pk), user_id=str(user.pk))
    return user


def remove_gatekeeper(event: Event, user_id: t.Any) -> None:
    removed = event.gatekeepers.filter(pk=user_id).first()
    if removed is None:
        raise NotRegistered("That user is not a gatekeeper of this event.")
    event.gatekeepers.remove(removed)
    logger.info("gatekeeper_removed", event_id=str(event.pk), user_id=str(user_id))
