"""Event duplication service."""

from datetime import datetime

import structlog
from django.db import transaction

from events.models import Event, TicketType, Tier, TierAllocation

logger = structlog.get_logger(__name__)


@transaction.atomic
def duplicate_event(
    template_event: Event,
    new_title: str,
    new_start: datetime,
) -> Event:
    """Create a copy of an event with shifted dates.

    Tier windows are shifted by the delta between ``template_event.starts_at``
    and ``new_start``. The copy starts inactive, so the organizer can review it
    before it goes on sale.

    Copies:
    - Event fields (new title, new start, fresh private access token)
    - Ticket types, tiers and allocation prices and quantities

    Does NOT copy:
    - Orders, tickets, sold/returned counters
    - Promo codes, referrals, gatekeepers

    Args:
        template_event: Event to copy from
        new_title: Title for new event
        new_start: Start datetime (anchor for all date shifts)

    Returns:
        New, inactive Event
    """
    delta = new_start - template_event.starts_at

    def shift_date(dt: datetime | None) -> datetime | None:
        return dt + delta if dt else None

    new_event = Event.objects.create(
        organizer=template_event.organizer,
        title=new_title,
        starts_at=new_start,
        description=template_event.description,
        venue=template_event.venue,
        address=template_event.address,
        city=template_event.city,
        category=template_event.category,
        visibility=template_event.visibility,
        is_active=False,
    )

    types_map: dict[object, TicketType] = {}
    for ticket_type in template_event.ticket_types.all():
        types_map[ticket_type.pk] = TicketType.objects.create(
            event=new_event,
            name=ticket_type.name,
            description=ticket_type.description,
            total_quantity=ticket_type.total_quantity,
            display_order=ticket_type.display_order,
        )

    for tier in template_event.tiers.order_by("created_at", "display_order").prefetch_related("allocations"):
        new_tier = Tier.objects.create(
            event=new_event,
            name=tier.name,
            starts_at=shift_date(tier.starts_at),
            ends_at=shift_date(tier.ends_at),
            is_active=tier.is_active,
            display_order=tier.display_order,
        )
        TierAllocation.objects.bulk_create(
            [
                TierAllocation(
                    tier=new_tier,
                    ticket_type=types_map[allocation.ticket_type_id],
                    price=allocation.price,
                    quantity=allocation.quantity,
                )
                for allocation in tier.allocations.all()
            ]
        )

    logger.info("event_duplicated", template_event_id=str(template_event.pk), new_event_id=str(new_event.pk))
    return new_event
