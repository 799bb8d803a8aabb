"""Editing an event's pricing plan: ticket types, tiers and allocations.

Every edit keeps, per ticket type, the sum of its allocations equal to its
total quantity, and rejects overlapping tier windows.
"""

from collections import defaultdict
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import Sum

from events import schema
from events.exceptions import InvalidState, MisconfiguredTiers
from events.models import Event, TicketType, Tier, TierAllocation
from events.service.pricing import find_overlaps

logger = structlog.get_logger(__name__)


def check_allocation_invariant(event: Event) -> dict[UUID, tuple[int, int]]:
    """Ticket types whose allocations do not add up, as ``{id: (total, allocated)}``."""
    allocated = dict(
        TierAllocation.objects.filter(tier__event=event)
        .values("ticket_type_id")
        .annotate(total=Sum("quantity"))
        .values_list("ticket_type_id", "total")
    )
    return {
        ticket_type.pk: (ticket_type.total_quantity, allocated.get(ticket_type.pk, 0))
        for ticket_type in event.ticket_types.all()
        if allocated.get(ticket_type.pk, 0) != ticket_type.total_quantity
    }


def _raise_on_overlap(tiers: list[Tier]) -> None:
    overlaps = find_overlaps([tier for tier in tiers if tier.is_active])
    if overlaps:
        a, b = overlaps[0]
        raise MisconfiguredTiers(f"Tiers '{a.name}' and '{b.name}' have overlapping windows.")


def _validate_plan(plan: schema.PricingPlanInSchema) -> None:
    totals = {}
    for ticket_type in plan.ticket_types:
        if ticket_type.name in totals:
            raise MisconfiguredTiers(f"Ticket type '{ticket_type.name}' appears twice.")
        totals[ticket_type.name] = ticket_type.total_quantity

    allocated: dict[str, int] = defaultdict(int)
    tier_names = set()
    for tier in plan.tiers:
        if tier.name in tier_names:
            raise MisconfiguredTiers(f"Tier '{tier.name}' appears twice.")
        tier_names.add(tier.name)
        seen = set()
        for allocation in tier.allocations:
            if allocation.ticket_type not in totals:
                raise MisconfiguredTiers(f"Tier '{tier.name}' allocates unknown type '{allocation.ticket_type}'.")
            if allocation.ticket_type in seen:
                raise MisconfiguredTiers(f"Tier '{tier.name}' allocates '{allocation.ticket_type}' twice.")
            seen.add(allocation.ticket_type)
            allocated[allocation.ticket_type] += allocation.quantity

    for name, total in totals.items():
        if allocated[name] != total:
            raise MisconfiguredTiers(
                f"Allocations of '{name}' add up to {allocated[name]}, but its total quantity is {total}."
            )

    _raise_on_overlap(
        [Tier(name=tier.name, starts_at=tier.starts_at, ends_at=tier.ends_at, is_active=tier.is_active) for tier in plan.tiers]
    )


@transaction.atomic
def replace_pricing_plan(event: Event, plan: schema.PricingPlanInSchema) -> Event:
    """Swap the whole plan of an event that has not sold anything yet.

    Raises:
        InvalidState: the event already has orders; use ``add_tier`` instead.
        MisconfiguredTiers: the plan breaks the allocation invariant or has overlapping tiers.
    """
    event = Event.objects.select_for_update().get(pk=event.pk)
    if event.has_sales():
        raise InvalidState("The pricing plan cannot be replaced once the event has orders.")
    _validate_plan(plan)

    Tier.objects.filter(event=event).delete()
    TicketType.objects.filter(event=event).delete()

    types_by_name = {
        item.name: TicketType.objects.create(event=event, **item.model_dump()) for item in plan.ticket_types
    }
    for item in plan.tiers:
        tier = Tier.objects.create(event=event, **item.model_dump(exclude={"allocations"}))
        for allocation in item.allocations:
            TierAllocation.objects.create(
                tier=tier,
                ticket_type=types_by_name[allocation.ticket_type],
                price=allocation.price,
                quantity=allocation.quantity,
            )
    logger.info(
        "pricing_plan_replaced", event_id=str(event.pk), ticket_types=len(types_by_name), tiers=len(plan.tiers)
    )
    return event


@transaction.atomic
def add_tier(event: Event, payload: schema.TierInSchema) -> Tier:
    """Append a tier to a plan, selling extra stock on top of what exists.

    Each allocation raises its ticket type's total by the same amount.
    """
    types_by_name = {ticket_type.name: ticket_type for ticket_type in event.ticket_types.select_for_update()}
    tier = Tier(event=event, **payload.model_dump(exclude={"allocations"}))
    _raise_on_overlap([*event.tiers.all(), tier])
    if event.tiers.filter(name=tier.name).exists():
        raise MisconfiguredTiers(f"Tier '{tier.name}' already exists.")
    tier.save()

    seen = set()
    for allocation in payload.allocations:
        ticket_type = types_by_name.get(allocation.ticket_type)
        if ticket_type is None:
            raise MisconfiguredTiers(f"Unknown ticket type '{allocation.ticket_type}'.")
        if ticket_type.pk in seen:
            raise MisconfiguredTiers(f"Tier '{tier.name}' allocates '{ticket_type.name}' twice.")
        seen.add(ticket_type.pk)
        TierAllocation.objects.create(
            tier=tier, ticket_type=ticket_type, price=allocation.price, quantity=allocation.quantity
        )
        ticket_type.total_quantity += allocation.quantity
        ticket_type.save(update_fields=["total_quantity", "updated_at"])
    logger.info("tier_added", event_id=str(event.pk), tier_id=str(tier.pk))
    return tier


@transaction.atomic
def update_tier(tier: Tier, payload: schema.TierEditSchema) -> Tier:
    tier = Tier.objects.select_for_update().get(pk=tier.pk)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(tier, key, value)
    others = list(Tier.objects.filter(event_id=tier.event_id).exclude(pk=tier.pk))
    _raise_on_overlap([*others, tier])
    tier.save()
    logger.info("tier_updated", tier_id=str(tier.pk))
    return tier


@transaction.atomic
def update_allocation(allocation: TierAllocation, payload: schema.AllocationEditSchema) -> TierAllocation:
    """Reprice an allocation or resize its stock.

    Resizing moves the ticket type's total by the same delta. Stock cannot shrink
    below what is already held or sold.
    """
    allocation = TierAllocation.objects.select_for_update().select_related("ticket_type").get(pk=allocation.pk)
    if payload.price is not None:
        allocation.price = payload.price
    if payload.quantity is not None and payload.quantity != allocation.quantity:
        if payload.quantity < allocation.quantity_sold:
            raise MisconfiguredTiers(f"{allocation.quantity_sold} units are already sold or held.")
        delta = payload.quantity - allocation.quantity
        allocation.quantity = payload.quantity
        ticket_type = TicketType.objects.select_for_update().get(pk=allocation.ticket_type_id)
        ticket_type.total_quantity += delta
        ticket_type.save(update_fields=["total_quantity", "updated_at"])
    allocation.save(update_fields=["price", "quantity", "updated_at"])
    logger.info("allocation_updated", allocation_id=str(allocation.pk))
    return allocation


def get_pricing_plan(event: Event) -> dict[str, list[TicketType] | list[Tier]]:
    return {
        "ticket_types": list(event.ticket_types.all()),
        "tiers": list(event.tiers.prefetch_related("allocations")),
    }
