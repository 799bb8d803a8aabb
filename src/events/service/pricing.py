"""Tier resolution: which sale stage is active at an instant, and at what price.

Everything here is a pure function of the tiers handed in and the instant
``at``. Callers take ``at`` from the server clock (``timezone.now()``), never
from request data.
"""

import typing as t
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from itertools import combinations
from uuid import UUID

import structlog

from events.exceptions import MisconfiguredTiers
from events.models import Event, TicketType, Tier, TierAllocation

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PricingLine:
    ticket_type: TicketType
    allocation: TierAllocation | None
    price: Decimal
    available: int

    @property
    def purchasable(self) -> bool:
        return self.allocation is not None and self.available > 0


@dataclass(frozen=True)
class PricingSnapshot:
    event: Event
    at: datetime
    tier: Tier | None
    lines: list[PricingLine] = field(default_factory=list)

    def line_for(self, ticket_type_id: UUID) -> PricingLine | None:
        for line in self.lines:
            if line.ticket_type.pk == ticket_type_id:
                return line
        return None


def _creation_key(tier: Tier) -> tuple[datetime, int]:
    return tier.created_at, tier.display_order


def _window_key(tier: Tier) -> tuple[int, timedelta]:
    """Sort key ranking bounded windows by width, half-bounded ones last."""
    if tier.starts_at is not None and tier.ends_at is not None:
        return 0, tier.ends_at - tier.starts_at
    return 1, timedelta(0)


def _pick_among_overlapping(candidates: list[Tier], at: datetime, strict: bool) -> Tier:
    ids = [str(c.pk) for c in candidates]
    if strict:
        raise MisconfiguredTiers(f"{len(candidates)} tiers are active at {at.isoformat()}.")
    # Most recent first so that min() keeps the newest tier among equal widths.
    newest_first = sorted(candidates, key=_creation_key, reverse=True)
    chosen = min(newest_first, key=_window_key)
    logger.warning("overlapping_tiers_resolved", at=at.isoformat(), tier_ids=ids, chosen_tier_id=str(chosen.pk))
    return chosen


def resolve_active_tier(tiers: t.Iterable[Tier], at: datetime, *, strict: bool = False) -> Tier | None:
    """Select the single tier in effect at ``at``.

    Paused tiers (``is_active=False``) are never selected. Among the rest, dated
    tiers whose half-open window contains ``at`` are candidates. Several
    candidates are a misconfiguration: the narrowest window wins, then the most
    recently created. With no candidate, the first undated tier is used, else the
    first tier in creation order.
    """
    ordered = sorted((tier for tier in tiers if tier.is_active), key=_creation_key)
    if not ordered:
        return None

    candidates = [tier for tier in ordered if tier.is_dated and tier.contains(at)]
    if len(candidates) == 1:
        return candidates[0]
    if candidates:
        return _pick_among_overlapping(candidates, at, strict)

    for tier in ordered:
        if not tier.is_dated:
            return tier
    return ordered[0]


def allocation_for(tier: Tier | None, ticket_type_id: UUID) -> TierAllocation | None:
    if tier is None:
        return None
    for allocation in tier.allocations.all():
        if allocation.ticket_type_id == ticket_type_id:
            return allocation
    return None


def price_for(tiers: t.Iterable[Tier], ticket_type_id: UUID, at: datetime) -> Decimal:
    """Price of a ticket type under the active tier.

    Zero when the active tier carries no allocation for the type. The type is
    then not for sale under that tier; callers check availability too.
    """
    allocation = allocation_for(resolve_active_tier(tiers, at), ticket_type_id)
    return allocation.price if allocation else ZERO


def available_for(tiers: t.Iterable[Tier], ticket_type_id: UUID, at: datetime) -> int:
    """Remaining units of a ticket type under the active tier, from the ledger counter."""
    allocation = allocation_for(resolve_active_tier(tiers, at), ticket_type_id)
    return allocation.available if allocation else 0


def snapshot(event: Event, at: datetime) -> PricingSnapshot:
    """Prices and availability for every ticket type of an event at ``at``."""
    tier = resolve_active_tier(event.tiers.all(), at)
    lines = []
    for ticket_type in event.ticket_types.all():
        allocation = allocation_for(tier, ticket_type.pk)
        lines.append(
            PricingLine(
                ticket_type=ticket_type,
                allocation=allocation,
                price=allocation.price if allocation else ZERO,
                available=allocation.available if allocation else 0,
            )
        )
    return PricingSnapshot(event=event, at=at, tier=tier, lines=lines)


def _overlap(a: Tier, b: Tier) -> bool:
    a_before_b_ends = b.ends_at is None or a.starts_at is None or a.starts_at < b.ends_at
    b_before_a_ends = a.ends_at is None or b.starts_at is None or b.starts_at < a.ends_at
    return a_before_b_ends and b_before_a_ends


def find_overlaps(tiers: t.Iterable[Tier]) -> list[tuple[Tier, Tier]]:
    """Pairs of dated tiers whose windows intersect."""
    dated = [tier for tier in tiers if tier.is_dated]
    return [(a, b) for a, b in combinations(dated, 2) if _overlap(a, b)]
