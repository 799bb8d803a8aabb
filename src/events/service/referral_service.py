"""Vendor referral codes: creation, click tracking and attribution."""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from django.db.models import Count, F, OuterRef, Q, QuerySet, Subquery, Sum
from django.db.models.functions import Coalesce

from accounts.models import User
from events.exceptions import InvalidCode, InvalidState
from events.models import Event, Order, Referral, Ticket

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReferralStats:
    referral: Referral
    clicks: int
    conversions: int
    tickets_sold: int
    revenue: Decimal
    earnings: Decimal


def create_referral(vendor: User, event: Event, code: str) -> Referral:
    if not vendor.is_vendor:
        raise InvalidState("Only vendors can create referral codes.")
    if Referral.objects.filter(code__iexact=code.strip()).exists():
        raise InvalidCode("That code is already taken.")
    referral = Referral(vendor=vendor, event=event, code=code)
    referral.save()
    logger.info("referral_created", referral_id=str(referral.pk), vendor_id=str(vendor.pk), event_id=str(event.pk))
    return referral


def rename_referral(referral: Referral, new_code: str) -> Referral:
    """Change the code. Orders keep their attribution; old links stop counting."""
    if Referral.objects.filter(code__iexact=new_code.strip()).exclude(pk=referral.pk).exists():
        raise InvalidCode("That code is already taken.")
    referral.code = new_code
    referral.save()
    return referral


def track_click(code: str) -> Referral | None:
    referral = Referral.objects.filter(code=code.strip().lower()).select_related("event").first()
    if referral is None:
        return None
    Referral.objects.filter(pk=referral.pk).update(clicks=F("clicks") + 1)
    return referral


def find_for_order(event: Event, code: str | None) -> Referral | None:
    """Referral to attribute an order to. Unknown codes are ignored."""
    if not code:
        return None
    referral = Referral.objects.filter(event=event, code=code.strip().lower()).first()
    if referral is None:
        logger.info("unknown_referral_code_ignored", event_id=str(event.pk), code=code)
    return referral


def record_conversion(referral: Referral) -> None:
    Referral.objects.filter(pk=referral.pk).update(conversions=F("conversions") + 1)


def vendor_referrals(vendor: User) -> QuerySet[Referral]:
    tickets = (
        Ticket.objects.filter(
            order__referral=OuterRef("pk"),
            order__status=Order.Status.COMPLETED,
            transferred_from__isnull=True,
        )
        .order_by()
        .values("order__referral")
        .annotate(n=Count("pk"))
        .values("n")
    )
    return (
        Referral.objects.filter(vendor=vendor)
        .select_related("event")
        .annotate(
            revenue=Sum("orders__total_amount", filter=Q(orders__status=Order.Status.COMPLETED), default=Decimal("0")),
            tickets_sold=Coalesce(Subquery(tickets), 0),
        )
    )


def vendor_dashboard(vendor: User) -> list[ReferralStats]:
    """Clicks, conversions, revenue and commission per referral of a vendor."""
    rate = vendor.commission_percent / Decimal(100)
    stats = []
    for referral in vendor_referrals(vendor):
        revenue = referral.revenue or Decimal("0")
        stats.append(
            ReferralStats(
                referral=referral,
                clicks=referral.clicks,
                conversions=referral.conversions,
                tickets_sold=referral.tickets_sold,
                revenue=revenue,
                earnings=(revenue * rate).quantize(Decimal("0.01")),
            )
        )
    return stats
