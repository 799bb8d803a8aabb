import typing as t
from datetime import datetime

import structlog
from django.db import transaction
from django.db.models import F, Q

from events.exceptions import InvalidCode
from events.models import Event, Order, PromoCode

logger = structlog.get_logger(__name__)


def resolve_promo_code(event: Event, code: str, now: datetime) -> PromoCode:
    """Find a promo code usable on ``event`` at ``now``.

    Orders still awaiting payment count against ``max_uses``. The row is locked, so
    call this inside the transaction that places the order.

    Raises:
        InvalidCode: if the code is unknown, inactive, out of its window or used up.
    """
    promo = (
        PromoCode.objects.select_for_update()
        .filter(event=event, code=code.strip().upper(), is_active=True)
        .first()
    )
    if promo is None:
        raise InvalidCode("Unknown promo code.")
    if promo.valid_from and now < promo.valid_from:
        raise InvalidCode("This promo code is not valid yet.")
    if promo.valid_until and now >= promo.valid_until:
        raise InvalidCode("This promo code has expired.")
    if promo.max_uses and promo.used_count + pending_uses(promo) >= promo.max_uses:
        raise InvalidCode("This promo code has been used up.")
    return promo


def pending_uses(promo: PromoCode) -> int:
    return promo.orders.filter(status=Order.Status.PENDING).count()


def record_use(promo: PromoCode) -> None:
    """Count one completed order against the code."""
    PromoCode.objects.filter(pk=promo.pk).update(used_count=F("used_count") + 1)


def create_promo_code(event: Event, **fields: t.Any) -> PromoCode:
    promo = PromoCode(event=event, **fields)
    promo.save()
    logger.info("promo_code_created", event_id=str(event.pk), code=promo.code)
    return promo


@transaction.atomic
def update_promo_code(promo: PromoCode, **fields: t.Any) -> PromoCode:
    for key, value in fields.items():
        setattr(promo, key, value)
    promo.save()
    return promo


def delete_promo_code(promo: PromoCode) -> bool:
    """Delete an unused code; a code that has been used is only deactivated.

    Returns True when the row was deleted.
    """
    if promo.used_count or promo.orders.exists():
        promo.is_active = False
        promo.save(update_fields=["is_active", "updated_at"])
        return False
    promo.delete()
    return True


def usable_codes(event: Event, now: datetime) -> t.Any:
    return PromoCode.objects.filter(event=event, is_active=True).filter(
        Q(valid_from__isnull=True) | Q(valid_from__lte=now),
        Q(valid_until__isnull=True) | Q(valid_until__gt=now),
    )
