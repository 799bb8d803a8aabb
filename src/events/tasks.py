"""Celery tasks for the ticketing core.

Periodic sweeps, scheduled in ``CELERY_BEAT_SCHEDULE``:
- Releasing holds of orders whose payment window ran out
- Expiring tickets whose validity window ran out
- Checking allocation counters against reservations and tickets
"""

import structlog
from celery import shared_task
from django.utils import timezone

from events.models import Event
from events.service import inventory, lifecycle

logger = structlog.get_logger(__name__)


@shared_task(name="events.release_expired_reservations")
def release_expired_reservations() -> int:
    """Lapse pending orders past their hold, returning their units to the pool."""
    return inventory.release_expired_reservations(timezone.now())


@shared_task(name="events.expire_stale_tickets")
def expire_stale_tickets() -> int:
    """Expire tickets nobody read since their window closed."""
    return lifecycle.expire_stale_tickets(timezone.now())


@shared_task(name="events.reconcile_inventory")
def reconcile_inventory() -> dict[str, int]:
    """Report allocation counters that drifted from reservations and tickets."""
    drifted = {}
    for event in Event.objects.filter(is_active=True).iterator():
        drifts = inventory.reconcile(event)
        if drifts:
            drifted[str(event.pk)] = len(drifts)
    logger.info("inventory_reconciled", events_with_drift=len(drifted))
    return drifted
