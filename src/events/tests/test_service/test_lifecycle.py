"""Tests for ticket state transitions and lazy expiry."""

from datetime import datetime, timedelta

import pytest
from django.core.cache import cache
from django.test import override_settings

from events.exceptions import InvalidState
from events.models import Order, Reservation, Ticket, TierAllocation
from events.service import inventory, lifecycle
from events.tests.conftest import TicketFactory
from events.utils import ticket_qr_cache_key

pytestmark = pytest.mark.django_db

Status = Ticket.Status


class TestExpiry:
    def test_validity_runs_48_business_days(self, day0: datetime) -> None:
        # day0 is a Monday: 9 full weeks plus Tuesday, Wednesday and Thursday.
        assert lifecycle.compute_expiry(day0) == day0 + timedelta(days=66)

    @override_settings(TICKET_VALIDITY_BUSINESS_DAYS=1)
    def test_validity_setting(self, day0: datetime) -> None:
        friday = day0 + timedelta(days=4)
        assert lifecycle.compute_expiry(friday) == day0 + timedelta(days=7)

    def test_active_ticket_lapses_at_expiry(self, ticket: Ticket) -> None:
        assert not lifecycle.is_lapsed(ticket, ticket.expires_at - timedelta(seconds=1))
        assert lifecycle.is_lapsed(ticket, ticket.expires_at)

    def test_refresh_before_expiry_is_a_no_op(self, ticket: Ticket) -> None:
        refreshed = lifecycle.refresh(ticket, ticket.expires_at - timedelta(days=1))

        assert refreshed.status == Status.ACTIVE
        assert refreshed.version == 0

    def test_refresh_expires_and_records_a_return(self, ticket: Ticket, allocation_a: TierAllocation) -> None:
        refreshed = lifecycle.refresh(ticket, ticket.expires_at + timedelta(days=1))

        assert refreshed.status == Status.EXPIRED
        allocation_a.refresh_from_db()
        assert allocation_a.quantity_returned == 1

    def test_lapsed_pending_ticket_fails_its_order(
        self, make_ticket: TicketFactory, allocation_a: TierAllocation, day0: datetime
    ) -> None:
        ticket = make_ticket(status=Status.PENDING_PAYMENT, payment_due_at=day0 + timedelta(days=7))
        reservation = inventory.reserve(allocation_a, ticket.order, 1, day0 + timedelta(days=7))

        refreshed = lifecycle.refresh(ticket, day0 + timedelta(days=8))

        assert refreshed.status == Status.EXPIRED
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.RELEASED
        assert refreshed.order.status == Order.Status.FAILED
        allocation_a.refresh_from_db()
        assert allocation_a.quantity_sold == 0
        assert allocation_a.quantity_returned == 0

    def test_sweep_expires_unread_tickets(self, make_ticket: TicketFactory) -> None:
        stale = make_ticket()
        make_ticket(purchased_at=stale.purchased_at + timedelta(days=30))

        assert lifecycle.expire_stale_tickets(stale.expires_at) == 1
        stale.refresh_from_db()
        assert stale.status == Status.EXPIRED


class TestTransitions:
    @pytest.mark.parametrize(
        "from_status,to_status,allowed",
        [
            (Status.PENDING_PAYMENT, Status.ACTIVE, True),
            (Status.PENDING_PAYMENT, Status.EXPIRED, True),
            (Status.PENDING_PAYMENT, Status.USED, False),
            (Status.ACTIVE, Status.USED, True),
            (Status.ACTIVE, Status.TRANSFERRED_OUT, True),
            (Status.ACTIVE, Status.PENDING_PAYMENT, False),
            (Status.USED, Status.ACTIVE, False),
            (Status.EXPIRED, Status.ACTIVE, False),
            (Status.TRANSFERRED_OUT, Status.ACTIVE, False),
        ],
    )
    def test_allowed_transitions(self, from_status: str, to_status: str, allowed: bool) -> None:
        assert lifecycle.can_transition(from_status, to_status) is allowed

    def test_transition_bumps_the_version(self, ticket: Ticket) -> None:
        lifecycle.transition(ticket, Status.USED)

        assert ticket.status == Status.USED
        assert ticket.version == 1

    def test_terminal_states_reject_transitions(self, make_ticket: TicketFactory) -> None:
        used = make_ticket(status=Status.USED)

        with pytest.raises(InvalidState):
            lifecycle.transition(used, Status.EXPIRED)

    def test_stale_read_is_rejected(self, ticket: Ticket) -> None:
        stale = Ticket.objects.get(pk=ticket.pk)
        lifecycle.mark_transferred_out(ticket)

        with pytest.raises(lifecycle.StaleTicket) as exc_info:
            lifecycle.transition(stale, Status.USED)

        assert exc_info.value.current_status == Status.TRANSFERRED_OUT
        stale.refresh_from_db()
        assert stale.status == Status.TRANSFERRED_OUT

    def test_activate_only_from_pending(self, ticket: Ticket) -> None:
        with pytest.raises(InvalidState):
            lifecycle.activate(ticket)

    def test_leaving_active_evicts_the_cached_qr(self, ticket: Ticket) -> None:
        cache.set(ticket_qr_cache_key(ticket.pk), b"png")

        lifecycle.transition(ticket, Status.USED)

        assert cache.get(ticket_qr_cache_key(ticket.pk)) is None


class TestQrPayload:
    def test_pending_tickets_have_no_qr(self, make_ticket: TicketFactory) -> None:
        pending = make_ticket(status=Status.PENDING_PAYMENT)

        with pytest.raises(InvalidState):
            lifecycle.qr_payload(pending)

    def test_active_ticket_payload(self, ticket: Ticket) -> None:
        assert lifecycle.qr_payload(ticket) == ticket.signed_payload
