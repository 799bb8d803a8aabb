"""Tests for the inventory ledger."""

import threading
from datetime import datetime, timedelta

import pytest
from django.db import connections

from accounts.models import User
from events.exceptions import ExpiredWindow, InvalidState, OutOfStock
from events.models import Event, Order, PaymentMethod, Reservation, Ticket, TierAllocation
from events.service import inventory

pytestmark = pytest.mark.django_db


@pytest.fixture
def order(priced_event: Event, user: User) -> Order:
    return Order.objects.create(buyer=user, event=priced_event, payment_method=PaymentMethod.ONLINE)


def sold(allocation: TierAllocation) -> int:
    allocation.refresh_from_db()
    return allocation.quantity_sold


class TestReserve:
    def test_reserve_increments_the_counter(
        self, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        reservation = inventory.reserve(allocation_a, order, 3, day0 + timedelta(minutes=35))

        assert reservation.status == Reservation.Status.HELD
        assert reservation.quantity == 3
        assert sold(allocation_a) == 3

    def test_reserve_the_last_units(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        TierAllocation.objects.filter(pk=allocation_a.pk).update(quantity_sold=48)

        inventory.reserve(allocation_a, order, 2, day0)

        assert sold(allocation_a) == 50

    def test_reserve_more_than_available_fails_without_side_effects(
        self, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        TierAllocation.objects.filter(pk=allocation_a.pk).update(quantity_sold=49)

        with pytest.raises(OutOfStock):
            inventory.reserve(allocation_a, order, 2, day0)

        assert sold(allocation_a) == 49
        assert not Reservation.objects.exists()

    def test_reserve_rejects_non_positive_quantities(
        self, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        with pytest.raises(ValueError):
            inventory.reserve(allocation_a, order, 0, day0)

    def test_sequential_reservations_never_oversell(
        self, allocation_b: TierAllocation, order: Order, day0: datetime
    ) -> None:
        successes = 0
        for _ in range(40):
            try:
                inventory.reserve(allocation_b, order, 1, day0)
                successes += 1
            except OutOfStock:
                pass

        assert successes == 30
        assert sold(allocation_b) == 30


class TestCommitAndRelease:
    def test_commit_a_live_hold(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        reservation = inventory.reserve(allocation_a, order, 2, day0 + timedelta(minutes=35))

        inventory.commit(reservation, day0)

        assert reservation.status == Reservation.Status.COMMITTED
        assert sold(allocation_a) == 2

    def test_commit_a_lapsed_hold(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        reservation = inventory.reserve(allocation_a, order, 2, day0 + timedelta(minutes=35))

        with pytest.raises(ExpiredWindow):
            inventory.commit(reservation, day0 + timedelta(minutes=35))

    def test_commit_twice(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        reservation = inventory.reserve(allocation_a, order, 2, day0 + timedelta(minutes=35))
        inventory.commit(reservation, day0)

        with pytest.raises(InvalidState):
            inventory.commit(reservation, day0)

    def test_release_returns_units_once(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        reservation = inventory.reserve(allocation_a, order, 4, day0)

        assert inventory.release(reservation) is True
        assert inventory.release(reservation) is False
        assert sold(allocation_a) == 0
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.RELEASED

    def test_committed_holds_are_not_released(
        self, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        reservation = inventory.reserve(allocation_a, order, 4, day0 + timedelta(minutes=35))
        inventory.commit(reservation, day0)

        assert inventory.release(reservation) is False
        assert sold(allocation_a) == 4

    def test_record_return_keeps_units_sold(self, allocation_a: TierAllocation, order: Order, day0: datetime) -> None:
        inventory.reserve(allocation_a, order, 1, day0)

        inventory.record_return(allocation_a.pk, 1)

        allocation_a.refresh_from_db()
        assert allocation_a.quantity_returned == 1
        assert allocation_a.quantity_sold == 1


class TestHoldExpiry:
    def test_online_hold(self, day0: datetime) -> None:
        assert inventory.hold_expiry(PaymentMethod.ONLINE, day0) == day0 + timedelta(minutes=35)

    @pytest.mark.parametrize("method", [PaymentMethod.CASH, PaymentMethod.TRANSFER])
    def test_deferred_hold(self, method: str, day0: datetime) -> None:
        assert inventory.hold_expiry(method, day0) == day0 + timedelta(days=7)


class TestSweepAndReconcile:
    def test_release_expired_reservations(
        self, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        inventory.reserve(allocation_a, order, 2, day0 + timedelta(minutes=35))

        assert inventory.release_expired_reservations(day0 + timedelta(minutes=10)) == 0
        assert inventory.release_expired_reservations(day0 + timedelta(minutes=35)) == 1

        order.refresh_from_db()
        assert order.status == Order.Status.FAILED
        assert sold(allocation_a) == 0

    def test_reconcile_reports_drift_without_rewriting(
        self, priced_event: Event, allocation_a: TierAllocation, order: Order, day0: datetime
    ) -> None:
        inventory.reserve(allocation_a, order, 2, day0)
        assert inventory.reconcile(priced_event) == []

        TierAllocation.objects.filter(pk=allocation_a.pk).update(quantity_sold=5)
        drifts = inventory.reconcile(priced_event)

        assert len(drifts) == 1
        assert drifts[0].allocation_id == str(allocation_a.pk)
        assert drifts[0].quantity_sold == 5
        assert drifts[0].expected_sold == 2
        assert sold(allocation_a) == 5


@pytest.mark.django_db(transaction=True)
def test_concurrent_reservations_never_oversell(
    allocation_b: TierAllocation, order: Order, day0: datetime
) -> None:
    results: list[bool] = []
    lock = threading.Lock()

    def buy() -> None:
        try:
            inventory.reserve(allocation_b, order, 1, day0)
            ok = True
        except OutOfStock:
            ok = False
        finally:
            connections.close_all()
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=buy) for _ in range(45)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 30
    assert sold(allocation_b) == 30
    assert Ticket.objects.count() == 0
