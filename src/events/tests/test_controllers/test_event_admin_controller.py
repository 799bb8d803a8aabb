"""Tests for the organizer console."""

import typing as t
from datetime import datetime, timedelta
from decimal import Decimal

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import User
from conftest import client_for
from events.models import Event, Order, PaymentMethod, PromoCode, Ticket, TicketType, Tier, TierAllocation
from events.service import order_service
from events.service.order_service import OrderLine

pytestmark = pytest.mark.django_db


def send(client: Client, method: str, url: str, payload: t.Any = None) -> t.Any:
    data = orjson.dumps(payload) if payload is not None else b""
    return getattr(client, method)(url, data=data, content_type="application/json")


def admin_url(name: str, event: Event, **kwargs: t.Any) -> str:
    return reverse(f"api:{name}", kwargs={"event_id": event.pk, **kwargs})


class TestAccess:
    def test_customers_are_forbidden(self, user_client: Client, event: Event) -> None:
        assert user_client.get(reverse("api:list_my_events")).status_code == 403
        assert user_client.get(admin_url("get_admin_event", event)).status_code == 403

    def test_other_organizers_cannot_see_the_event(self, user_factory, event: Event) -> None:  # type: ignore[no-untyped-def]
        rival = client_for(user_factory(role=User.Role.ORGANIZER))

        assert rival.get(admin_url("get_admin_event", event)).status_code == 404
        assert rival.get(reverse("api:list_my_events")).json() == []

    def test_superuser_sees_every_event(self, superuser_client: Client, event: Event) -> None:
        assert superuser_client.get(admin_url("get_admin_event", event)).status_code == 200


class TestEvents:
    def test_create_and_list(self, organizer_client: Client, day0: datetime) -> None:
        response = send(
            organizer_client,
            "post",
            reverse("api:create_event"),
            {"title": "Recital", "starts_at": (day0 + timedelta(days=40)).isoformat(), "city": "Rosario"},
        )

        assert response.status_code == 201, response.content
        assert response.json()["private_access_token"]
        assert [e["title"] for e in organizer_client.get(reverse("api:list_my_events")).json()] == ["Recital"]

    def test_edit(self, organizer_client: Client, event: Event) -> None:
        response = send(organizer_client, "put", admin_url("edit_event", event), {"title": "Milonga", "is_active": False})

        assert response.status_code == 200
        event.refresh_from_db()
        assert event.title == "Milonga"
        assert event.is_active is False
        assert event.venue == "Club Atletico"

    def test_duplicate(self, organizer_client: Client, priced_event: Event) -> None:
        new_start = priced_event.starts_at + timedelta(days=14)

        response = send(
            organizer_client,
            "post",
            admin_url("duplicate_event", priced_event),
            {"title": "Noche de Tango II", "starts_at": new_start.isoformat()},
        )

        assert response.status_code == 200
        copy = Event.objects.get(pk=response.json()["id"])
        assert copy.is_active is False
        assert copy.tiers.count() == 2

    def test_stats_and_reconcile(
        self, organizer_client: Client, priced_event: Event, user: User, general: TicketType
    ) -> None:
        order = order_service.place_order(
            event=priced_event, buyer=user, items=[OrderLine(general.pk, 2)], payment_method=PaymentMethod.CASH
        )
        order_service.confirm_payment(order)

        stats = organizer_client.get(admin_url("event_stats", priced_event)).json()
        drift = send(organizer_client, "post", admin_url("reconcile_inventory", priced_event))

        assert stats["tickets_sold"] == 2
        assert Decimal(stats["revenue"]) == Decimal("200.00")
        assert stats["allocations"][0]["sold"] == 2
        assert drift.status_code == 200
        assert drift.json() == []


class TestGatekeepers:
    def test_list_add_remove(self, organizer_client: Client, event: Event, gatekeeper: User, other_user: User) -> None:
        added = send(organizer_client, "post", admin_url("add_gatekeeper", event), {"email": other_user.email})
        listed = organizer_client.get(admin_url("list_gatekeepers", event)).json()
        removed = organizer_client.delete(admin_url("remove_gatekeeper", event, user_id=gatekeeper.pk))

        assert added.status_code == 200
        assert {g["email"] for g in listed} == {gatekeeper.email, other_user.email}
        assert removed.status_code == 204
        assert list(event.gatekeepers.all()) == [other_user]

    def test_add_unknown_email(self, organizer_client: Client, event: Event) -> None:
        response = send(organizer_client, "post", admin_url("add_gatekeeper", event), {"email": "nadie@example.com"})

        assert response.status_code == 404


class TestPricingPlan:
    def plan(self, day0: datetime) -> dict[str, t.Any]:
        return {
            "ticket_types": [{"name": "Campo", "total_quantity": 10}],
            "tiers": [
                {
                    "name": "Unica",
                    "starts_at": day0.isoformat(),
                    "allocations": [{"ticket_type": "Campo", "price": "50.00", "quantity": 10}],
                }
            ],
        }

    def test_get_plan(self, organizer_client: Client, priced_event: Event) -> None:
        data = organizer_client.get(admin_url("get_pricing_plan", priced_event)).json()

        assert [tt["name"] for tt in data["ticket_types"]] == ["General"]
        assert [tier["name"] for tier in data["tiers"]] == ["Preventa", "Tanda 1"]
        assert data["tiers"][0]["allocations"][0]["available"] == 50

    def test_replace_plan(self, organizer_client: Client, priced_event: Event, day0: datetime) -> None:
        response = send(organizer_client, "put", admin_url("replace_pricing_plan", priced_event), self.plan(day0))

        assert response.status_code == 200, response.content
        assert [tier["name"] for tier in response.json()["tiers"]] == ["Unica"]
        assert not TicketType.objects.filter(event=priced_event, name="General").exists()

    def test_replace_plan_that_does_not_add_up(
        self, organizer_client: Client, priced_event: Event, day0: datetime
    ) -> None:
        plan = self.plan(day0)
        plan["ticket_types"][0]["total_quantity"] = 12

        response = send(organizer_client, "put", admin_url("replace_pricing_plan", priced_event), plan)

        assert response.status_code == 400
        assert response.json()["reason"] == "MISCONFIGURED_TIERS"

    def test_replace_plan_after_sales(
        self, organizer_client: Client, priced_event: Event, user: User, day0: datetime
    ) -> None:
        Order.objects.create(buyer=user, event=priced_event, payment_method=PaymentMethod.CASH)

        response = send(organizer_client, "put", admin_url("replace_pricing_plan", priced_event), self.plan(day0))

        assert response.status_code == 409

    def test_add_and_edit_tier(self, organizer_client: Client, priced_event: Event, day0: datetime) -> None:
        added = send(
            organizer_client,
            "post",
            admin_url("add_tier", priced_event),
            {
                "name": "Puerta",
                "starts_at": (day0 + timedelta(days=20)).isoformat(),
                "allocations": [{"ticket_type": "General", "price": "180.00", "quantity": 10}],
            },
        )
        assert added.status_code == 200, added.content
        tier_id = added.json()["id"]

        edited = send(organizer_client, "patch", admin_url("edit_tier", priced_event, tier_id=tier_id), {"is_active": False})

        assert edited.status_code == 200
        assert Tier.objects.get(pk=tier_id).is_active is False
        assert TicketType.objects.get(event=priced_event).total_quantity == 90

    def test_edit_allocation(
        self, organizer_client: Client, priced_event: Event, allocation_b: TierAllocation
    ) -> None:
        url = admin_url("edit_allocation", priced_event, allocation_id=allocation_b.pk)

        response = send(organizer_client, "patch", url, {"price": "175.00"})

        assert response.status_code == 200
        allocation_b.refresh_from_db()
        assert allocation_b.price == Decimal("175.00")


class TestOrders:
    @pytest.fixture
    def cash_order(self, priced_event: Event, user: User, general: TicketType) -> Order:
        return order_service.place_order(
            event=priced_event, buyer=user, items=[OrderLine(general.pk, 2)], payment_method=PaymentMethod.CASH
        )

    def test_list_orders(self, organizer_client: Client, priced_event: Event, cash_order: Order) -> None:
        data = organizer_client.get(admin_url("list_event_orders", priced_event), {"status": "pending"}).json()

        assert data["count"] == 1
        assert data["results"][0]["code"] == cash_order.code
        assert data["results"][0]["buyer_id"] == str(cash_order.buyer_id)

    def test_confirm_cash_payment(self, organizer_client: Client, priced_event: Event, cash_order: Order) -> None:
        url = admin_url("confirm_order_payment", priced_event, order_id=cash_order.pk)

        response = send(organizer_client, "post", url, {"payment_reference": "recibo-42"})

        assert response.status_code == 200, response.content
        assert response.json()["status"] == "completed"
        assert response.json()["payment_reference"] == "recibo-42"
        assert set(cash_order.tickets.values_list("status", flat=True)) == {Ticket.Status.ACTIVE}

    def test_online_orders_are_not_confirmed_by_hand(
        self, organizer_client: Client, priced_event: Event, user: User
    ) -> None:
        order = Order.objects.create(buyer=user, event=priced_event, payment_method=PaymentMethod.ONLINE)
        url = admin_url("confirm_order_payment", priced_event, order_id=order.pk)

        assert send(organizer_client, "post", url, {}).status_code == 409

    def test_order_of_another_event_is_not_found(
        self, organizer_client: Client, priced_event: Event, user: User
    ) -> None:
        sibling = Event.objects.create(
            organizer=priced_event.organizer,
            title="Otra Noche",
            starts_at=priced_event.starts_at,
            venue="Club Atletico",
            city="Buenos Aires",
        )
        order = Order.objects.create(buyer=user, event=sibling, payment_method=PaymentMethod.CASH)
        confirm_url = admin_url("confirm_order_payment", priced_event, order_id=order.pk)
        fail_url = admin_url("fail_order_payment", priced_event, order_id=order.pk)

        assert send(organizer_client, "post", confirm_url, {}).status_code == 404
        assert send(organizer_client, "post", fail_url).status_code == 404

    def test_fail_payment(self, organizer_client: Client, priced_event: Event, cash_order: Order) -> None:
        response = send(organizer_client, "post", admin_url("fail_order_payment", priced_event, order_id=cash_order.pk))

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert set(cash_order.tickets.values_list("status", flat=True)) == {Ticket.Status.EXPIRED}


class TestPromoCodes:
    def test_crud(self, organizer_client: Client, event: Event) -> None:
        created = send(
            organizer_client, "post", admin_url("create_promo_code", event), {"code": "amigos", "value": "15"}
        )
        assert created.status_code == 201, created.content
        promo_id = created.json()["id"]
        assert created.json()["code"] == "AMIGOS"

        edited = send(
            organizer_client, "patch", admin_url("edit_promo_code", event, promo_id=promo_id), {"max_uses": 5}
        )
        listed = organizer_client.get(admin_url("list_promo_codes", event)).json()
        deleted = organizer_client.delete(admin_url("delete_promo_code", event, promo_id=promo_id))

        assert edited.json()["max_uses"] == 5
        assert [p["code"] for p in listed] == ["AMIGOS"]
        assert deleted.status_code == 204
        assert not PromoCode.objects.exists()

    def test_percent_over_100_is_rejected(self, organizer_client: Client, event: Event) -> None:
        response = send(
            organizer_client, "post", admin_url("create_promo_code", event), {"code": "GRATIS", "value": "150"}
        )

        assert response.status_code == 400
