"""Tests for the ticket wallet, QR images and transfers."""

from datetime import datetime, timedelta

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import User
from conftest import UserFactory
from events.models import Ticket, TicketTransfer
from events.tests.conftest import TicketFactory

pytestmark = pytest.mark.django_db


def post_json(client: Client, url: str, payload: dict[str, str]):  # type: ignore[no-untyped-def]
    return client.post(url, data=orjson.dumps(payload), content_type="application/json")


class TestWallet:
    def test_lists_only_my_tickets(
        self, user_client: Client, ticket: Ticket, make_ticket: TicketFactory, other_user: User
    ) -> None:
        make_ticket(owner=other_user)

        data = user_client.get(reverse("api:my_tickets")).json()

        assert data["count"] == 1
        assert data["results"][0]["id"] == str(ticket.pk)
        assert data["results"][0]["tier_name"] == "Preventa"

    def test_lapsed_tickets_are_expired_on_read(
        self, user_client: Client, make_ticket: TicketFactory, day0: datetime
    ) -> None:
        lapsed = make_ticket(purchased_at=day0 - timedelta(days=200))

        data = user_client.get(reverse("api:my_tickets"), {"status": "expired"}).json()

        assert [item["id"] for item in data["results"]] == [str(lapsed.pk)]
        lapsed.refresh_from_db()
        assert lapsed.status == Ticket.Status.EXPIRED

    def test_detail_carries_the_qr_payload(self, user_client: Client, ticket: Ticket) -> None:
        data = user_client.get(reverse("api:get_ticket", kwargs={"ticket_id": ticket.pk})).json()

        assert data["qr_payload"] == ticket.signed_payload
        assert data["status"] == "active"

    def test_pending_ticket_has_no_qr(self, user_client: Client, make_ticket: TicketFactory) -> None:
        pending = make_ticket(status=Ticket.Status.PENDING_PAYMENT)

        detail = user_client.get(reverse("api:get_ticket", kwargs={"ticket_id": pending.pk})).json()
        image = user_client.get(reverse("api:ticket_qr", kwargs={"ticket_id": pending.pk}))

        assert detail["qr_payload"] is None
        assert image.status_code == 409
        assert image.json()["reason"] == "INVALID_STATE"

    def test_qr_png(self, user_client: Client, ticket: Ticket) -> None:
        response = user_client.get(reverse("api:ticket_qr", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 200
        assert response["Content-Type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_other_users_tickets_are_hidden(self, other_client: Client, ticket: Ticket) -> None:
        response = other_client.get(reverse("api:get_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 404


class TestTransfers:
    def test_transfer_by_email(self, user_client: Client, ticket: Ticket, other_user: User) -> None:
        url = reverse("api:transfer_by_email", kwargs={"ticket_id": ticket.pk})

        response = post_json(user_client, url, {"email": other_user.email})

        assert response.status_code == 200, response.content
        new_ticket = Ticket.objects.get(pk=response.json()["id"])
        assert new_ticket.owner == other_user
        ticket.refresh_from_db()
        assert ticket.status == Ticket.Status.TRANSFERRED_OUT
        assert user_client.get(reverse("api:my_tickets")).json()["count"] == 0

    def test_only_the_holder_can_transfer(
        self, other_client: Client, ticket: Ticket, other_user: User, user_factory: UserFactory
    ) -> None:
        bystander = user_factory()
        email_url = reverse("api:transfer_by_email", kwargs={"ticket_id": ticket.pk})
        code_url = reverse("api:transfer_by_personal_code", kwargs={"ticket_id": ticket.pk})

        by_email = post_json(other_client, email_url, {"email": bystander.email})
        by_code = post_json(other_client, code_url, {"personal_qr_code": other_user.personal_qr_code})

        assert by_email.status_code == 403
        assert by_email.json()["reason"] == "NOT_OWNER"
        assert by_code.json()["reason"] == "NOT_OWNER"
        ticket.refresh_from_db()
        assert ticket.status == Ticket.Status.ACTIVE
        assert not TicketTransfer.objects.exists()

    def test_transfer_to_unregistered_email(self, user_client: Client, ticket: Ticket) -> None:
        url = reverse("api:transfer_by_email", kwargs={"ticket_id": ticket.pk})

        response = post_json(user_client, url, {"email": "nadie@example.com"})

        assert response.status_code == 404
        assert response.json()["reason"] == "NOT_REGISTERED"

    def test_transfer_by_personal_code(self, user_client: Client, ticket: Ticket, other_user: User) -> None:
        url = reverse("api:transfer_by_personal_code", kwargs={"ticket_id": ticket.pk})

        response = post_json(user_client, url, {"personal_qr_code": other_user.personal_qr_code})

        assert response.status_code == 200
        assert TicketTransfer.objects.get().method == TicketTransfer.Method.PERSONAL_QR

    def test_unknown_personal_code(self, user_client: Client, ticket: Ticket) -> None:
        url = reverse("api:transfer_by_personal_code", kwargs={"ticket_id": ticket.pk})

        response = post_json(user_client, url, {"personal_qr_code": "not-a-real-code"})

        assert response.status_code == 400
        assert response.json()["reason"] == "INVALID_CODE"

    def test_used_ticket_cannot_be_transferred(
        self, user_client: Client, make_ticket: TicketFactory, other_user: User
    ) -> None:
        used = make_ticket(status=Ticket.Status.USED)
        url = reverse("api:transfer_by_email", kwargs={"ticket_id": used.pk})

        response = post_json(user_client, url, {"email": other_user.email})

        assert response.status_code == 409

    def test_transfer_history(self, user_client: Client, ticket: Ticket, other_user: User) -> None:
        url = reverse("api:transfer_by_email", kwargs={"ticket_id": ticket.pk})
        post_json(user_client, url, {"email": other_user.email})

        data = user_client.get(reverse("api:transfer_history")).json()

        assert len(data["sent"]) == 1
        assert data["received"] == []
        assert data["sent"][0]["to_user"]["email"] == other_user.email
        assert data["sent"][0]["event_title"] == "Noche de Tango"
