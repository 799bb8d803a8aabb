from uuid import UUID

from django.db.models import QuerySet
from django.http import HttpResponse
from django.utils import timezone
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import WriteThrottle
from events import filters, models, schema
from events.exceptions import InvalidState
from events.service import lifecycle, transfer
from events.service.transfer import TransferHistory
from events.utils import get_ticket_qr_png


@api_controller("/tickets", auth=JWTAuth(), tags=["Tickets"])
class TicketController(UserAwareController):
    """The caller's tickets. Lapsed tickets are expired as they are read."""

    def get_queryset(self) -> QuerySet[models.Ticket]:
        return models.Ticket.objects.owned_by(self.user()).full()

    def get_one(self, ticket_id: UUID) -> models.Ticket:
        ticket: models.Ticket = self.get_object_or_exception(self.get_queryset(), pk=ticket_id)
        return lifecycle.refresh(ticket, timezone.now())

    def get_for_transfer(self, ticket_id: UUID) -> models.Ticket:
        """Any ticket by id. Ownership is checked by the transfer itself, so a stranger gets 403."""
        ticket: models.Ticket = self.get_object_or_exception(models.Ticket.objects.full(), pk=ticket_id)
        return ticket

    @route.get("/", url_name="my_tickets", response=PaginatedResponseSchema[schema.TicketSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_tickets(
        self,
        params: filters.TicketFilterSchema = Query(...),  # type: ignore[type-arg]
        status: models.Ticket.Status | None = None,
    ) -> list[models.Ticket]:
        """Tickets you hold, including used and expired ones. Filter by event or status."""
        now = timezone.now()
        tickets = [lifecycle.refresh(ticket, now) for ticket in params.filter(self.get_queryset())]
        if status:
            tickets = [ticket for ticket in tickets if ticket.status == status]
        return tickets

    @route.get("/transfers", url_name="transfer_history", response=schema.TransferHistorySchema)
    def transfer_history(self) -> TransferHistory:
        """Tickets you gave away and tickets you received."""
        return transfer.transfer_history(self.user())

    @route.get("/{uuid:ticket_id}", url_name="get_ticket", response=schema.TicketDetailSchema)
    def get_ticket(self, ticket_id: UUID) -> models.Ticket:
        """A ticket you hold. `qr_payload` is only present while the ticket is active."""
        return self.get_one(ticket_id)

    @route.get("/{uuid:ticket_id}/qr", url_name="ticket_qr", response={200: None, 409: ErrorResponse})
    def get_ticket_qr(self, ticket_id: UUID) -> HttpResponse:
        """The ticket's QR code as a PNG, for active tickets only."""
        ticket = self.get_one(ticket_id)
        if ticket.status != models.Ticket.Status.ACTIVE:
            raise InvalidState(f"Only active tickets have a usable QR code; this one is {ticket.status}.")
        png = get_ticket_qr_png(ticket, lifecycle.qr_payload(ticket))
        return HttpResponse(png, content_type="image/png")

    @route.post(
        "/{uuid:ticket_id}/transfer/email",
        url_name="transfer_by_email",
        response={200: schema.TicketSchema, 403: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def transfer_by_email(self, ticket_id: UUID, payload: schema.TransferByEmailSchema) -> models.Ticket:
        """Hand an active ticket to another registered user by email.

        The transfer is immediate. Your QR stops working and the recipient gets a new one.
        """
        ticket = self.get_for_transfer(ticket_id)
        return transfer.transfer_by_email(ticket, self.user(), payload.email, timezone.now())

    @route.post(
        "/{uuid:ticket_id}/transfer/personal-code",
        url_name="transfer_by_personal_code",
        response={200: schema.TicketSchema, 400: ErrorResponse, 403: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def transfer_by_personal_code(
        self, ticket_id: UUID, payload: schema.TransferByPersonalCodeSchema
    ) -> models.Ticket:
        """Hand an active ticket to the user whose personal QR you scanned."""
        ticket = self.get_for_transfer(ticket_id)
        return transfer.transfer_by_personal_qr(ticket, self.user(), payload.personal_qr_code, timezone.now())
