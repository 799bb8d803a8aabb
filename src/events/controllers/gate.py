from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.throttling import ScanThrottle
from events import models, schema
from events.service import validation


@api_controller("/gate", auth=JWTAuth(), tags=["Gate"])
class GateController(UserAwareController):
    """Ticket validation at the door."""

    @route.post("/scan", url_name="scan_ticket", response=schema.ScanResultSchema, throttle=ScanThrottle())
    def scan(self, payload: schema.ScanRequestSchema) -> schema.ScanResultSchema:
        """Validate a scanned ticket QR and mark it used.

        Always answers 200: `valid` says whether to let the holder in and `reason`
        says why not (INVALID_SIGNATURE, NOT_FOUND, NOT_AUTHORIZED, ALREADY_USED,
        EXPIRED, TRANSFERRED, PENDING_PAYMENT). Scanning the same QR twice admits
        once.
        """
        result = validation.validate(payload.qr_payload, self.user(), payload.device, timezone.now())
        ticket = result.ticket
        return schema.ScanResultSchema(
            valid=result.valid,
            reason=result.reason,
            ticket_id=ticket.pk if ticket else None,
            ticket_type=ticket.ticket_type.name if ticket else None,
            holder=ticket.owner.display_name if ticket else None,
        )

    @route.get("/scans", url_name="scan_history", response=PaginatedResponseSchema[schema.ScanLogSchema])
    @paginate(PageNumberPaginationExtra, page_size=50)
    def scan_history(self, event_id: UUID | None = None) -> QuerySet[models.ScanLog]:
        """Your scans, newest first, optionally for one event."""
        event = models.Event.objects.filter(pk=event_id).first() if event_id else None
        if event_id and event is None:
            return models.ScanLog.objects.none()
        return validation.scan_history(self.user(), event)
