"""At-the-door QR validation.

A scan verifies the signed payload before touching any state, then marks the
ticket used through an optimistic transition. Of two gates scanning the same
ticket at once exactly one succeeds; the other reads ``ALREADY_USED``.
Rejections never change the ticket. Every attempt is logged.
"""

from dataclasses import dataclass
from datetime import datetime

import structlog
from django.db.models import QuerySet

from accounts.models import User
from common.signing import BadPayload, payload_fingerprint, unsign_ticket_payload
from events.models import Event, ScanLog, ScanReason, Ticket
from events.service import lifecycle

logger = structlog.get_logger(__name__)

REASON_BY_STATUS = {
    Ticket.Status.USED: ScanReason.ALREADY_USED,
    Ticket.Status.EXPIRED: ScanReason.EXPIRED,
    Ticket.Status.TRANSFERRED_OUT: ScanReason.TRANSFERRED,
    Ticket.Status.PENDING_PAYMENT: ScanReason.PENDING_PAYMENT,
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: str | None = None
    ticket: Ticket | None = None


def _log(
    payload: str, validator: User, device: str, result: ValidationResult, event: Event | None = None
) -> ValidationResult:
    ScanLog.objects.create(
        payload_fingerprint=payload_fingerprint(payload),
        ticket=result.ticket,
        event=event or (result.ticket.event if result.ticket else None),
        validator=validator,
        device=device[:120],
        valid=result.valid,
        reason=result.reason or "",
    )
    logger.info(
        "ticket_scanned",
        valid=result.valid,
        reason=result.reason,
        ticket_id=str(result.ticket.pk) if result.ticket else None,
        validator_id=str(validator.pk),
        device=device,
    )
    return result


def validate(qr_payload: str, validator: User, device: str, now: datetime) -> ValidationResult:
    """Scan a ticket QR at the door."""
    try:
        ticket_id = unsign_ticket_payload(qr_payload)
    except BadPayload:
        return _log(qr_payload, validator, device, ValidationResult(False, ScanReason.INVALID_SIGNATURE))

    ticket = Ticket.objects.full().filter(pk=ticket_id).first()
    if ticket is None:
        return _log(qr_payload, validator, device, ValidationResult(False, ScanReason.NOT_FOUND))

    if not ticket.event.can_be_scanned_by(validator):
        # Do not leak ticket details to someone who may not scan this event.
        result = ValidationResult(False, ScanReason.NOT_AUTHORIZED)
        return _log(qr_payload, validator, device, result, event=ticket.event)

    ticket = lifecycle.refresh(ticket, now)
    if ticket.status != Ticket.Status.ACTIVE:
        return _log(qr_payload, validator, device, ValidationResult(False, REASON_BY_STATUS[ticket.status], ticket))

    try:
        ticket = lifecycle.mark_used(ticket, validator=validator, device=device, now=now)
    except lifecycle.StaleTicket as e:
        reason = REASON_BY_STATUS.get(e.current_status, ScanReason.ALREADY_USED)
        return _log(qr_payload, validator, device, ValidationResult(False, reason, ticket))

    return _log(qr_payload, validator, device, ValidationResult(True, None, ticket))


def scan_history(validator: User, event: Event | None = None) -> QuerySet[ScanLog]:
    """Scans performed by a gatekeeper, newest first."""
    qs = ScanLog.objects.filter(validator=validator).select_related("ticket__owner", "ticket__ticket_type", "event")
    if event is not None:
        qs = qs.filter(event=event)
    return qs
