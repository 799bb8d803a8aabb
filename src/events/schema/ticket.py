"""Ticket, transfer and gate schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr, Field

from accounts.schema import MinimalUserSchema
from events.models import ScanLog, ScanReason, Ticket, TicketTransfer

from .event import EventInListSchema


class TicketSchema(ModelSchema):
    id: UUID
    status: Ticket.Status
    event: EventInListSchema
    ticket_type_name: str = Field(..., alias="ticket_type.name")
    tier_name: str = Field(..., alias="tier.name")
    price_paid: Decimal

    class Meta:
        model = Ticket
        fields = ["purchased_at", "expires_at", "payment_due_at", "scanned_at"]


class TicketDetailSchema(TicketSchema):
    qr_payload: str | None = None

    @staticmethod
    def resolve_qr_payload(obj: Ticket) -> str | None:
        return obj.signed_payload if obj.status == Ticket.Status.ACTIVE else None


class TransferByEmailSchema(Schema):
    email: EmailStr


class TransferByPersonalCodeSchema(Schema):
    personal_qr_code: str = Field(..., min_length=8, max_length=64)


class TicketTransferSchema(ModelSchema):
    id: UUID
    method: TicketTransfer.Method
    from_user: MinimalUserSchema
    to_user: MinimalUserSchema
    source_ticket_id: UUID
    resulting_ticket_id: UUID
    event_title: str = Field(..., alias="resulting_ticket.event.title")

    class Meta:
        model = TicketTransfer
        fields = ["created_at"]


class TransferHistorySchema(Schema):
    sent: list[TicketTransferSchema]
    received: list[TicketTransferSchema]


class ScanRequestSchema(Schema):
    qr_payload: str = Field(..., min_length=1, max_length=200)
    device: str = Field("", max_length=120)


class ScanResultSchema(Schema):
    valid: bool
    reason: ScanReason | None = None
    ticket_id: UUID | None = None
    ticket_type: str | None = None
    holder: str | None = None


class ScanLogSchema(ModelSchema):
    id: UUID
    ticket_id: UUID | None = None
    event_id: UUID | None = None
    reason: str

    class Meta:
        model = ScanLog
        fields = ["payload_fingerprint", "device", "valid", "created_at"]
