import typing as t

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel
from common.signing import sign_ticket_id

from .event import Event, Tier, TicketType
from .order import Order


class TicketQuerySet(models.QuerySet["Ticket"]):
    def full(self) -> t.Self:
        return self.select_related("event", "ticket_type", "tier", "owner")

    def owned_by(self, user: t.Any) -> t.Self:
        """Tickets the user currently holds; records transferred away are excluded."""
        return self.filter(owner=user).exclude(status=Ticket.Status.TRANSFERRED_OUT)


class Ticket(TimeStampedModel):
    """One admission. Never deleted; terminal records stay as history."""

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", "Pending payment"
        ACTIVE = "active", "Active"
        USED = "used", "Used"
        EXPIRED = "expired", "Expired"
        TRANSFERRED_OUT = "transferred_out", "Transferred out"

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="tickets")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    ticket_type = models.ForeignKey(TicketType, on_delete=models.PROTECT, related_name="tickets")
    tier = models.ForeignKey(Tier, on_delete=models.PROTECT, related_name="tickets")
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="tickets")
    price_paid = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=Status.choices, db_index=True)
    purchased_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)
    payment_due_at = models.DateTimeField(null=True, blank=True)
    scanned_at = models.DateTimeField(null=True, blank=True, editable=False)
    scanned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="scanned_tickets",
        editable=False,
    )
    scanned_device = models.CharField(max_length=120, blank=True, default="", editable=False)
    transferred_from = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transferred_to",
        editable=False,
    )
    version = models.PositiveIntegerField(default=0, editable=False)

    objects = TicketQuerySet.as_manager()

    TERMINAL_STATUSES: t.ClassVar[frozenset[str]] = frozenset({Status.USED, Status.EXPIRED, Status.TRANSFERRED_OUT})

    class Meta:
        ordering = ["-purchased_at"]
        indexes = [
            models.Index(fields=["owner", "status"], name="ix_ticket_owner_status"),
            models.Index(fields=["status", "expires_at"], name="ix_ticket_status_expiry"),
        ]

    def __str__(self) -> str:
        return f"Ticket {self.id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def has_qr(self) -> bool:
        return self.status != self.Status.PENDING_PAYMENT

    @property
    def signed_payload(self) -> str:
        """Signed token encoded in this record's QR, regardless of status."""
        return sign_ticket_id(self.id)


class TicketTransfer(TimeStampedModel):
    """Audit row for a change of ownership."""

    class Method(models.TextChoices):
        EMAIL = "email", "Email"
        PERSONAL_QR = "personal_qr", "Personal QR"

    source_ticket = models.OneToOneField(Ticket, on_delete=models.PROTECT, related_name="outgoing_transfer")
    resulting_ticket = models.OneToOneField(Ticket, on_delete=models.PROTECT, related_name="incoming_transfer")
    from_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="transfers_sent")
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="transfers_received"
    )
    method = models.CharField(max_length=20, choices=Method.choices)

    class Meta:
        ordering = ["-created_at"]


class ScanReason(models.TextChoices):
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    ALREADY_USED = "ALREADY_USED"
    EXPIRED = "EXPIRED"
    TRANSFERRED = "TRANSFERRED"
    PENDING_PAYMENT = "PENDING_PAYMENT"


class ScanLog(TimeStampedModel):
    """One row per gate attempt, successful or not."""

    payload_fingerprint = models.CharField(max_length=16, db_index=True)
    ticket = models.ForeignKey(Ticket, on_delete=models.SET_NULL, null=True, blank=True, related_name="scan_logs")
    event = models.ForeignKey(Event, on_delete=models.SET_NULL, null=True, blank=True, related_name="scan_logs")
    validator = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="scan_logs"
    )
    device = models.CharField(max_length=120, blank=True, default="")
    valid = models.BooleanField()
    reason = models.CharField(max_length=32, choices=ScanReason.choices, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
