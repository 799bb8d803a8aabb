import secrets
import typing as t

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

from .event import Event, Tier, TierAllocation, TicketType


def generate_order_code() -> str:
    return secrets.token_hex(4).upper()


class PaymentMethod(models.TextChoices):
    ONLINE = "online", "Online (card / wallet)"
    CASH = "cash", "Cash"
    TRANSFER = "transfer", "Bank transfer"


DEFERRED_PAYMENT_METHODS = frozenset({PaymentMethod.CASH, PaymentMethod.TRANSFER})


class Order(TimeStampedModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    code = models.CharField(max_length=16, unique=True, default=generate_order_code, editable=False)
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="orders")
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, db_index=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    promo_code = models.ForeignKey(
        "events.PromoCode", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    referral = models.ForeignKey(
        "events.Referral", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    payment_reference = models.CharField(max_length=255, blank=True, default="", db_index=True)
    checkout_url = models.URLField(max_length=1000, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Order {self.code}"

    @property
    def is_deferred(self) -> bool:
        """Cash and bank transfer orders are paid outside the platform."""
        return self.payment_method in DEFERRED_PAYMENT_METHODS


class OrderItem(TimeStampedModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    ticket_type = models.ForeignKey(TicketType, on_delete=models.PROTECT, related_name="order_items")
    tier = models.ForeignKey(Tier, on_delete=models.PROTECT, related_name="order_items")
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        ordering = ["created_at"]

    @property
    def line_total(self) -> t.Any:
        return self.unit_price * self.quantity


class Reservation(TimeStampedModel):
    """Units held against an allocation while an order awaits payment."""

    class Status(models.TextChoices):
        HELD = "held", "Held"
        COMMITTED = "committed", "Committed"
        RELEASED = "released", "Released"

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="reservations")
    allocation = models.ForeignKey(TierAllocation, on_delete=models.PROTECT, related_name="reservations")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.HELD, db_index=True)
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="ix_reservation_status_expiry"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.allocation} ({self.status})"
