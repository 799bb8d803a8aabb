import secrets
import typing as t
from datetime import datetime

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import User


def generate_private_access_token() -> str:
    return secrets.token_urlsafe(24)


class EventQuerySet(models.QuerySet["Event"]):
    def with_pricing(self) -> t.Self:
        """Prefetch ticket types, tiers and their allocations for pricing snapshots."""
        return self.prefetch_related("ticket_types", "tiers__allocations")

    def public(self) -> t.Self:
        """Active public events, the catalogue."""
        return self.filter(visibility=Event.Visibility.PUBLIC, is_active=True)

    def managed_by(self, user: "User") -> t.Self:
        """Events a user may administer."""
        if user.is_superuser:
            return self
        return self.filter(organizer=user)

    def for_user(self, user: "User | AnonymousUser", access_token: str | None = None) -> t.Self:
        """Events readable by a user.

        Public active events for everyone; private events only with their access
        token; organizers always see their own events.
        """
        if not user.is_anonymous and user.is_superuser:
            return self
        q = Q(visibility=Event.Visibility.PUBLIC, is_active=True)
        if access_token:
            q |= Q(private_access_token=access_token)
        if not user.is_anonymous:
            q |= Q(organizer=user)
        return self.filter(q)


class Event(TimeStampedModel):
    class Visibility(models.TextChoices):
        PUBLIC = "public", "Public"
        PRIVATE = "private", "Private"

    class Category(models.TextChoices):
        MUSIC = "music", "Music"
        THEATER = "theater", "Theater"
        STANDUP = "standup", "Stand Up"
        PARTY = "party", "Party"
        SPORTS = "sports", "Sports"
        OTHER = "other", "Other"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="organized_events")
    title = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True, default="")
    starts_at = models.DateTimeField(db_index=True)
    venue = models.CharField(max_length=200, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="", db_index=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER, db_index=True)
    visibility = models.CharField(
        max_length=20, choices=Visibility.choices, default=Visibility.PUBLIC, db_index=True
    )
    private_access_token = models.CharField(
        max_length=64, unique=True, default=generate_private_access_token, editable=False
    )
    is_active = models.BooleanField(default=True, db_index=True)
    gatekeepers = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name="gatekept_events", blank=True, help_text="Users allowed to scan tickets"
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["starts_at"]

    def __str__(self) -> str:
        return self.title

    def can_be_scanned_by(self, user: "User") -> bool:
        """Organizer, superusers and assigned gatekeepers may validate tickets."""
        if user.is_superuser or self.organizer_id == user.pk:
            return True
        return self.gatekeepers.filter(pk=user.pk).exists()

    def has_sales(self) -> bool:
        """Whether any order was ever placed; the pricing plan is then append-only."""
        return self.orders.exists()


class TicketType(TimeStampedModel):
    """A category of ticket (General, VIP). Prices live on tier allocations."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True, default="")
    total_quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_ticket_type_name_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.event}: {self.name}"


class Tier(TimeStampedModel):
    """A time-windowed sale stage (tanda).

    The window is half-open, ``[starts_at, ends_at)``. A missing bound is
    unbounded on that side.
    """

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tiers")
    name = models.CharField(max_length=100)
    starts_at = models.DateTimeField(null=True, blank=True, db_index=True)
    ends_at = models.DateTimeField(null=True, blank=True, db_index=True)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "created_at"]

    def __str__(self) -> str:
        return f"{self.event}: {self.name}"

    def clean(self) -> None:
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise DjangoValidationError({"ends_at": "The tier must end after it starts."})

    @property
    def is_dated(self) -> bool:
        return self.starts_at is not None or self.ends_at is not None

    def contains(self, at: datetime) -> bool:
        """Whether ``at`` falls inside this tier's window."""
        if self.starts_at is not None and at < self.starts_at:
            return False
        if self.ends_at is not None and at >= self.ends_at:
            return False
        return True


class TierAllocation(TimeStampedModel):
    """Price and carved-out stock of one ticket type within one tier.

    ``quantity_sold`` counts held and committed units and is only written by
    the inventory ledger's conditional updates.
    """

    tier = models.ForeignKey(Tier, on_delete=models.CASCADE, related_name="allocations")
    ticket_type = models.ForeignKey(TicketType, on_delete=models.CASCADE, related_name="allocations")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    quantity_sold = models.PositiveIntegerField(default=0, editable=False)
    quantity_returned = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tier", "ticket_type"], name="unique_allocation_per_tier_type"),
            models.CheckConstraint(
                condition=Q(quantity_sold__lte=models.F("quantity")), name="allocation_not_oversold"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.tier.name} / {self.ticket_type.name}"

    @property
    def available(self) -> int:
        return max(self.quantity - self.quantity_sold, 0)
