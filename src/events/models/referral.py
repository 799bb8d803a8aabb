import re
import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models

from common.models import TimeStampedModel

from .event import Event

REFERRAL_CODE_RE = re.compile(r"^[A-Za-z0-9_-]{3,32}$")


def validate_referral_code(value: str) -> None:
    if not REFERRAL_CODE_RE.fullmatch(value or ""):
        raise DjangoValidationError("Use 3 to 32 letters, digits, dashes or underscores.")


class Referral(TimeStampedModel):
    """A vendor's tracking code for one event."""

    vendor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="referrals")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="referrals")
    code = models.CharField(max_length=32, unique=True, validators=[validate_referral_code])
    clicks = models.PositiveIntegerField(default=0, editable=False)
    conversions = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["vendor", "event"], name="unique_referral_per_vendor_event"),
        ]

    def __str__(self) -> str:
        return self.code

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Codes are case-insensitive; store them lower-cased."""
        self.code = (self.code or "").strip().lower()
        super().save(*args, **kwargs)
