from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

from .event import Event


class PromoCode(TimeStampedModel):
    class DiscountType(models.TextChoices):
        PERCENT = "percent", "Percent"
        FIXED = "fixed", "Fixed amount"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="promo_codes")
    code = models.CharField(max_length=32)
    discount_type = models.CharField(max_length=10, choices=DiscountType.choices, default=DiscountType.PERCENT)
    value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    max_uses = models.PositiveIntegerField(default=0, help_text="0 means unlimited")
    used_count = models.PositiveIntegerField(default=0, editable=False)
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "code"], name="unique_promo_code_per_event"),
        ]

    def __str__(self) -> str:
        return self.code

    def clean(self) -> None:
        self.code = (self.code or "").strip().upper()
        if self.discount_type == self.DiscountType.PERCENT and self.value > 100:
            raise DjangoValidationError({"value": "A percent discount cannot exceed 100."})
        if self.valid_from and self.valid_until and self.valid_until <= self.valid_from:
            raise DjangoValidationError({"valid_until": "Must be after valid_from."})

    def discount_for(self, subtotal: Decimal) -> Decimal:
        """Discount over a subtotal, never more than the subtotal itself."""
        if self.discount_type == self.DiscountType.PERCENT:
            discount = (subtotal * self.value / Decimal(100)).quantize(Decimal("0.01"))
        else:
            discount = self.value
        return min(discount, subtotal)
