import re
import secrets
import typing as t
import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounts.validators import normalize_phone_number, validate_dni, validate_phone_number


def generate_personal_qr_code() -> str:
    """Random standing token printed in a user's personal QR."""
    return secrets.token_urlsafe(18)


class UserQueryset(models.QuerySet["User"]):
    """Queryset for User."""


class TaquillaUserManager(UserManager["User"]):
    def get_queryset(self) -> UserQueryset:
        """Get queryset for User."""
        return UserQueryset(self.model)


class User(AbstractUser):
    class Role(models.TextChoices):
        CUSTOMER = "customer", "Customer"
        ORGANIZER = "organizer", "Organizer"
        VENDOR = "vendor", "Vendor"
        GATEKEEPER = "gatekeeper", "Gatekeeper"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CUSTOMER, db_index=True)
    dni = models.CharField(max_length=12, blank=True, validators=[validate_dni], help_text="National identity number")
    phone = models.CharField(
        max_length=20, unique=True, null=True, blank=True, validators=[validate_phone_number], help_text="Phone number"
    )
    commission_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Vendor commission over referred sales",
    )
    personal_qr_code = models.CharField(
        max_length=64,
        unique=True,
        default=generate_personal_qr_code,
        editable=False,
        help_text="Standing code used to receive ticket transfers",
    )

    objects = TaquillaUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize the phone number before saving."""
        if self.phone:
            self.phone = normalize_phone_number(self.phone)
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    @property
    def is_organizer(self) -> bool:
        return self.role == self.Role.ORGANIZER or self.is_superuser

    @property
    def is_vendor(self) -> bool:
        return self.role == self.Role.VENDOR

    @property
    def display_name(self) -> str:
        """Full name, falling back to a prettified username."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
