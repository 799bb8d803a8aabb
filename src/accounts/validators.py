import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

PHONE_REGEX = re.compile(r"^\+?\d{7,15}$")  # E.164-ish: +[country][number], up to 15 digits
DNI_REGEX = re.compile(r"^\d{7,10}$")


def validate_phone_number(value: str | None) -> None:
    """Validate phone number.

    Args:
        value (str): phone number.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(_("Phone number must be a string."))

    normalized = normalize_phone_number(value)

    if not PHONE_REGEX.fullmatch(normalized):
        raise ValidationError(_("Number format is incorrect."))
    return None


def normalize_phone_number(value: str) -> str:
    """Strip spaces, dashes and parentheses from a phone number."""
    return re.sub(r"[ \-()]", "", value)


def validate_dni(value: str) -> None:
    """Accept 7 to 10 digits, dots allowed as thousands separators."""
    if not value:
        return None
    if not DNI_REGEX.fullmatch(value.replace(".", "")):
        raise ValidationError(_("DNI must contain 7 to 10 digits."))
    return None
