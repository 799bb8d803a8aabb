"""Account lookups used by the ticketing core."""

import structlog
from django.contrib.auth.password_validation import validate_password
from django.db import transaction

from accounts.models import User, generate_personal_qr_code

logger = structlog.get_logger(__name__)


def find_registered_user(email: str) -> User | None:
    """Return the active account registered under `email`, if any."""
    return User.objects.filter(email__iexact=email.strip(), is_active=True).first()


def find_user_by_personal_code(code: str) -> User | None:
    """Return the active account owning a personal QR code, if any."""
    code = (code or "").strip()
    if not code:
        return None
    return User.objects.filter(personal_qr_code=code, is_active=True).first()


@transaction.atomic
def rotate_personal_qr_code(user: User) -> User:
    """Issue a new personal QR code, invalidating the previous one."""
    user.personal_qr_code = generate_personal_qr_code()
    User.objects.filter(pk=user.pk).update(personal_qr_code=user.personal_qr_code)
    logger.info("personal_qr_code_rotated", user_id=str(user.pk))
    return user


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
    dni: str = "",
    phone: str | None = None,
) -> User:
    """Create a customer account. The email doubles as the login username."""
    email = email.strip().lower()
    user = User(username=email, email=email, first_name=first_name, last_name=last_name, dni=dni, phone=phone or None)
    validate_password(password, user)
    user.set_password(password)
    user.full_clean()
    user.save()
    logger.info("user_registered", user_id=str(user.pk))
    return user
