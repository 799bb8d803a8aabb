"""HMAC signing for ticket QR payloads.

A ticket QR encodes an opaque token of the form::

    TQ1.<ticket uuid hex>.<signature>

The signature is an HMAC-SHA256 over the version prefix and the ticket id,
keyed with a value derived from Django's SECRET_KEY. The token carries no
state: whether the ticket is usable is decided by the database, the token
only proves that the id was issued by this service.

Security:
    - Uses Django's SECRET_KEY with a domain-specific prefix for isolation
    - Signatures are 32 hex chars (128 bits); QR payloads are long-lived,
      unlike short expiring URLs
    - Uses hmac.compare_digest() to prevent timing attacks
"""

import hashlib
import hmac
import uuid
from functools import lru_cache

from django.conf import settings

__all__ = [
    "PAYLOAD_PREFIX",
    "SIGNATURE_LENGTH",
    "BadPayload",
    "generate_signature",
    "sign_ticket_id",
    "unsign_ticket_payload",
    "payload_fingerprint",
]

SIGNATURE_LENGTH = 32

PAYLOAD_PREFIX = "TQ1"

# Domain separator for key derivation
_KEY_DOMAIN = "taquilla:ticket-qr:v1"


class BadPayload(ValueError):
    """The payload is malformed or its signature does not match."""


@lru_cache(maxsize=1)
def _get_signing_key() -> bytes:
    """Get the signing key, derived from Django's SECRET_KEY.

    Lazily computed on first use and cached for the lifetime of the process.
    """
    return hashlib.sha256(f"{_KEY_DOMAIN}:{settings.SECRET_KEY}".encode()).digest()


def generate_signature(ticket_hex: str) -> str:
    """Generate the HMAC signature for a ticket id in hex form."""
    message = f"{PAYLOAD_PREFIX}:{ticket_hex}"
    return hmac.new(_get_signing_key(), message.encode(), hashlib.sha256).hexdigest()[:SIGNATURE_LENGTH]


def sign_ticket_id(ticket_id: uuid.UUID) -> str:
    """Return the signed QR payload for a ticket id."""
    ticket_hex = ticket_id.hex
    return f"{PAYLOAD_PREFIX}.{ticket_hex}.{generate_signature(ticket_hex)}"


def unsign_ticket_payload(payload: str) -> uuid.UUID:
    """Verify a QR payload and return the ticket id it carries.

    Raises:
        BadPayload: if the payload is malformed or forged.
    """
    parts = (payload or "").strip().split(".")
    if len(parts) != 3 or parts[0] != PAYLOAD_PREFIX:
        raise BadPayload("malformed payload")
    _, ticket_hex, sig = parts
    try:
        ticket_id = uuid.UUID(hex=ticket_hex)
    except ValueError as e:
        raise BadPayload("malformed ticket id") from e
    if not hmac.compare_digest(sig, generate_signature(ticket_id.hex)):
        raise BadPayload("signature mismatch")
    return ticket_id


def payload_fingerprint(payload: str) -> str:
    """Short non-reversible digest of a payload, stored in scan logs."""
    return hashlib.sha256((payload or "").encode()).hexdigest()[:16]
