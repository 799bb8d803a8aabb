import typing as t
from io import BytesIO

import qrcode
from django.conf import settings
from django.core.cache import cache

if t.TYPE_CHECKING:
    from events.models import Ticket


def ticket_qr_cache_key(ticket_id: t.Any) -> str:
    return f"ticket-qr:{ticket_id}"


def render_qr_png(data: str) -> bytes:
    """Render ``data`` as a PNG QR code."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()


def get_ticket_qr_png(ticket: "Ticket", payload: str) -> bytes:
    """PNG of a ticket's QR, cached per ticket record."""
    key = ticket_qr_cache_key(ticket.pk)
    png = cache.get(key)
    if png is None:
        png = render_qr_png(payload)
        cache.set(key, png, timeout=settings.TICKET_QR_CACHE_SECONDS)
    return t.cast(bytes, png)


def evict_ticket_qr(ticket_id: t.Any) -> None:
    """Drop a cached QR image, e.g. once its record changed hands."""
    cache.delete(ticket_qr_cache_key(ticket_id))
