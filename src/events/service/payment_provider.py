"""Payment provider boundary.

The ticketing core only needs two things from a provider: somewhere to send
the buyer, and an asynchronous confirmation later (handled by the webhook
controller). Concrete providers subclass :class:`PaymentProvider`.
"""

import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

import stripe
import structlog
from django.conf import settings
from django.utils.module_loading import import_string

from events.models import Order

logger = structlog.get_logger(__name__)


class PaymentProviderError(Exception):
    """The provider could not start a checkout."""


@dataclass(frozen=True)
class PaymentIntent:
    reference: str
    redirect_url: str


class PaymentProvider(ABC):
    @abstractmethod
    def create_payment_intent(self, order: Order) -> PaymentIntent:
        """Start a checkout for an order and return where to send the buyer."""


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1")))


class StripePaymentProvider(PaymentProvider):
    """Stripe Checkout. Discounted orders are charged as one line carrying the order total."""

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or settings.STRIPE_SECRET_KEY

    def _line_items(self, order: Order) -> list[dict[str, t.Any]]:
        if order.discount_amount:
            return [
                {
                    "price_data": {
                        "currency": order.currency.lower(),
                        "product_data": {"name": f"{order.event.title}: order {order.code}"},
                        "unit_amount": to_minor_units(order.total_amount),
                    },
                    "quantity": 1,
                }
            ]
        return [
            {
                "price_data": {
                    "currency": order.currency.lower(),
                    "product_data": {"name": f"{order.event.title}: {item.ticket_type.name} ({item.tier.name})"},
                    "unit_amount": to_minor_units(item.unit_price),
                },
                "quantity": item.quantity,
            }
            for item in order.items.select_related("ticket_type", "tier")
        ]

    def create_payment_intent(self, order: Order) -> PaymentIntent:
        expires_at = order.reservations.order_by("expires_at").values_list("expires_at", flat=True).first()
        base_url = settings.FRONTEND_BASE_URL
        session_data: dict[str, t.Any] = {
            "api_key": self.api_key,
            "customer_email": order.buyer.email,
            "line_items": self._line_items(order),
            "mode": "payment",
            "success_url": f"{base_url}/orders/{order.pk}?payment_success=true",
            "cancel_url": f"{base_url}/orders/{order.pk}?payment_cancelled=true",
            "client_reference_id": str(order.pk),
            "metadata": {"order_id": str(order.pk), "event_id": str(order.event_id)},
        }
        if expires_at:
            session_data["expires_at"] = int(expires_at.timestamp())
        try:
            session = stripe.checkout.Session.create(**session_data)
        except stripe.StripeError as e:
            logger.error("stripe_checkout_failed", order_id=str(order.pk), error=str(e))
            raise PaymentProviderError(str(e)) from e
        return PaymentIntent(reference=t.cast(str, session.id), redirect_url=t.cast(str, session.url))


def get_payment_provider() -> PaymentProvider:
    return t.cast(PaymentProvider, import_string(settings.PAYMENT_PROVIDER_CLASS)())
