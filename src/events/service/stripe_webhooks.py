"""Stripe webhook event handlers."""

import stripe
import structlog

from events.exceptions import ExpiredWindow, InvalidState
from events.models import Order
from events.service import order_service

logger = structlog.get_logger(__name__)


class StripeEventHandler:
    """Handles the business logic for different types of Stripe webhook events."""

    def __init__(self, event: stripe.Event):
        """Initialize the Stripe event handler."""
        self.event = event

    def handle(self) -> None:
        """Routes the event to the appropriate handler based on its type."""
        event_type = self.event.type
        handler_method = getattr(self, f"handle_{event_type.replace('.', '_')}", self.handle_unknown_event)
        handler_method(self.event)

    def handle_unknown_event(self, event: stripe.Event) -> None:
        """Log unhandled event types for future development."""
        logger.info("stripe_webhook_unhandled_event", event_type=event.type, event_id=event.id)

    def _get_order(self, session: stripe.StripeObject) -> Order | None:
        metadata = session.get("metadata") or {}
        order_id = session.get("client_reference_id") or metadata.get("order_id")
        order = None
        if order_id:
            order = Order.objects.filter(pk=order_id).first()
        if order is None:
            order = order_service.find_order_by_reference(session["id"])
        if order is None:
            logger.warning("stripe_session_unknown_order", session_id=session["id"], order_id=order_id)
        return order

    def handle_checkout_session_completed(self, event: stripe.Event) -> None:
        """The buyer finished checkout. Confirm the order if the money is in.

        Delayed payment methods complete the session unpaid and are settled by
        ``checkout.session.async_payment_succeeded`` later.
        """
        session = event.data.object
        if session["payment_status"] not in {"paid", "no_payment_required"}:
            logger.info(
                "stripe_session_awaiting_payment",
                session_id=session["id"],
                payment_status=session["payment_status"],
            )
            return
        self._confirm(session)

    def handle_checkout_session_async_payment_succeeded(self, event: stripe.Event) -> None:
        self._confirm(event.data.object)

    def handle_checkout_session_expired(self, event: stripe.Event) -> None:
        self._fail(event.data.object)

    def handle_checkout_session_async_payment_failed(self, event: stripe.Event) -> None:
        self._fail(event.data.object)

    def _confirm(self, session: stripe.StripeObject) -> None:
        order = self._get_order(session)
        if order is None:
            return
        try:
            order_service.confirm_payment(order, payment_reference=session.get("payment_intent") or session["id"])
        except (ExpiredWindow, InvalidState) as exc:
            # Paid after the hold lapsed: the stock went back to the pool, the money needs a refund.
            logger.error(
                "stripe_payment_for_lapsed_order",
                order_id=str(order.pk),
                session_id=session["id"],
                reason=exc.reason,
            )
            return
        logger.info("stripe_payment_success", order_id=str(order.pk), session_id=session["id"])

    def _fail(self, session: stripe.StripeObject) -> None:
        order = self._get_order(session)
        if order is None:
            return
        if order.status == Order.Status.COMPLETED:
            logger.warning("stripe_failure_for_completed_order", order_id=str(order.pk), session_id=session["id"])
            return
        order_service.fail_payment(order)
        logger.info("stripe_payment_failed", order_id=str(order.pk), session_id=session["id"])
