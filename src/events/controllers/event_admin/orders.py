from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission, IsOrganizer
from events.exceptions import InvalidState
from events.service import event_service, order_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=JWTAuth(),
    permissions=[IsOrganizer(), EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminOrdersController(EventAdminBaseController):
    """Orders of an event and manual settlement of cash and bank transfer payments."""

    def get_order(self, event_id: UUID, order_id: UUID) -> models.Order:
        event = self.get_one(event_id)
        return get_object_or_404(models.Order, pk=order_id, event=event)

    @route.get(
        "/orders",
        url_name="list_event_orders",
        response=PaginatedResponseSchema[schema.OrderAdminSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_orders(self, event_id: UUID, status: models.Order.Status | None = None) -> QuerySet[models.Order]:
        return event_service.list_orders(self.get_one(event_id), status)

    @route.post(
        "/orders/{uuid:order_id}/confirm",
        url_name="confirm_order_payment",
        response={200: schema.OrderAdminSchema, 409: ErrorResponse, 410: ErrorResponse},
    )
    def confirm_payment(
        self, event_id: UUID, order_id: UUID, payload: schema.PaymentConfirmSchema
    ) -> models.Order:
        """Record that a cash or bank transfer payment arrived. Its tickets become active."""
        order = self.get_order(event_id, order_id)
        if not order.is_deferred:
            raise InvalidState("Online payments are confirmed by the payment provider.")
        return order_service.confirm_payment(order, payment_reference=payload.payment_reference)

    @route.post(
        "/orders/{uuid:order_id}/fail",
        url_name="fail_order_payment",
        response={200: schema.OrderAdminSchema, 409: ErrorResponse},
    )
    def fail_payment(self, event_id: UUID, order_id: UUID) -> models.Order:
        """Give up on a pending payment: the held stock returns to sale and pending tickets expire."""
        return order_service.fail_payment(self.get_order(event_id, order_id))
