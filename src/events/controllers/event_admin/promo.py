from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route, status
from ninja_jwt.authentication import JWTAuth

from common.schema import ValidationErrorResponse
from common.throttling import WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission, IsOrganizer
from events.service import promo_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=JWTAuth(),
    permissions=[IsOrganizer(), EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminPromoCodesController(EventAdminBaseController):
    def get_promo(self, event_id: UUID, promo_id: UUID) -> models.PromoCode:
        event = self.get_one(event_id)
        return get_object_or_404(models.PromoCode, pk=promo_id, event=event)

    @route.get("/promo-codes", url_name="list_promo_codes", response=list[schema.PromoCodeSchema])
    def list_promo_codes(self, event_id: UUID) -> QuerySet[models.PromoCode]:
        return models.PromoCode.objects.filter(event=self.get_one(event_id))

    @route.post(
        "/promo-codes",
        url_name="create_promo_code",
        response={status.HTTP_201_CREATED: schema.PromoCodeSchema, 400: ValidationErrorResponse},
    )
    def create_promo_code(self, event_id: UUID, payload: schema.PromoCodeCreateSchema) -> tuple[int, models.PromoCode]:
        """Create a percent or fixed discount code. Codes are case-insensitive."""
        promo = promo_service.create_promo_code(self.get_one(event_id), **payload.model_dump())
        return status.HTTP_201_CREATED, promo

    @route.patch(
        "/promo-codes/{uuid:promo_id}",
        url_name="edit_promo_code",
        response={200: schema.PromoCodeSchema, 400: ValidationErrorResponse},
    )
    def edit_promo_code(self, event_id: UUID, promo_id: UUID, payload: schema.PromoCodeEditSchema) -> models.PromoCode:
        promo = self.get_promo(event_id, promo_id)
        return promo_service.update_promo_code(promo, **payload.model_dump(exclude_unset=True))

    @route.delete("/promo-codes/{uuid:promo_id}", url_name="delete_promo_code", response={204: None})
    def delete_promo_code(self, event_id: UUID, promo_id: UUID) -> tuple[int, None]:
        """Delete a promo code. Codes already used on an order are deactivated instead."""
        promo_service.delete_promo_code(self.get_promo(event_id, promo_id))
        return 204, None
