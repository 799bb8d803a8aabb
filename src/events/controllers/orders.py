from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from events import models, schema


@api_controller("/orders", auth=JWTAuth(), tags=["Orders"])
class OrderController(UserAwareController):
    def get_queryset(self) -> QuerySet[models.Order]:
        return models.Order.objects.filter(buyer=self.user()).prefetch_related("items")

    @route.get("/", url_name="list_orders", response=PaginatedResponseSchema[schema.OrderSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_orders(self) -> QuerySet[models.Order]:
        """Your orders, newest first."""
        return self.get_queryset()

    @route.get("/{uuid:order_id}", url_name="get_order", response=schema.OrderSchema)
    def get_order(self, order_id: UUID) -> models.Order:
        """One of your orders. Poll it after checkout to see the payment land."""
        return self.get_object_or_exception(self.get_queryset(), pk=order_id)  # type: ignore[no-any-return]
