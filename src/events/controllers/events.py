import typing as t
from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone
from ninja import Query
from ninja_extra import api_controller, route, status
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching
from ninja_jwt.authentication import JWTAuth

from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import CheckoutThrottle
from events import filters, models, schema
from events.service import order_service, pricing


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    """The public catalogue and checkout."""

    def get_access_token(self) -> str | None:
        """Private events are readable with their token, from the X-Event-Token header or ?token=."""
        request = self.context.request  # type: ignore[union-attr]
        return request.META.get("HTTP_X_EVENT_TOKEN") or request.GET.get("token")  # type: ignore[union-attr]

    def get_queryset(self) -> models.event.EventQuerySet:
        return models.Event.objects.for_user(self.maybe_user(), access_token=self.get_access_token())

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventInListSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["title", "description", "venue", "city"])
    def list_events(self, params: filters.EventFilterSchema = Query(...)) -> QuerySet[models.Event]:  # type: ignore[type-arg]
        """Browse active public events, soonest first.

        Filter by category and city; `search` matches title, description, venue and city.
        Past events are hidden unless include_past=true.
        """
        return params.filter(models.Event.objects.public()).order_by("starts_at")

    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventDetailSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Event details. Private events need their access token."""
        return self.get_one(event_id)

    @route.get("/{uuid:event_id}/pricing", url_name="event_pricing", response=schema.PricingSnapshotSchema)
    def get_pricing(self, event_id: UUID) -> schema.PricingSnapshotSchema:
        """Current tier, prices and availability of every ticket type.

        Prices are those of the tier active right now on the server clock; they are
        resolved again when an order is placed.
        """
        event = self.get_object_or_exception(self.get_queryset().with_pricing(), pk=event_id)
        snap = pricing.snapshot(event, timezone.now())
        return schema.PricingSnapshotSchema(
            at=snap.at,
            tier_id=snap.tier.pk if snap.tier else None,
            tier_name=snap.tier.name if snap.tier else None,
            currency=settings.DEFAULT_CURRENCY,
            lines=[
                schema.PricingLineSchema(
                    ticket_type_id=line.ticket_type.pk,
                    name=line.ticket_type.name,
                    price=line.price,
                    available=line.available,
                    purchasable=line.purchasable,
                )
                for line in snap.lines
            ],
        )

    @route.post(
        "/{uuid:event_id}/checkout",
        url_name="checkout",
        response={status.HTTP_201_CREATED: schema.OrderSchema, 400: ErrorResponse, 409: ErrorResponse},
        auth=JWTAuth(),
        throttle=CheckoutThrottle(),
    )
    def checkout(self, event_id: UUID, payload: schema.CheckoutSchema) -> tuple[int, models.Order]:
        """Place an order for one or more ticket types.

        Stock is held for the order: 35 minutes for online payment, 7 days for cash
        and bank transfer. Online orders return a `checkout_url` to send the buyer to;
        cash and bank transfer orders get pending tickets that activate when the
        organizer confirms the payment.
        """
        event = self.get_one(event_id)
        order = order_service.place_order(
            event=event,
            buyer=self.user(),
            items=[order_service.OrderLine(item.ticket_type_id, item.quantity) for item in payload.items],
            payment_method=payload.payment_method,
            promo_code=payload.promo_code,
            referral_code=payload.referral_code,
        )
        return status.HTTP_201_CREATED, order
