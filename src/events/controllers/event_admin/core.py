from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route, status
from ninja_jwt.authentication import JWTAuth

from accounts.models import User
from accounts.schema import MinimalUserSchema
from common.schema import ErrorResponse, ValidationErrorResponse
from common.throttling import WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission, IsOrganizer
from events.service import duplication, event_service, inventory, update_db_instance
from events.service.inventory import AllocationDrift

from .base import EventAdminBaseController


@api_controller(
    "/event-admin",
    auth=JWTAuth(),
    permissions=[IsOrganizer()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminListController(EventAdminBaseController):
    @route.get("/", url_name="list_my_events", response=list[schema.EventAdminSchema])
    def list_events(self) -> QuerySet[models.Event]:
        """Events you organize, including inactive and private ones."""
        return self.get_queryset()

    @route.post(
        "/",
        url_name="create_event",
        response={status.HTTP_201_CREATED: schema.EventAdminSchema, 400: ValidationErrorResponse},
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event. Add its ticket types and tiers with PUT /event-admin/{event_id}/pricing-plan."""
        return status.HTTP_201_CREATED, event_service.create_event(self.user(), payload)


@api_controller(
    "/event-admin/{event_id}",
    auth=JWTAuth(),
    permissions=[IsOrganizer(), EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminCoreController(EventAdminBaseController):
    """Core event admin operations.

    Handles event edits, duplication, sales figures and gatekeepers.
    """

    @route.get("", url_name="get_admin_event", response=schema.EventAdminSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        return self.get_one(event_id)

    @route.put("", url_name="edit_event", response={200: schema.EventAdminSchema, 400: ValidationErrorResponse})
    def update_event(self, event_id: UUID, payload: schema.EventEditSchema) -> models.Event:
        """Update event by ID."""
        event = self.get_one(event_id)
        return update_db_instance(event, payload)

    @route.post("/duplicate", url_name="duplicate_event", response={200: schema.EventAdminSchema})
    def duplicate_event(self, event_id: UUID, payload: schema.EventCloneSchema) -> models.Event:
        """Copy the event with its ticket types, tiers and prices to a new date.

        Tier windows move with the start date. The copy has no sales and starts
        inactive.
        """
        event = self.get_one(event_id)
        return duplication.duplicate_event(event, payload.title, payload.starts_at)

    @route.get("/stats", url_name="event_stats", response=schema.EventStatsSchema)
    def stats(self, event_id: UUID) -> dict[str, object]:
        """Tickets sold, used and pending, revenue, and the ledger of every allocation."""
        return event_service.get_event_stats(self.get_one(event_id))

    @route.post("/reconcile", url_name="reconcile_inventory", response=list[schema.AllocationDriftSchema])
    def reconcile(self, event_id: UUID) -> list[AllocationDrift]:
        """Compare allocation counters with reservations and tickets. Empty means consistent."""
        return inventory.reconcile(self.get_one(event_id))

    @route.get("/gatekeepers", url_name="list_gatekeepers", response=list[MinimalUserSchema])
    def list_gatekeepers(self, event_id: UUID) -> QuerySet[User]:
        return self.get_one(event_id).gatekeepers.all()

    @route.post(
        "/gatekeepers",
        url_name="add_gatekeeper",
        response={200: MinimalUserSchema, 404: ErrorResponse},
    )
    def add_gatekeeper(self, event_id: UUID, payload: schema.GatekeeperAddSchema) -> User:
        """Allow a registered user to scan tickets for this event."""
        return event_service.add_gatekeeper(self.get_one(event_id), payload.email)

    @route.delete(
        "/gatekeepers/{uuid:user_id}",
        url_name="remove_gatekeeper",
        response={204: None, 404: ErrorResponse},
    )
    def remove_gatekeeper(self, event_id: UUID, user_id: UUID) -> tuple[int, None]:
        event_service.remove_gatekeeper(self.get_one(event_id), user_id)
        return 204, None
