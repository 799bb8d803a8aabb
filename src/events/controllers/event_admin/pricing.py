from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.schema import ErrorResponse
from common.throttling import WriteThrottle
from events import models, schema
from events.controllers.permissions import EventPermission, IsOrganizer
from events.service import pricing_plan

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=JWTAuth(),
    permissions=[IsOrganizer(), EventPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminPricingController(EventAdminBaseController):
    """Ticket types, tiers (tandas) and their allocations."""

    @route.get("/pricing-plan", url_name="get_pricing_plan", response=schema.PricingPlanSchema)
    def get_pricing_plan(self, event_id: UUID) -> dict[str, object]:
        """The full plan, with the ledger counters of every allocation."""
        return pricing_plan.get_pricing_plan(self.get_one(event_id))

    @route.put(
        "/pricing-plan",
        url_name="replace_pricing_plan",
        response={200: schema.PricingPlanSchema, 400: ErrorResponse, 409: ErrorResponse},
    )
    def replace_pricing_plan(self, event_id: UUID, payload: schema.PricingPlanInSchema) -> dict[str, object]:
        """Replace all ticket types and tiers at once.

        Per ticket type, the quantities allocated across tiers must add up to its
        total, and tier windows may not overlap. Only possible before the first
        order; afterwards add tiers or resize allocations instead.
        """
        event = pricing_plan.replace_pricing_plan(self.get_one(event_id), payload)
        return pricing_plan.get_pricing_plan(event)

    @route.post(
        "/tiers",
        url_name="add_tier",
        response={200: schema.TierSchema, 400: ErrorResponse},
    )
    def add_tier(self, event_id: UUID, payload: schema.TierInSchema) -> models.Tier:
        """Add a tier. Its allocations raise the totals of their ticket types."""
        return pricing_plan.add_tier(self.get_one(event_id), payload)

    @route.patch(
        "/tiers/{uuid:tier_id}",
        url_name="edit_tier",
        response={200: schema.TierSchema, 400: ErrorResponse},
    )
    def edit_tier(self, event_id: UUID, tier_id: UUID, payload: schema.TierEditSchema) -> models.Tier:
        event = self.get_one(event_id)
        tier = get_object_or_404(models.Tier, pk=tier_id, event=event)
        return pricing_plan.update_tier(tier, payload)

    @route.patch(
        "/allocations/{uuid:allocation_id}",
        url_name="edit_allocation",
        response={200: schema.TierAllocationSchema, 400: ErrorResponse},
    )
    def edit_allocation(
        self, event_id: UUID, allocation_id: UUID, payload: schema.AllocationEditSchema
    ) -> models.TierAllocation:
        """Reprice an allocation or resize it. Resizing moves its ticket type's total with it."""
        event = self.get_one(event_id)
        allocation = get_object_or_404(models.TierAllocation, pk=allocation_id, tier__event=event)
        return pricing_plan.update_allocation(allocation, payload)
