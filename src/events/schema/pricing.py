"""Pricing plan, tier and snapshot schemas."""

import typing as t
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, EmailStr, Field, model_validator

from common.schema import OneToSixtyFourString, StrippedString
from events.models import TicketType, Tier, TierAllocation


class TicketTypeSchema(ModelSchema):
    id: UUID

    class Meta:
        model = TicketType
        fields = ["name", "description", "total_quantity", "display_order"]


class TierAllocationSchema(ModelSchema):
    id: UUID
    ticket_type_id: UUID
    available: int

    class Meta:
        model = TierAllocation
        fields = ["price", "quantity", "quantity_sold", "quantity_returned"]


class TierSchema(ModelSchema):
    id: UUID
    allocations: list[TierAllocationSchema]

    class Meta:
        model = Tier
        fields = ["name", "starts_at", "ends_at", "is_active", "display_order", "created_at"]


class PricingPlanSchema(Schema):
    ticket_types: list[TicketTypeSchema]
    tiers: list[TierSchema]


class TicketTypeInSchema(Schema):
    name: OneToSixtyFourString
    description: StrippedString = ""
    total_quantity: int = Field(..., ge=1)
    display_order: int = Field(0, ge=0)


class AllocationInSchema(Schema):
    ticket_type: OneToSixtyFourString = Field(..., description="Name of a ticket type of the plan")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=1)


class TierInSchema(Schema):
    name: OneToSixtyFourString
    starts_at: AwareDatetime | None = None
    ends_at: AwareDatetime | None = None
    is_active: bool = True
    display_order: int = Field(0, ge=0)
    allocations: list[AllocationInSchema] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_window(self) -> t.Self:
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class PricingPlanInSchema(Schema):
    """A complete plan: the ticket types and the tiers that split their stock."""

    ticket_types: list[TicketTypeInSchema] = Field(..., min_length=1)
    tiers: list[TierInSchema] = Field(..., min_length=1)


class TierEditSchema(Schema):
    name: OneToSixtyFourString | None = None
    starts_at: AwareDatetime | None = None
    ends_at: AwareDatetime | None = None
    is_active: bool | None = None
    display_order: int | None = Field(None, ge=0)


class AllocationEditSchema(Schema):
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(None, ge=1)


class PricingLineSchema(Schema):
    ticket_type_id: UUID
    name: str
    price: Decimal
    available: int
    purchasable: bool


class PricingSnapshotSchema(Schema):
    at: AwareDatetime
    tier_id: UUID | None = None
    tier_name: str | None = None
    currency: str
    lines: list[PricingLineSchema]


class AllocationStatsSchema(Schema):
    tier: str
    ticket_type: str
    price: Decimal
    quantity: int
    sold: int
    returned: int
    revenue: Decimal


class EventStatsSchema(Schema):
    tickets_sold: int
    tickets_used: int
    tickets_pending: int
    revenue: Decimal
    allocations: list[AllocationStatsSchema]


class AllocationDriftSchema(Schema):
    allocation_id: UUID
    label: str
    quantity_sold: int
    expected_sold: int
    quantity_returned: int
    expected_returned: int


class GatekeeperAddSchema(Schema):
    email: EmailStr
