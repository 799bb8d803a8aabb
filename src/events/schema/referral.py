"""Vendor referral and promo code schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from events.models import PromoCode, Referral


class ReferralCreateSchema(Schema):
    event_id: UUID
    code: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")


class ReferralRenameSchema(Schema):
    code: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")


class ReferralSchema(ModelSchema):
    id: UUID
    event_id: UUID
    event_title: str = Field(..., alias="event.title")

    class Meta:
        model = Referral
        fields = ["code", "clicks", "conversions", "created_at"]


class ReferralStatsSchema(Schema):
    referral_id: UUID = Field(..., alias="referral.pk")
    code: str = Field(..., alias="referral.code")
    event_id: UUID = Field(..., alias="referral.event_id")
    event_title: str = Field(..., alias="referral.event.title")
    clicks: int
    conversions: int
    tickets_sold: int
    revenue: Decimal
    earnings: Decimal


class ReferralClickSchema(Schema):
    event_id: UUID


class PromoCodeCreateSchema(Schema):
    code: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")
    discount_type: PromoCode.DiscountType = PromoCode.DiscountType.PERCENT
    value: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    max_uses: int = Field(0, ge=0)
    valid_from: AwareDatetime | None = None
    valid_until: AwareDatetime | None = None
    is_active: bool = True


class PromoCodeEditSchema(Schema):
    discount_type: PromoCode.DiscountType | None = None
    value: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    max_uses: int | None = Field(None, ge=0)
    valid_from: AwareDatetime | None = None
    valid_until: AwareDatetime | None = None
    is_active: bool | None = None


class PromoCodeSchema(ModelSchema):
    id: UUID
    discount_type: PromoCode.DiscountType

    class Meta:
        model = PromoCode
        fields = ["code", "value", "max_uses", "used_count", "valid_from", "valid_until", "is_active", "created_at"]
