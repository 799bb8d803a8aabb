"""Checkout and order schemas."""

from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from events.models import Order, OrderItem, PaymentMethod


class OrderLineSchema(Schema):
    ticket_type_id: UUID
    quantity: int = Field(..., ge=1)


class CheckoutSchema(Schema):
    items: list[OrderLineSchema] = Field(..., min_length=1)
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    promo_code: str | None = Field(None, max_length=32)
    referral_code: str | None = Field(None, max_length=32)


class OrderItemSchema(ModelSchema):
    ticket_type_id: UUID
    tier_id: UUID
    line_total: Decimal

    class Meta:
        model = OrderItem
        fields = ["unit_price", "quantity"]


class OrderSchema(ModelSchema):
    id: UUID
    event_id: UUID
    status: Order.Status
    payment_method: PaymentMethod
    items: list[OrderItemSchema]

    class Meta:
        model = Order
        fields = [
            "code",
            "subtotal",
            "discount_amount",
            "total_amount",
            "currency",
            "checkout_url",
            "paid_at",
            "created_at",
        ]


class OrderAdminSchema(OrderSchema):
    buyer_id: UUID
    payment_reference: str


class PaymentConfirmSchema(Schema):
    payment_reference: str | None = Field(None, max_length=255)
