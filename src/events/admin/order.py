# src/events/admin/order.py
"""Admin classes for orders and inventory holds."""

from django.contrib import admin

from events import models
from events.admin.base import EventLinkMixin, OrderItemInline, UserLinkMixin


@admin.register(models.Order)
class OrderAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["code", "user_link", "event_link", "payment_method", "status", "total_amount", "paid_at"]
    list_filter = ["status", "payment_method"]
    search_fields = ["code", "buyer__email", "event__title", "payment_reference"]
    readonly_fields = [
        "code",
        "buyer",
        "event",
        "subtotal",
        "discount_amount",
        "total_amount",
        "promo_code",
        "referral",
        "payment_reference",
        "paid_at",
    ]
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]


@admin.register(models.Reservation)
class ReservationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    """Read-only: holds are only ever written by the inventory ledger."""

    list_display = ["id", "order", "allocation", "quantity", "status", "expires_at"]
    list_filter = ["status"]
    search_fields = ["order__code"]

    def has_add_permission(self, request):  # type: ignore[no-untyped-def]
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore[no-untyped-def]
        return False
