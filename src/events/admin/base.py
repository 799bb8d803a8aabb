# src/events/admin/base.py
"""Base admin components: link mixins and inlines."""

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from events import models


class UserLinkMixin:
    """Mixin to add a link to a user."""

    def user_link(self, obj: t.Any) -> str:
        user = getattr(obj, "owner", getattr(obj, "buyer", None))
        url = reverse("admin:accounts_user_change", args=[user.id])  # type: ignore[union-attr]
        return format_html('<a href="{}">{}</a>', url, user.username)  # type: ignore[union-attr]

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str | None:
        if not getattr(obj, "event", None):
            return None
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class TicketTypeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketType
    extra = 0
    fields = ["name", "description", "total_quantity", "display_order"]


class TierInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.Tier
    extra = 0
    fields = ["name", "starts_at", "ends_at", "is_active", "display_order"]
    show_change_link = True


class TierAllocationInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TierAllocation
    extra = 0
    fields = ["ticket_type", "price", "quantity", "quantity_sold", "quantity_returned"]
    readonly_fields = ["quantity_sold", "quantity_returned"]


class OrderItemInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.OrderItem
    extra = 0
    can_delete = False
    fields = ["ticket_type", "tier", "unit_price", "quantity"]
    readonly_fields = fields
