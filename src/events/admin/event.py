# src/events/admin/event.py
"""Admin classes for events and their pricing plans."""

from django.contrib import admin

from events import models
from events.admin.base import EventLinkMixin, TicketTypeInline, TierAllocationInline, TierInline


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "organizer", "starts_at", "city", "category", "visibility", "is_active"]
    list_filter = ["visibility", "category", "is_active", "city"]
    search_fields = ["title", "venue", "city", "organizer__email"]
    autocomplete_fields = ["organizer"]
    filter_horizontal = ["gatekeepers"]
    readonly_fields = ["private_access_token"]
    date_hierarchy = "starts_at"
    inlines = [TicketTypeInline, TierInline]


@admin.register(models.TicketType)
class TicketTypeAdmin(admin.ModelAdmin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["name", "event_link", "total_quantity", "display_order"]
    search_fields = ["name", "event__title"]
    autocomplete_fields = ["event"]


@admin.register(models.Tier)
class TierAdmin(admin.ModelAdmin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["name", "event_link", "starts_at", "ends_at", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "event__title"]
    autocomplete_fields = ["event"]
    inlines = [TierAllocationInline]


@admin.register(models.PromoCode)
class PromoCodeAdmin(admin.ModelAdmin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["code", "event_link", "discount_type", "value", "used_count", "max_uses", "is_active"]
    list_filter = ["discount_type", "is_active"]
    search_fields = ["code", "event__title"]
    autocomplete_fields = ["event"]
    readonly_fields = ["used_count"]


@admin.register(models.Referral)
class ReferralAdmin(admin.ModelAdmin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["code", "vendor", "event_link", "clicks", "conversions"]
    search_fields = ["code", "vendor__email", "event__title"]
    autocomplete_fields = ["vendor", "event"]
    readonly_fields = ["clicks", "conversions"]
