# src/events/admin/ticket.py
"""Admin classes for tickets, transfers and scans."""

from django.contrib import admin

from events import models
from events.admin.base import EventLinkMixin, UserLinkMixin


@admin.register(models.Ticket)
class TicketAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["id", "event_link", "user_link", "ticket_type", "tier", "status", "expires_at", "scanned_at"]
    list_filter = ["status", "event__title"]
    search_fields = ["id", "owner__email", "order__code", "event__title"]
    readonly_fields = [
        "id",
        "order",
        "price_paid",
        "purchased_at",
        "scanned_at",
        "scanned_by",
        "scanned_device",
        "transferred_from",
        "version",
    ]
    date_hierarchy = "created_at"


@admin.register(models.TicketTransfer)
class TicketTransferAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["source_ticket", "resulting_ticket", "from_user", "to_user", "method", "created_at"]
    list_filter = ["method"]
    search_fields = ["from_user__email", "to_user__email"]


@admin.register(models.ScanLog)
class ScanLogAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["created_at", "event", "validator", "device", "valid", "reason"]
    list_filter = ["valid", "reason"]
    search_fields = ["payload_fingerprint", "device", "validator__email"]
