"""Django admin for notification models."""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    """Admin for Notification model."""

    list_display = ["id", "notification_type", "user_email", "title", "email_status", "is_read", "created_at"]
    list_filter = ["notification_type", "email_status", "read_at", "created_at"]
    search_fields = ["user__email", "user__username", "title"]
    readonly_fields = ["id", "created_at", "updated_at", "sent_at", "read_at", "context"]
    date_hierarchy = "created_at"

    @admin.display(description="User")
    def user_email(self, obj: Notification) -> str:
        return obj.user.email

    @admin.display(boolean=True, description="Read")
    def is_read(self, obj: Notification) -> bool:
        return obj.read_at is not None
