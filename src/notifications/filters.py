from django.db.models import Q
from ninja import Field, FilterSchema

from .enums import NotificationType


class NotificationFilterSchema(FilterSchema):
    unread_only: bool = False
    notification_type: NotificationType | None = None
    event_id: str | None = Field(None, q="context__event_id")  # type: ignore[call-overload]

    def filter_unread_only(self, unread_only: bool) -> Q:
        if unread_only:
            return Q(read_at__isnull=True)
        return Q()
