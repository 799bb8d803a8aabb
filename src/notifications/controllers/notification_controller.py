"""API controller for the in-app notification inbox."""

from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from notifications.filters import NotificationFilterSchema
from notifications.models import Notification
from notifications.schema import NotificationSchema, UnreadCountSchema


@api_controller("/notifications", tags=["Notifications"], auth=JWTAuth(), throttle=UserDefaultThrottle())
class NotificationController(UserAwareController):
    def get_queryset(self) -> QuerySet[Notification]:
        return Notification.objects.filter(user=self.user())

    @route.get("/", url_name="list_notifications", response=PaginatedResponseSchema[NotificationSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_notifications(
        self,
        params: NotificationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Notification]:
        """List your notifications, newest first. Filter by unread status or type."""
        return params.filter(self.get_queryset())

    @route.get("/unread-count", url_name="unread_notification_count", response=UnreadCountSchema)
    def unread_count(self) -> dict[str, int]:
        return {"count": self.get_queryset().filter(read_at__isnull=True).count()}

    @route.post("/{notification_id}/mark-read", url_name="mark_notification_read", throttle=WriteThrottle())
    def mark_read(self, notification_id: UUID) -> None:
        """Mark a notification as read."""
        notification = self.get_object_or_exception(self.get_queryset(), pk=notification_id)
        notification.mark_read()

    @route.post("/mark-all-read", url_name="mark_all_notifications_read", throttle=WriteThrottle())
    def mark_all_read(self) -> None:
        self.get_queryset().filter(read_at__isnull=True).update(read_at=timezone.now())
