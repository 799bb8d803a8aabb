import typing as t
from uuid import UUID

from django.db.models import QuerySet

from common.controllers import UserAwareController
from events import models


class EventAdminBaseController(UserAwareController):
    """Organizer console: every lookup is scoped to the events the caller organizes.

    Superusers see every event. An event outside the scope is a 404, never a 403,
    so organizers cannot probe each other's event ids.
    """

    def get_queryset(self) -> QuerySet[models.Event]:
        return models.Event.objects.managed_by(self.user())

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))
