from uuid import UUID

from django.db.models import Q
from django.utils import timezone
from ninja import Field, FilterSchema

from events.models import Event


class EventFilterSchema(FilterSchema):
    category: Event.Category | None = None
    city: str | None = Field(None, q="city__iexact")  # type: ignore[call-overload]
    include_past: bool = False

    def filter_include_past(self, include_past: bool) -> Q:
        if include_past:
            return Q()
        return Q(starts_at__gte=timezone.now())


class TicketFilterSchema(FilterSchema):
    event_id: UUID | None = None
