"""Event and catalogue schemas."""

from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime

from common.schema import OneToOneFiftyString, StrippedString
from events.models import Event


class EventEditSchema(Schema):
    title: OneToOneFiftyString | None = None
    description: StrippedString | None = None
    starts_at: AwareDatetime | None = None
    venue: StrippedString | None = None
    address: StrippedString | None = None
    city: StrippedString | None = None
    category: Event.Category | None = None
    visibility: Event.Visibility | None = None
    is_active: bool | None = None


class EventCreateSchema(Schema):
    title: OneToOneFiftyString
    description: StrippedString = ""
    starts_at: AwareDatetime
    venue: StrippedString = ""
    address: StrippedString = ""
    city: StrippedString = ""
    category: Event.Category = Event.Category.OTHER
    visibility: Event.Visibility = Event.Visibility.PUBLIC
    is_active: bool = True


class EventCloneSchema(Schema):
    title: OneToOneFiftyString
    starts_at: AwareDatetime


class EventInListSchema(ModelSchema):
    id: UUID
    category: Event.Category

    class Meta:
        model = Event
        fields = ["title", "starts_at", "venue", "city", "category"]


class EventDetailSchema(ModelSchema):
    id: UUID
    organizer_id: UUID
    category: Event.Category
    visibility: Event.Visibility

    class Meta:
        model = Event
        fields = ["title", "description", "starts_at", "venue", "address", "city", "category", "visibility"]


class EventAdminSchema(EventDetailSchema):
    private_access_token: str
    is_active: bool
