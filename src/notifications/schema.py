"""Schemas for notification API."""

import typing as t
from datetime import datetime
from uuid import UUID

from ninja import Schema

from notifications.enums import DeliveryStatus, NotificationType


class NotificationSchema(Schema):
    """Schema for notification response."""

    id: UUID
    notification_type: NotificationType
    title: str
    context: dict[str, t.Any]
    email_status: DeliveryStatus
    read_at: datetime | None
    created_at: datetime


class UnreadCountSchema(Schema):
    count: int
