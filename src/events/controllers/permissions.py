from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from events import models


class RootPermission(BasePermission):
    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Must implement abstract method. This is due to an error in Ninja Extra.

        This Method will be ignored, only has_object_permission will be called.
        """
        return True


class IsOrganizer(BasePermission):
    message = "Only organizers can do this."

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Organizer accounts and superusers."""
        user = request.user
        return bool(user and user.is_authenticated and user.is_organizer)  # type: ignore[union-attr]


class IsVendor(BasePermission):
    message = "Only vendors can do this."

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_vendor)  # type: ignore[union-attr]


class EventPermission(RootPermission):
    def has_object_permission(
        self,
        request: HttpRequest,
        controller: ControllerBase,
        obj: models.Event,
    ) -> bool:
        """The event's organizer, or a superuser."""
        return bool(request.user.is_superuser or obj.organizer_id == request.user.id)  # type: ignore[union-attr]

