import typing as t

import structlog
from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import User


class UserAwareController(ControllerBase):
    def maybe_user(self) -> User | AnonymousUser:
        """Get the user for this request, anonymous on public endpoints."""
        return t.cast(User | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> User:
        """Get the authenticated user and bind it to the request's log context."""
        user = t.cast(User, self.context.request.user)  # type: ignore[union-attr]
        structlog.contextvars.bind_contextvars(user_id=str(user.pk), user_role=user.role)
        return user
