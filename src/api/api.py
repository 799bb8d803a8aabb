from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import InterfaceError, OperationalError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from accounts.controllers.account import AccountController
from accounts.controllers.auth import AuthController
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.event_admin import EVENT_ADMIN_CONTROLLERS
from events.controllers.events import EventController
from events.controllers.gate import GateController
from events.controllers.orders import OrderController
from events.controllers.referrals import ReferralClickController, VendorReferralController
from events.controllers.stripe_webhook import StripeWebhookController
from events.controllers.tickets import TicketController
from events.exceptions import TicketingError
from notifications.controllers import NotificationController

from .exception_handlers import (
    handle_django_validation_error,
    handle_general_exception,
    handle_storage_error,
    handle_ticketing_error,
)

api = NinjaExtraAPI(
    title="Taquilla API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Taquilla API {settings.VERSION}",
    app_name=f"taquilla-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse}, url_name="version")
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk}, url_name="healthcheck")
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    # Auth/Account controllers
    AuthController,
    AccountController,
    # Event controllers
    EventController,
    *EVENT_ADMIN_CONTROLLERS,
    OrderController,
    TicketController,
    GateController,
    VendorReferralController,
    ReferralClickController,
    StripeWebhookController,
    NotificationController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    TicketingError: handle_ticketing_error,
    OperationalError: handle_storage_error,
    InterfaceError: handle_storage_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
