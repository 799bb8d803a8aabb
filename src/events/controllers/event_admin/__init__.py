"""Event admin controllers package.

This package splits the organizer endpoints into logical groupings.
"""

from .core import EventAdminCoreController, EventAdminListController
from .orders import EventAdminOrdersController
from .pricing import EventAdminPricingController
from .promo import EventAdminPromoCodesController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminListController,
    EventAdminCoreController,
    EventAdminPricingController,
    EventAdminOrdersController,
    EventAdminPromoCodesController,
]

__all__ = [
    "EventAdminListController",
    "EventAdminCoreController",
    "EventAdminPricingController",
    "EventAdminOrdersController",
    "EventAdminPromoCodesController",
    "EVENT_ADMIN_CONTROLLERS",
]
