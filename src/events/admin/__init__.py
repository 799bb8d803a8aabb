# src/events/admin/__init__.py
"""Events admin module.

Django autodiscover imports this module, which registers the admin classes
through the @admin.register decorators in the submodules.
"""

from events.admin.event import EventAdmin, PromoCodeAdmin, ReferralAdmin, TierAdmin, TicketTypeAdmin
from events.admin.order import OrderAdmin, ReservationAdmin
from events.admin.ticket import ScanLogAdmin, TicketAdmin, TicketTransferAdmin

__all__ = [
    # Event
    "EventAdmin",
    "TicketTypeAdmin",
    "TierAdmin",
    "PromoCodeAdmin",
    "ReferralAdmin",
    # Order
    "OrderAdmin",
    "ReservationAdmin",
    # Ticket
    "TicketAdmin",
    "TicketTransferAdmin",
    "ScanLogAdmin",
]
