from .event import Event, TicketType, Tier, TierAllocation
from .order import DEFERRED_PAYMENT_METHODS, Order, OrderItem, PaymentMethod, Reservation
from .promo import PromoCode
from .referral import Referral
from .ticket import ScanLog, ScanReason, Ticket, TicketTransfer

__all__ = [
    "DEFERRED_PAYMENT_METHODS",
    "Event",
    "Order",
    "OrderItem",
    "PaymentMethod",
    "PromoCode",
    "Referral",
    "Reservation",
    "ScanLog",
    "ScanReason",
    "Ticket",
    "TicketTransfer",
    "TicketType",
    "Tier",
    "TierAllocation",
]
