"""Ticketing rules: validity windows, payment holds and QR caching."""

from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="ARS")

# Tickets stay valid for this many business days (Mon-Fri) after purchase.
TICKET_VALIDITY_BUSINESS_DAYS = config("TICKET_VALIDITY_BUSINESS_DAYS", default=48, cast=int)

# Inventory hold while the buyer completes an online checkout. Stripe Checkout
# rejects sessions that expire in less than 30 minutes.
ONLINE_PAYMENT_WINDOW_MINUTES = config("ONLINE_PAYMENT_WINDOW_MINUTES", default=35, cast=int)

# Cash and bank transfer orders keep their pending tickets for this long.
DEFERRED_PAYMENT_WINDOW_DAYS = config("DEFERRED_PAYMENT_WINDOW_DAYS", default=7, cast=int)

TICKET_QR_CACHE_SECONDS = config("TICKET_QR_CACHE_SECONDS", default=60 * 60 * 24, cast=int)

MAX_TICKETS_PER_ORDER_LINE = config("MAX_TICKETS_PER_ORDER_LINE", default=10, cast=int)
