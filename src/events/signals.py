"""Domain events emitted by the ticketing core.

Receivers live in the notifications app; senders never wait on delivery.
"""

from django.dispatch import Signal

# kwargs: ticket (Ticket)
ticket_issued = Signal()

# kwargs: ticket (the recipient's new Ticket), from_user, to_user
ticket_transferred = Signal()

# kwargs: order (Order) -- deferred orders awaiting cash / bank transfer payment
payment_pending = Signal()
