"""Domain errors of the ticketing core.

Every error carries a machine-readable ``reason`` and the HTTP status it is
served with. They are user-facing and are never collapsed into a generic
failure.
"""


class TicketingError(Exception):
    reason = "TICKETING_ERROR"
    status_code = 400
    default_message = "The operation could not be completed."

    def __init__(self, message: str | None = None, *, reason: str | None = None) -> None:
        self.message = message or self.default_message
        if reason:
            self.reason = reason
        super().__init__(self.message)


class OutOfStock(TicketingError):
    """Requested quantity exceeds what remains of the allocation."""

    reason = "OUT_OF_STOCK"
    status_code = 409
    default_message = "Not enough tickets left for this tier."


class InvalidState(TicketingError):
    """The transition is not permitted from the current lifecycle state."""

    reason = "INVALID_STATE"
    status_code = 409
    default_message = "The ticket cannot do that in its current state."


class NotOwner(TicketingError):
    reason = "NOT_OWNER"
    status_code = 403
    default_message = "You do not own this ticket."


class NotRegistered(TicketingError):
    """Transfer recipient has no account."""

    reason = "NOT_REGISTERED"
    status_code = 404
    default_message = "There is no account registered with that email."


class InvalidCode(TicketingError):
    reason = "INVALID_CODE"
    status_code = 400
    default_message = "The code is not valid."


class InvalidSignature(TicketingError):
    reason = "INVALID_SIGNATURE"
    status_code = 400
    default_message = "The payload is malformed or its signature does not match."


class ExpiredWindow(TicketingError):
    """A payment or ticket validity window has elapsed."""

    reason = "EXPIRED_WINDOW"
    status_code = 410
    default_message = "The time window for this operation has elapsed."


class MisconfiguredTiers(TicketingError):
    """Overlapping tier windows or allocations that do not add up."""

    reason = "MISCONFIGURED_TIERS"
    status_code = 400
    default_message = "The event's pricing tiers are misconfigured."
