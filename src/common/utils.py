from datetime import datetime, timedelta

SATURDAY = 5


def add_business_days(start: datetime, days: int) -> datetime:
    """Add `days` business days (Monday to Friday) to `start`.

    The time of day is preserved. A start on a weekend counts from the
    following Monday, so Saturday + 1 business day is the following Tuesday's
    equivalent of Monday + 1.
    """
    if days < 0:
        raise ValueError("days must be non-negative")
    current = start
    while current.weekday() >= SATURDAY:
        current += timedelta(days=1)
    full_weeks, remainder = divmod(days, 5)
    current += timedelta(weeks=full_weeks)
    while remainder:
        current += timedelta(days=1)
        if current.weekday() < SATURDAY:
            remainder -= 1
    return current

