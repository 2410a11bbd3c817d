"""Calendar-date handling for aggregator data.

Aggregators report transaction dates as ``YYYY-MM-DD`` strings that name a
calendar day, not an instant. Dates are built from their year, month and
day components so the server's local time zone never shifts them.
"""

import re
from datetime import date, datetime

_DATE_PREFIX = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")


def parse_calendar_date(value: str | date | datetime) -> date:
    """Parse a calendar date, keeping exactly the given day.

    Accepts a ``date``, an aware or naive ``datetime`` (its own calendar
    fields are used) or a string starting with ``YYYY-MM-DD``; anything
    after the day (``T00:00:00Z``, offsets) is ignored.

    Raises:
        ValueError: If the value has no valid ``YYYY-MM-DD`` prefix
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value

    match = _DATE_PREFIX.match(value or "")
    if not match:
        raise ValueError(f"Invalid calendar date: {value!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)

