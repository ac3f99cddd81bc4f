"""Calendar-day helpers working in epoch milliseconds."""

import time
from datetime import datetime, timedelta


def now_ms() -> int:
    """Current time in milliseconds since epoch."""
    return int(time.time() * 1000)


def day_bounds_ms(moment: datetime | None = None) -> tuple[int, int]:
    """Get [start, end) of the calendar day containing moment.

    Naive datetimes are read as system local time; aware ones use their own
    zone. Both bounds are local midnights, so 23h and 25h DST days come out
    right.

    Args:
        moment: Point in time (defaults to now, local time)

    Returns:
        Tuple of (start_ms, end_ms)
    """
    moment = moment or datetime.now()
    day = moment.date()
    start = datetime.combine(day, datetime.min.time(), tzinfo=moment.tzinfo)
    end = datetime.combine(day + timedelta(days=1), datetime.min.time(), tzinfo=moment.tzinfo)
    return int(start.timestamp() * 1000), int(end.timestamp() * 1000)
