# devtoolkit/utils/timeutil.py
"""Clock helpers

Timestamps are stored as naive UTC datetimes.
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_in(tz_name: str = 'UTC') -> date:
    """Calendar day in the server's reference timezone"""
    return datetime.now(ZoneInfo(tz_name)).date()
