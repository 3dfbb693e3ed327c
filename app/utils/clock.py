"""Clock helpers used at the service boundary.

Engine functions receive ``now`` / ``today`` as arguments; only services
read the clock, through these helpers, so tests can pin time.
"""

from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_today(now: datetime, tz_name: str) -> date:
    """Calendar date of ``now`` in ``tz_name`` (due dates carry no time zone)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()
