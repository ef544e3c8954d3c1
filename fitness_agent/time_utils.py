"""
Zoned day helpers.

Every "today" in the agent is the calendar day in the athlete's configured
IANA zone, never host-local time or UTC midnight.
"""
from datetime import date, datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo


class ZonedClock:
    """Supplies the zoned calendar day. `now` can be swapped out in tests."""

    def __init__(self, tz_name: str, now: Optional[Callable[[ZoneInfo], datetime]] = None):
        self.tz_name = tz_name
        self.zone = ZoneInfo(tz_name)
        self._now = now or (lambda zone: datetime.now(zone))

    def now(self) -> datetime:
        return self._now(self.zone)

    def today(self) -> date:
        return self.now().date()

    @staticmethod
    def end_of_week(day: date) -> date:
        """The Sunday on or after `day`."""
        return day + timedelta(days=6 - day.weekday())


def fixed_clock(tz_name: str, day: date) -> ZonedClock:
    """Clock pinned to 09:00 on `day` in the given zone."""
    return ZonedClock(tz_name, now=lambda zone: datetime(day.year, day.month, day.day, 9, 0, tzinfo=zone))
