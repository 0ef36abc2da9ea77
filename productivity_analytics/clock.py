"""Injectable clock and calendar-date bucketing.

All date arithmetic in the package goes through :class:`Clock` so that a
single timezone policy applies everywhere: timestamps are converted to the
clock's zone (UTC unless configured otherwise) and naive values are taken to
already be in that zone. Unparsable input never raises; it buckets to ``None``.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC = timezone.utc


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Return a tzinfo for ``name``, falling back to UTC for unknown zones."""

    if not name or str(name).strip().upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(str(name).strip())
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def parse_timestamp(value, tz: tzinfo = UTC) -> Optional[datetime]:
    """Convert a raw timestamp to an aware datetime in ``tz``, or ``None``."""

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        # Epoch milliseconds, as written by the record store.
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=tz)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    try:
        return parsed.astimezone(tz)
    except (OverflowError, ValueError):
        return None


def parse_date(value, tz: tzinfo = UTC) -> Optional[date]:
    """Return the calendar date of ``value`` in ``tz``, or ``None``.

    Plain ``date`` objects and ``YYYY-MM-DD`` strings are already calendar
    dates and are returned without any zone conversion.
    """

    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    parsed = parse_timestamp(value, tz)
    return parsed.date() if parsed is not None else None


class Clock:
    """Supplies "now" and buckets timestamps into calendar dates."""

    def __init__(self, now: Optional[datetime] = None, tz: tzinfo = UTC) -> None:
        self.tz = tz
        if now is None:
            now = datetime.now(tz)
        self._now = parse_timestamp(now, tz) or datetime.now(tz)

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()

    def days_ago(self, n: int) -> date:
        return self.today() - timedelta(days=n)

    def days_ahead(self, n: int) -> date:
        return self.today() + timedelta(days=n)

    def localize(self, value) -> Optional[datetime]:
        return parse_timestamp(value, self.tz)

    def bucket(self, value) -> Optional[date]:
        """Drop time-of-day from ``value``; ``None`` marks an invalid timestamp."""

        return parse_date(value, self.tz)

    def hour(self, value) -> Optional[int]:
        parsed = self.localize(value)
        return parsed.hour if parsed is not None else None

    def within_last(self, day: Optional[date], days: int) -> bool:
        """True when ``day`` falls in the trailing ``days`` calendar days, today included."""

        if day is None or days <= 0:
            return False
        return self.days_ago(days - 1) <= day <= self.today()
