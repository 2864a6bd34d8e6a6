"""Local calendar-day keys.

A day key is the ``YYYY-MM-DD`` string of the calendar day a timestamp falls on
in the user's local timezone. Keys are fixed width, so plain string comparison
orders them chronologically, and all window arithmetic in this package is done
on keys rather than on timestamps.

The timezone is never read implicitly inside the engine: callers pass a
converter built by :func:`day_key_converter` (``local_day_key`` uses the host
zone) so that timelines are reproducible in tests.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional, Union

DayKey = str
DayKeyConverter = Callable[[datetime], DayKey]
TimestampLike = Union[datetime, str, int, float]


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Parse a record or signup timestamp into an aware datetime.

    Accepts a ``datetime``, an ISO-8601 string (a trailing ``Z`` is allowed)
    or epoch seconds. Naive values are taken to be UTC, which is how the
    backing store serializes them.

    Raises:
        ValueError: If a string or number cannot be interpreted as a timestamp
        TypeError: If the value is of an unsupported type
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"epoch value out of range: {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise TypeError(f"unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def day_key_converter(tz: Optional[tzinfo] = None) -> DayKeyConverter:
    """Build a timestamp -> day key converter for a timezone (None = host zone)."""

    def convert(ts: datetime) -> DayKey:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(tz).date().isoformat()

    return convert


local_day_key: DayKeyConverter = day_key_converter(None)


def to_day_key(d: date) -> DayKey:
    """Return the key of a calendar date."""
    return d.isoformat()


def parse_day_key(key: DayKey) -> date:
    """Parse a ``YYYY-MM-DD`` key, raising ``ValueError`` if malformed."""
    if len(key) != 10:
        raise ValueError(f"invalid day key: {key!r}")
    return date.fromisoformat(key)


def add_days(key: DayKey, days: int) -> DayKey:
    """Shift a day key by a (possibly negative) number of calendar days."""
    return to_day_key(parse_day_key(key) + timedelta(days=days))


def day_keys_between(start: DayKey, end: DayKey) -> list[DayKey]:
    """All day keys from ``start`` to ``end`` inclusive, ascending."""
    first = parse_day_key(start)
    count = (parse_day_key(end) - first).days + 1
    return [to_day_key(first + timedelta(days=i)) for i in range(max(count, 0))]


def today_key(tz: Optional[tzinfo] = None) -> DayKey:
    """Key of the current day in ``tz`` (host zone when None)."""
    return to_day_key(datetime.now(tz).date())


def day_key_to_local_start(key: DayKey, tz: Optional[tzinfo] = None) -> datetime:
    """Midnight at the start of a day key, as an aware datetime."""
    start = datetime.combine(parse_day_key(key), time.min)
    if tz is None:
        return start.astimezone()
    return start.replace(tzinfo=tz)
