"""Per-day and overall "latest weigh-in" lookups."""

from __future__ import annotations

from typing import Iterable, Optional

from weightline.tracking.day_keys import DayKey, DayKeyConverter, local_day_key
from weightline.tracking.models import DailyLatest, Record
from weightline.tracking.timeline import recency_key


def derive_daily_latest(
    records: Iterable[Record],
    to_day_key: DayKeyConverter = local_day_key,
) -> list[DailyLatest]:
    """Latest record of each day that has records, ascending by day."""
    latest: dict[DayKey, Record] = {}
    for record in records:
        key = to_day_key(record.measured_at)
        current = latest.get(key)
        if current is None or recency_key(record) > recency_key(current):
            latest[key] = record

    return [
        DailyLatest(
            date_key=key,
            record_id=record.id,
            measured_at=record.measured_at,
            primary_value=record.primary_value,
            secondary_value=record.secondary_value,
        )
        for key, record in sorted(latest.items())
    ]


def latest_record(records: Iterable[Record]) -> Optional[Record]:
    """Most recent record overall, or None."""
    return max(records, key=recency_key, default=None)


def latest_with_secondary(records: Iterable[Record]) -> Optional[Record]:
    """Most recent record that carries a secondary value (e.g. body fat)."""
    return latest_record(r for r in records if r.secondary_value is not None)


def entries_for_day(
    records: Iterable[Record],
    day_key: DayKey,
    to_day_key: DayKeyConverter = local_day_key,
) -> list[Record]:
    """All records of one day, newest first, for the day drill-down view."""
    day_records = [r for r in records if to_day_key(r.measured_at) == day_key]
    return sorted(day_records, key=recency_key, reverse=True)
