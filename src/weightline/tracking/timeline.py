"""Sparse-to-dense daily weight timeline.

Records come from a bounded fetch window and are unordered. The builder turns
them into one entry per calendar day:

- several records on one day collapse to the latest one, keeping a count for
  drill-down
- a day without records repeats the last known value (carry-forward), but only
  from the first eligible day onwards
- when the fetch window is trusted to be the user's full history, days before
  the first-ever record are hidden altogether
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from weightline.tracking.day_keys import (
    DayKey,
    DayKeyConverter,
    add_days,
    day_keys_between,
    local_day_key,
)
from weightline.tracking.models import Record, TimelineEntry


def recency_key(record: Record) -> tuple:
    """Sort key ordering records oldest to newest.

    Identical timestamps are ordered by record id so the choice of a day's
    representative never depends on input order.
    """
    return (record.measured_at, record.id)


def build_timeline(
    records: Iterable[Record],
    display_end: DayKey,
    display_days: int,
    fetch_window_days: int,
    min_day_key: DayKey,
    trust_full_history: bool,
    to_day_key: DayKeyConverter = local_day_key,
) -> list[TimelineEntry]:
    """
    Build a gap-filled daily timeline ending at ``display_end``.

    Args:
        records: Records for one user, in any order
        display_end: Last (most recent) day to show
        display_days: Number of days to show, capped at ``fetch_window_days``
        fetch_window_days: Days of history the records were fetched for,
            ending at ``display_end``; carry-forward is seeded from this range
        min_day_key: Earliest day the module may display (see
            :func:`resolve_min_day_key`)
        trust_full_history: Whether the records are known to be the user's
            complete history
        to_day_key: Timestamp -> local day key converter

    Returns:
        Entries most-recent-first. Normally ``display_days`` long; shorter when
        full history is trusted and the first record is inside the window.
    """
    if display_days <= 0 or fetch_window_days <= 0:
        return []
    display_days = min(display_days, fetch_window_days)

    fetch_start = add_days(display_end, -(fetch_window_days - 1))

    keyed = [(to_day_key(record.measured_at), record) for record in records]
    earliest_key: Optional[DayKey] = min((key for key, _ in keyed), default=None)

    by_day: dict[DayKey, list[Record]] = defaultdict(list)
    for key, record in keyed:
        if fetch_start <= key <= display_end:
            by_day[key].append(record)

    latest_by_day = {
        key: max(day_records, key=recency_key) for key, day_records in by_day.items()
    }

    if trust_full_history and earliest_key is not None:
        first_eligible_key = earliest_key
    else:
        first_eligible_key = min_day_key

    timeline: list[TimelineEntry] = []
    last_known_value: Optional[float] = None
    for key in day_keys_between(fetch_start, display_end):
        latest = latest_by_day.get(key)
        if latest is not None:
            last_known_value = latest.primary_value
            timeline.append(
                TimelineEntry(
                    date=key,
                    value=latest.primary_value,
                    secondary_value=latest.secondary_value,
                    source_record_id=latest.id,
                    has_entry=True,
                    carried_forward=False,
                    entry_count=len(by_day[key]),
                    measured_at=latest.measured_at,
                )
            )
            continue

        carry = last_known_value is not None and key >= first_eligible_key
        timeline.append(
            TimelineEntry(
                date=key,
                value=last_known_value if carry else None,
                secondary_value=None,
                source_record_id=None,
                has_entry=False,
                carried_forward=carry,
                entry_count=0,
            )
        )

    window = timeline[-display_days:]
    window.reverse()

    # Without full history a long-tenured user may have older records outside
    # the fetch window, so nothing is hidden in that case.
    if trust_full_history and earliest_key is not None:
        window = [day for day in window if day.date >= earliest_key]

    return window
