"""Weight tracking timeline module.

Turns an unordered, window-bounded list of weigh-in records into a dense,
most-recent-first daily timeline for display.

Key components:
- Local day keys (timezone-injected timestamp -> ``YYYY-MM-DD`` conversion)
- Date-boundary resolution (signup day, selection clamping, history trust)
- Timeline building (multi-entry collapse, carry-forward, pre-history hiding)
- Latest-per-day lookups for summaries and the day drill-down
"""

from __future__ import annotations

from weightline.tracking.boundaries import (
    can_trust_full_history,
    clamp_day_key,
    resolve_min_day_key,
)
from weightline.tracking.daily_latest import (
    derive_daily_latest,
    entries_for_day,
    latest_record,
    latest_with_secondary,
)
from weightline.tracking.day_keys import day_key_converter, local_day_key
from weightline.tracking.models import DailyLatest, Record, TimelineEntry
from weightline.tracking.timeline import build_timeline

__all__ = [
    "DailyLatest",
    "Record",
    "TimelineEntry",
    "build_timeline",
    "can_trust_full_history",
    "clamp_day_key",
    "day_key_converter",
    "derive_daily_latest",
    "entries_for_day",
    "latest_record",
    "latest_with_secondary",
    "local_day_key",
    "resolve_min_day_key",
]
