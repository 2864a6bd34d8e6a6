"""Earliest-displayable-day rules tied to the account lifecycle."""

from __future__ import annotations

import logging
from typing import Optional

from weightline.tracking.day_keys import (
    DayKey,
    DayKeyConverter,
    TimestampLike,
    add_days,
    local_day_key,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

# The record store serves the last 366 days, i.e. today plus 365 days back
DEFAULT_HISTORY_LOOKBACK_DAYS = 365


def _signup_day_key(
    signup_at: Optional[TimestampLike], to_day_key: DayKeyConverter
) -> Optional[DayKey]:
    if signup_at is None:
        return None
    try:
        return to_day_key(parse_timestamp(signup_at))
    except (TypeError, ValueError):
        logger.debug("Ignoring unparsable signup timestamp %r", signup_at)
        return None


def resolve_min_day_key(
    signup_at: Optional[TimestampLike],
    today: DayKey,
    to_day_key: DayKeyConverter = local_day_key,
) -> DayKey:
    """
    Earliest day the weight module may display.

    This is the local day of the account's signup. Without a usable signup
    timestamp no history is allowed and ``today`` is returned; a signup that
    lies in the future is also pulled back to ``today``.

    Args:
        signup_at: Account creation timestamp (datetime, ISO string or epoch)
        today: Current local day key
        to_day_key: Timestamp -> local day key converter

    Returns:
        A day key no later than ``today``
    """
    signup_key = _signup_day_key(signup_at, to_day_key)
    if signup_key is None:
        return today
    return min(signup_key, today)


def clamp_day_key(requested: DayKey, min_key: DayKey, max_key: DayKey) -> DayKey:
    """
    Clamp a day key into ``[min_key, max_key]``.

    When the bounds are inverted ``max_key`` wins, so a selection can never
    land after today.
    """
    if requested > max_key:
        return max_key
    if requested < min_key:
        return min(min_key, max_key)
    return requested


def can_trust_full_history(
    signup_at: Optional[TimestampLike],
    today: DayKey,
    lookback_days: int = DEFAULT_HISTORY_LOOKBACK_DAYS,
    to_day_key: DayKeyConverter = local_day_key,
) -> bool:
    """
    Whether the fetched window can be assumed to hold every record ever made.

    True when the account was created inside the store's lookback window, in
    which case the earliest fetched record is also the first-ever record. This
    is a heuristic: it only looks at the signup date, not at the records, and
    accounts created right at the edge of the window can still be judged
    wrongly.
    """
    signup_key = _signup_day_key(signup_at, to_day_key)
    if signup_key is None:
        return False
    return signup_key >= add_days(today, -lookback_days)
