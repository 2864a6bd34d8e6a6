"""Data models for weigh-in records and derived daily timelines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from weightline.tracking.day_keys import DayKey, parse_timestamp

# Accepted spellings for each field when building a Record from a row
ID_KEYS = ("id", "record_id")
MEASURED_AT_KEYS = ("measuredAt", "measured_at", "weighed_at")
PRIMARY_KEYS = ("primaryValue", "primary_value", "weight_lb")
SECONDARY_KEYS = ("secondaryValue", "secondary_value", "body_fat_percent")


def _first_present(row: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    # pandas hands back NaN for empty CSV cells
    number = float(value)
    if number != number:
        return None
    return number


@dataclass(frozen=True)
class Record:
    """A single weigh-in measurement."""

    id: str
    measured_at: datetime
    primary_value: float
    secondary_value: Optional[float] = None  # e.g. body fat %
    note: Optional[str] = None

    def __post_init__(self) -> None:
        # Naive timestamps are UTC, matching parse_timestamp
        if self.measured_at.tzinfo is None:
            object.__setattr__(
                self, "measured_at", self.measured_at.replace(tzinfo=timezone.utc)
            )

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "Record":
        """Build a record from a store row or an exported JSON object.

        Raises:
            ValueError: If the id, timestamp or primary value is missing or
                malformed.
        """
        record_id = _first_present(row, ID_KEYS)
        if record_id is None or str(record_id) == "":
            raise ValueError(f"record has no id: {row!r}")

        raw_ts = _first_present(row, MEASURED_AT_KEYS)
        if raw_ts is None:
            raise ValueError(f"record {record_id} has no timestamp")
        try:
            measured_at = parse_timestamp(raw_ts)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"record {record_id} has an invalid timestamp {raw_ts!r}") from exc

        try:
            primary = _optional_float(_first_present(row, PRIMARY_KEYS))
            secondary = _optional_float(_first_present(row, SECONDARY_KEYS))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"record {record_id} has a non-numeric value") from exc
        if primary is None:
            raise ValueError(f"record {record_id} has no primary value")

        note = row.get("note")
        return cls(
            id=str(record_id),
            measured_at=measured_at,
            primary_value=primary,
            secondary_value=secondary,
            note=note if isinstance(note, str) and note else None,
        )


@dataclass(frozen=True)
class TimelineEntry:
    """One calendar day of a derived timeline."""

    date: DayKey
    value: Optional[float]
    secondary_value: Optional[float]
    source_record_id: Optional[str]
    has_entry: bool
    carried_forward: bool
    entry_count: int
    measured_at: Optional[datetime] = None

    @property
    def has_multiple_entries(self) -> bool:
        """Whether the day should offer drill-down to its individual records."""
        return self.entry_count > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "value": self.value,
            "secondary_value": self.secondary_value,
            "source_record_id": self.source_record_id,
            "has_entry": self.has_entry,
            "carried_forward": self.carried_forward,
            "entry_count": self.entry_count,
            "measured_at": self.measured_at.isoformat() if self.measured_at else None,
        }


@dataclass(frozen=True)
class DailyLatest:
    """The latest record of a single day."""

    date_key: DayKey
    record_id: str
    measured_at: datetime
    primary_value: float
    secondary_value: Optional[float]
