"""Load weigh-in records from exported JSON or CSV files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from weightline.tracking.models import ID_KEYS, MEASURED_AT_KEYS, PRIMARY_KEYS, Record

logger = logging.getLogger(__name__)


class RecordLoadError(ValueError):
    """Raised when a records file cannot be read at all."""


@dataclass
class LoadResult:
    """Records read from a file plus bookkeeping about dropped rows."""

    records: list[Record] = field(default_factory=list)
    skipped: int = 0
    signup_at: Optional[str] = None


class RecordLoader:
    """Reads records for one user and drops rows that cannot be parsed.

    The timeline engine does not validate its input, so every malformed row
    (missing id, unparsable timestamp, non-numeric value) is removed here.
    """

    # Each required column may use any of the spellings Record.from_dict accepts
    REQUIRED_COLUMNS = [ID_KEYS, MEASURED_AT_KEYS, PRIMARY_KEYS]

    def load(self, path: Path) -> LoadResult:
        """Load records from ``path``, choosing the format by file suffix.

        Raises:
            RecordLoadError: If the file is missing, unreadable or of an
                unsupported type
        """
        if not path.exists():
            raise RecordLoadError(f"Records file not found: {path}")

        suffix = path.suffix.lower()
        if suffix == ".json":
            return self.load_from_json(path)
        if suffix == ".csv":
            return self.load_from_csv(path)
        raise RecordLoadError(f"Unsupported records file type: {path.suffix or path.name}")

    def load_from_json(self, json_path: Path) -> LoadResult:
        """Load records from a JSON export.

        Either a bare list of record objects, or an object of the form
        ``{"signup_at": "...", "records": [...]}``.
        """
        try:
            with open(json_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise RecordLoadError(f"Could not read {json_path}: {exc}") from exc

        signup_at = None
        if isinstance(data, dict):
            signup_at = data.get("signup_at")
            data = data.get("records", [])
        if not isinstance(data, list):
            raise RecordLoadError(f"{json_path} does not contain a list of records")

        result = self._parse_rows(data)
        result.signup_at = signup_at
        return result

    def load_from_csv(self, csv_path: Path) -> LoadResult:
        """Load records from a CSV export.

        CSV format:
            id,measured_at,primary_value,secondary_value,note
            a1,2025-03-10T07:30:00Z,182.4,21.5,after run

        The record store's own column names (weighed_at, weight_lb,
        body_fat_percent) are accepted as well.
        """
        try:
            df = pd.read_csv(csv_path, dtype=str)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise RecordLoadError(f"Could not read {csv_path}: {exc}") from exc

        missing = [
            " or ".join(names)
            for names in self.REQUIRED_COLUMNS
            if not any(name in df.columns for name in names)
        ]
        if missing:
            raise RecordLoadError(f"Missing required columns: {', '.join(missing)}")

        rows = [
            {key: value for key, value in row.items() if not pd.isna(value)}
            for _, row in df.iterrows()
        ]
        return self._parse_rows(rows)

    def _parse_rows(self, rows: list[Any]) -> LoadResult:
        result = LoadResult()
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                logger.warning("Skipping row %d: not an object", index)
                result.skipped += 1
                continue
            try:
                result.records.append(Record.from_dict(row))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping row %d: %s", index, exc)
                result.skipped += 1

        logger.info(
            "Loaded %d records (%d skipped)", len(result.records), result.skipped
        )
        return result


def load_records(path: Path) -> LoadResult:
    """Convenience wrapper around :class:`RecordLoader`."""
    return RecordLoader().load(path)
