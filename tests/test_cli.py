"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from weightline.cli import app
from weightline.config import settings as settings_module

runner = CliRunner()


@pytest.fixture
def records_file(tmp_path):
    """A JSON export with a recent signup and two weigh-ins."""
    path = tmp_path / "records.json"
    path.write_text(json.dumps({
        "signup_at": "2025-03-01T12:00:00Z",
        "records": [
            {"id": "a", "measuredAt": "2025-03-01T08:00:00Z", "primaryValue": 150.0},
            {"id": "b", "measuredAt": "2025-03-05T08:00:00Z", "primaryValue": 149.0,
             "secondaryValue": 20.5},
            {"id": "c", "measuredAt": "2025-03-05T18:00:00Z", "primaryValue": 149.4},
        ],
    }))
    return path


class TestMainCommands:
    """Tests for top-level CLI behavior."""

    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "timeline" in result.output.lower()

    def test_timeline_requires_file(self) -> None:
        result = runner.invoke(app, ["timeline"])
        assert result.exit_code != 0


class TestTimelineCommand:
    """Tests for the timeline command."""

    def test_json_output(self, records_file) -> None:
        result = runner.invoke(app, [
            "timeline", str(records_file),
            "--today", "2025-03-05", "--tz", "UTC",
            "--days", "7", "--fetch-days", "14", "--json",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        data = payload["data"]
        assert payload["success"] is True
        assert data["min_date"] == "2025-03-01"
        assert data["trusted_full_history"] is True
        # days before the first weigh-in are hidden
        assert [e["date"] for e in data["entries"]] == [
            "2025-03-05", "2025-03-04", "2025-03-03", "2025-03-02", "2025-03-01",
        ]
        assert data["entries"][0]["value"] == 149.4
        assert data["entries"][0]["entry_count"] == 2
        assert data["entries"][1]["carried_forward"] is True
        assert data["entries"][1]["value"] == 150.0

    def test_selected_date_clamped_to_today(self, records_file) -> None:
        result = runner.invoke(app, [
            "timeline", str(records_file),
            "--date", "2026-01-01", "--today", "2025-03-05", "--tz", "UTC", "--json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["display_end"] == "2025-03-05"

    def test_table_output(self, records_file) -> None:
        result = runner.invoke(app, [
            "timeline", str(records_file), "--today", "2025-03-05", "--tz", "UTC",
        ])

        assert result.exit_code == 0
        assert "2025-03-05" in result.output
        assert "carried" in result.output

    def test_missing_file(self, tmp_path) -> None:
        result = runner.invoke(app, ["timeline", str(tmp_path / "absent.json")])
        assert result.exit_code == 1

    def test_invalid_date(self, records_file) -> None:
        result = runner.invoke(app, ["timeline", str(records_file), "--today", "March 5"])
        assert result.exit_code == 1

    def test_unknown_timezone(self, records_file) -> None:
        result = runner.invoke(app, ["timeline", str(records_file), "--tz", "Mars/Olympus"])
        assert result.exit_code == 1


class TestDayCommand:
    """Tests for the day drill-down command."""

    def test_lists_entries_newest_first(self, records_file) -> None:
        result = runner.invoke(app, [
            "day", str(records_file), "2025-03-05", "--today", "2025-03-05", "--tz", "UTC", "--json",
        ])

        assert result.exit_code == 0
        entries = json.loads(result.stdout)["data"]["entries"]
        assert [e["id"] for e in entries] == ["c", "b"]

    def test_date_before_signup_clamped(self, records_file) -> None:
        result = runner.invoke(app, [
            "day", str(records_file), "2024-01-01", "--today", "2025-03-05", "--tz", "UTC", "--json",
        ])

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["date"] == "2025-03-01"
        assert [e["id"] for e in data["entries"]] == ["a"]


class TestLatestCommand:
    """Tests for the latest command."""

    def test_latest(self, records_file) -> None:
        result = runner.invoke(app, ["latest", str(records_file), "--tz", "UTC", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["latest_value"] == 149.4
        assert data["latest_secondary_value"] == 20.5
        assert data["days_logged"] == 2
        assert "149.4" in json.loads(result.stdout)["human_summary"]


class TestClampCommand:
    """Tests for the clamp command."""

    def test_clamp_before_signup(self) -> None:
        result = runner.invoke(app, [
            "clamp", "2020-01-01", "--signup", "2024-06-01T12:00:00Z",
            "--today", "2025-01-01", "--tz", "UTC", "--json",
        ])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["date"] == "2024-06-01"

    def test_clamp_without_signup(self) -> None:
        result = runner.invoke(app, ["clamp", "2024-12-01", "--today", "2025-01-01", "--tz", "UTC"])

        assert result.exit_code == 0
        assert "2025-01-01" in result.output


class TestInvalidConfiguration:
    """Tests for a broken ~/.weightline/config.yaml."""

    @pytest.fixture
    def bad_config_home(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        config_dir = home / ".weightline"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("timeline:\n  display_days: 0\n")
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setattr(settings_module, "_settings", None)
        return home

    def test_json_error_envelope(self, bad_config_home, records_file) -> None:
        result = runner.invoke(app, ["latest", str(records_file), "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "display_days must be at least 1" in payload["errors"][0]

    def test_plain_error_message(self, bad_config_home, records_file) -> None:
        result = runner.invoke(app, ["timeline", str(records_file)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
