"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import tzinfo
from pathlib import Path
from typing import NoReturn, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
import yaml
from rich.console import Console
from rich.table import Table

from weightline.config import Settings, get_settings
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
from weightline.tracking.day_keys import (
    DayKey,
    day_key_converter,
    parse_day_key,
    today_key,
)
from weightline.tracking.loader import LoadResult, RecordLoadError, load_records
from weightline.tracking.timeline import build_timeline

app = typer.Typer(
    help="Gap-filled daily weight timelines from exported weigh-ins",
    no_args_is_help=True,
)
console = Console()


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict) -> None:
    """Output JSON response to stdout."""
    print(json.dumps(response, indent=2))


def fail(command: str, message: str, json_output: bool) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def command_settings(command: str, json_output: bool) -> tuple[Settings, bool]:
    """Load settings for a command and resolve its output mode.

    JSON output is used for --json or a configured ``output_format: json``.
    """
    try:
        settings = get_settings()
    except (ValueError, yaml.YAMLError) as exc:
        fail(command, f"Invalid configuration: {exc}", json_output)
    return settings, json_output or settings.display.output_format == "json"


def resolve_tz(
    command: str, tz_name: Optional[str], settings: Settings, json_output: bool
) -> Optional[tzinfo]:
    """Timezone from --tz, else from settings, else None (host zone)."""
    try:
        if tz_name:
            return ZoneInfo(tz_name)
        return settings.tzinfo()
    except (ZoneInfoNotFoundError, ValueError):
        fail(command, f"Unknown timezone: {tz_name or settings.display.timezone}", json_output)


def check_day_key(command: str, value: str, json_output: bool) -> DayKey:
    """Validate a YYYY-MM-DD option value."""
    try:
        parse_day_key(value)
    except ValueError:
        fail(command, f"Invalid date '{value}', expected YYYY-MM-DD", json_output)
    return value


def load_or_fail(command: str, file: Path, json_output: bool) -> LoadResult:
    try:
        result = load_records(file)
    except RecordLoadError as exc:
        fail(command, str(exc), json_output)
    if result.skipped and not json_output:
        console.print(f"[yellow]Skipped {result.skipped} malformed record(s)[/yellow]")
    return result


def format_value(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "-"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging before any command runs."""
    try:
        log_level = get_settings().display.log_level
    except (ValueError, yaml.YAMLError):
        # the command itself reports the broken configuration
        log_level = "WARNING"

    level = logging.DEBUG if verbose else getattr(logging, log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ============================================================================
# Commands
# ============================================================================


@app.command()
def timeline(
    file: Path = typer.Argument(..., help="Records file (.json or .csv)"),
    signup: Optional[str] = typer.Option(
        None, "--signup", help="Account signup timestamp (default: from file)"
    ),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Last day to show (YYYY-MM-DD, default: today)"
    ),
    today_str: Optional[str] = typer.Option(
        None, "--today", help="Override today's date (YYYY-MM-DD)"
    ),
    days: Optional[int] = typer.Option(None, "--days", "-n", min=1, help="Days to show"),
    fetch_days: Optional[int] = typer.Option(
        None, "--fetch-days", min=1, help="Days of history used for carry-forward"
    ),
    tz_name: Optional[str] = typer.Option(None, "--tz", help="IANA timezone name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show a gap-filled daily timeline, most recent day first."""
    settings, json_output = command_settings("timeline", json_output)
    tz = resolve_tz("timeline", tz_name, settings, json_output)
    to_day_key = day_key_converter(tz)

    today = check_day_key("timeline", today_str, json_output) if today_str else today_key(tz)
    selected = check_day_key("timeline", date_str, json_output) if date_str else today
    display_days = days or settings.timeline.display_days
    fetch_window_days = max(fetch_days or settings.timeline.fetch_window_days, display_days)

    loaded = load_or_fail("timeline", file, json_output)
    signup_at = signup or loaded.signup_at

    min_key = resolve_min_day_key(signup_at, today, to_day_key)
    display_end = clamp_day_key(selected, min_key, today)
    trusted = can_trust_full_history(
        signup_at, today, settings.timeline.history_lookback_days, to_day_key
    )
    entries = build_timeline(
        loaded.records,
        display_end=display_end,
        display_days=display_days,
        fetch_window_days=fetch_window_days,
        min_day_key=min_key,
        trust_full_history=trusted,
        to_day_key=to_day_key,
    )

    if json_output:
        output_json({
            "success": True,
            "command": "timeline",
            "data": {
                "display_end": display_end,
                "min_date": min_key,
                "trusted_full_history": trusted,
                "skipped_records": loaded.skipped,
                "entries": [e.to_dict() for e in entries],
            },
            "human_summary": f"{len(entries)} days ending {display_end}",
        })
        return

    table = Table(title=f"Weight timeline ending {display_end}")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Secondary", justify="right")
    table.add_column("Entries", justify="right")
    table.add_column("", style="dim")

    for entry in entries:
        if entry.has_entry:
            status = "view all" if entry.has_multiple_entries else ""
        elif entry.carried_forward:
            status = "carried"
        else:
            status = "no data"
        table.add_row(
            entry.date,
            format_value(entry.value),
            format_value(entry.secondary_value),
            str(entry.entry_count) if entry.entry_count else "",
            status,
        )

    console.print(table)


@app.command()
def day(
    file: Path = typer.Argument(..., help="Records file (.json or .csv)"),
    date_str: str = typer.Argument(..., help="Day to show (YYYY-MM-DD)"),
    signup: Optional[str] = typer.Option(None, "--signup", help="Account signup timestamp"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Override today's date"),
    tz_name: Optional[str] = typer.Option(None, "--tz", help="IANA timezone name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List every weigh-in of one day, newest first."""
    settings, json_output = command_settings("day", json_output)
    tz = resolve_tz("day", tz_name, settings, json_output)
    to_day_key = day_key_converter(tz)

    today = check_day_key("day", today_str, json_output) if today_str else today_key(tz)
    requested = check_day_key("day", date_str, json_output)

    loaded = load_or_fail("day", file, json_output)
    min_key = resolve_min_day_key(signup or loaded.signup_at, today, to_day_key)
    day_key = clamp_day_key(requested, min_key, today)
    records = entries_for_day(loaded.records, day_key, to_day_key)

    if json_output:
        output_json({
            "success": True,
            "command": "day",
            "data": {
                "date": day_key,
                "entries": [
                    {
                        "id": r.id,
                        "measured_at": r.measured_at.isoformat(),
                        "primary_value": r.primary_value,
                        "secondary_value": r.secondary_value,
                        "note": r.note,
                    }
                    for r in records
                ],
            },
            "human_summary": f"{len(records)} entries on {day_key}",
        })
        return

    if not records:
        console.print(f"No entries on {day_key}")
        return

    table = Table(title=f"Weigh-ins on {day_key}")
    table.add_column("Time", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Secondary", justify="right")
    table.add_column("Note")
    for r in records:
        table.add_row(
            r.measured_at.astimezone(tz).strftime("%H:%M"),
            format_value(r.primary_value),
            format_value(r.secondary_value),
            r.note or "",
        )
    console.print(table)


@app.command()
def latest(
    file: Path = typer.Argument(..., help="Records file (.json or .csv)"),
    tz_name: Optional[str] = typer.Option(None, "--tz", help="IANA timezone name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the latest weigh-in and the latest secondary measurement."""
    settings, json_output = command_settings("latest", json_output)
    tz = resolve_tz("latest", tz_name, settings, json_output)
    loaded = load_or_fail("latest", file, json_output)

    newest = latest_record(loaded.records)
    newest_secondary = latest_with_secondary(loaded.records)
    days_logged = len(derive_daily_latest(loaded.records, day_key_converter(tz)))

    if json_output:
        output_json({
            "success": True,
            "command": "latest",
            "data": {
                "latest_value": newest.primary_value if newest else None,
                "latest_at": newest.measured_at.isoformat() if newest else None,
                "latest_secondary_value": (
                    newest_secondary.secondary_value if newest_secondary else None
                ),
                "days_logged": days_logged,
            },
            "human_summary": (
                f"Latest {newest.primary_value:.1f}, {days_logged} days logged"
                if newest
                else "No weigh-ins found"
            ),
        })
        return

    if newest is None:
        console.print("No weigh-ins found")
        return

    when = newest.measured_at.astimezone(tz).strftime("%Y-%m-%d %H:%M")
    console.print(f"[green]Latest:[/green] {newest.primary_value:.1f} on {when}")
    if newest_secondary is not None:
        console.print(f"[blue]Secondary:[/blue] {newest_secondary.secondary_value:.1f}")
    console.print(f"Days logged: {days_logged}")


@app.command()
def clamp(
    date_str: str = typer.Argument(..., help="Requested day (YYYY-MM-DD)"),
    signup: Optional[str] = typer.Option(None, "--signup", help="Account signup timestamp"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Override today's date"),
    tz_name: Optional[str] = typer.Option(None, "--tz", help="IANA timezone name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Clamp a requested day into [signup day, today]."""
    settings, json_output = command_settings("clamp", json_output)
    tz = resolve_tz("clamp", tz_name, settings, json_output)
    today = check_day_key("clamp", today_str, json_output) if today_str else today_key(tz)
    requested = check_day_key("clamp", date_str, json_output)

    min_key = resolve_min_day_key(signup, today, day_key_converter(tz))
    clamped = clamp_day_key(requested, min_key, today)

    if json_output:
        output_json({
            "success": True,
            "command": "clamp",
            "data": {"requested": requested, "min_date": min_key, "max_date": today, "date": clamped},
        })
    else:
        console.print(f"{clamped}  [dim](allowed {min_key} .. {today})[/dim]")


if __name__ == "__main__":
    app()
