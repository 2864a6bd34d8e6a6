"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

import yaml

VALID_OUTPUT_FORMATS = ("table", "json")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".weightline"


@dataclass
class TimelineConfig:
    """Window sizes for timeline building."""

    display_days: int = 7
    fetch_window_days: int = 14
    history_lookback_days: int = 365  # how far back the record store serves


@dataclass
class DisplayConfig:
    """Presentation defaults."""

    timezone: Optional[str] = None  # IANA name, None = host timezone
    output_format: str = "table"  # "table" or "json"
    log_level: str = "WARNING"


@dataclass
class Settings:
    """Main application settings."""

    timeline: TimelineConfig = field(default_factory=TimelineConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.timeline.display_days < 1:
            raise ValueError(
                f"display_days must be at least 1, got {self.timeline.display_days}"
            )
        if self.timeline.fetch_window_days < self.timeline.display_days:
            raise ValueError(
                "fetch_window_days must be at least display_days, got "
                f"{self.timeline.fetch_window_days} < {self.timeline.display_days}"
            )
        if self.timeline.history_lookback_days < 0:
            raise ValueError(
                "history_lookback_days must not be negative, got "
                f"{self.timeline.history_lookback_days}"
            )
        if self.display.output_format not in VALID_OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {VALID_OUTPUT_FORMATS}, "
                f"got '{self.display.output_format}'"
            )
        if self.display.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{self.display.log_level}'"
            )

    def tzinfo(self) -> Optional[ZoneInfo]:
        """Configured timezone, or None for the host timezone."""
        if self.display.timezone is None:
            return None
        return ZoneInfo(self.display.timezone)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.weightline/config.yaml

        Returns:
            Settings instance

        Raises:
            ValueError: If the file contains out-of-range values
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        timeline = TimelineConfig()
        display = DisplayConfig()

        # Parse timeline config
        if "timeline" in data:
            tl_data = data["timeline"] or {}
            if "display_days" in tl_data:
                timeline.display_days = int(tl_data["display_days"])
            if "fetch_window_days" in tl_data:
                timeline.fetch_window_days = int(tl_data["fetch_window_days"])
            if "history_lookback_days" in tl_data:
                timeline.history_lookback_days = int(tl_data["history_lookback_days"])

        # Parse display config
        if "display" in data:
            disp_data = data["display"] or {}
            if "timezone" in disp_data:
                display.timezone = disp_data["timezone"]
            if "output_format" in disp_data:
                display.output_format = disp_data["output_format"]
            if "log_level" in disp_data:
                display.log_level = str(disp_data["log_level"]).upper()

        return cls(timeline=timeline, display=display)

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.weightline/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "timeline": {
                "display_days": self.timeline.display_days,
                "fetch_window_days": self.timeline.fetch_window_days,
                "history_lookback_days": self.timeline.history_lookback_days,
            },
            "display": {
                "timezone": self.display.timezone,
                "output_format": self.display.output_format,
                "log_level": self.display.log_level,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
