"""Pytest fixtures for weightline tests."""

from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from weightline.config import settings as settings_module
from weightline.config.settings import Settings
from weightline.tracking.day_keys import day_key_converter


@pytest.fixture
def utc_key():
    """Day key converter pinned to UTC so results do not depend on the host."""
    return day_key_converter(timezone.utc)


@pytest.fixture
def pacific_key():
    """Day key converter for a fixed UTC-8 offset."""
    return day_key_converter(timezone(timedelta(hours=-8)))


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Keep tests independent of any ~/.weightline/config.yaml."""
    settings = Settings()
    monkeypatch.setattr(settings_module, "_settings", settings)
    return settings
