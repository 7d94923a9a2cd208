"""Configuration models and helpers."""

from __future__ import annotations

from .paths import DATA_DIR, LOG_DIR, TRANSITIONS_DIR, ensure_data_dir
from .settings import (
    AppSettings,
    DefaultCalendarSettings,
    IcsSettings,
    StoreSettings,
    TransitionSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "DATA_DIR",
    "DefaultCalendarSettings",
    "IcsSettings",
    "LOG_DIR",
    "StoreSettings",
    "TRANSITIONS_DIR",
    "TransitionSettings",
    "ensure_data_dir",
    "get_settings",
]
