"""
Utilities package for the Reload-Proof Scorekeeper.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import fmt_mmss, fmt_countdown, now_ms, local_timestamp_str, local_date_str
from .csv_utils import to_csv_text, parse_csv, csv_to_teams_map, sanitize_filename
from .constants import (
    APP_TITLE, DEFAULT_TIMER_MINUTES, DEFAULT_INTERVAL_SECONDS,
    AUTO_SAVE_INTERVAL_SECONDS, STORAGE_KEYS, SPECIAL_OPTIONS,
    SIDE_A, SIDE_B, SIDES, MARKER_M, MARKER_F, MARKERS
)

__all__ = [
    "fmt_mmss", "fmt_countdown", "now_ms", "local_timestamp_str", "local_date_str",
    "to_csv_text", "parse_csv", "csv_to_teams_map", "sanitize_filename",
    "APP_TITLE", "DEFAULT_TIMER_MINUTES", "DEFAULT_INTERVAL_SECONDS",
    "AUTO_SAVE_INTERVAL_SECONDS", "STORAGE_KEYS", "SPECIAL_OPTIONS",
    "SIDE_A", "SIDE_B", "SIDES", "MARKER_M", "MARKER_F", "MARKERS"
]
