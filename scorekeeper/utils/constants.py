"""
Constants for the Reload-Proof Scorekeeper application.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Reload-Proof Scorekeeper"

# Timer defaults
DEFAULT_TIMER_MINUTES = 100
DEFAULT_INTERVAL_SECONDS = 90
MATCH_CLOCK_TICK_SECONDS = 1.0
INTERVAL_TICK_SECONDS = 0.2

# Persistence cadence and retention
AUTO_SAVE_INTERVAL_SECONDS = 2.0
MS_PER_HOUR = 60 * 60 * 1000
ROSTER_CACHE_TTL_MS = 24 * MS_PER_HOUR
SESSION_STALE_MS = 7 * 24 * MS_PER_HOUR
RESTORE_WINDOW_MS = 24 * MS_PER_HOUR

# Durable key layout; each key is independently readable/removable
STORAGE_KEYS = {
    "GAME_STATE": "gameState",
    "TIMER_END_TIME": "timerEndTime",
    "TIMER_RUNNING": "timerRunning",
    "TIMER_REMAINING": "timerRemainingTime",
    "TEAMS_DATA": "teamsData",
    "LAST_SAVE": "lastSave",
}

# Browsers cap localStorage around 5MB per origin
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024

# Team sides and possession markers
SIDE_A = "A"
SIDE_B = "B"
SIDES = (SIDE_A, SIDE_B)
MARKER_M = "M"
MARKER_F = "F"
MARKERS = (MARKER_M, MARKER_F)

# Extra choices offered next to roster names when recording a point
SPECIAL_OPTIONS = {
    "NA": "N/A",
    "CALLAHAN": "‼️CALLAHAN‼️",
}

# CSV export layout
CSV_HEADER = ["GameID", "Time", "Team", "Score", "Assist"]
CSV_LINE_TERMINATOR = "\r\n"
MAX_FILENAME_LENGTH = 120
DEFAULT_EXPORT_NAME = "Game"

# Network
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
