"""
Models package for the Reload-Proof Scorekeeper.

This package contains the core data models used throughout the application.
"""
from .point_entry import PointEntry
from .session_snapshot import SessionSnapshot
from .timer_state import TimerState
from .roster_cache import RosterCache
from .score_row import ScoreRow

__all__ = [
    "PointEntry", "SessionSnapshot", "TimerState", "RosterCache", "ScoreRow"
]
