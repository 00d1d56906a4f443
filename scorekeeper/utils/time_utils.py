"""
Utility functions for the Reload-Proof Scorekeeper application.

This module contains time helpers shared by the timers and the session layer.
"""
import time
from datetime import datetime
from typing import Tuple


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(3661)
        '61:01'
    """
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def fmt_countdown(remaining_ms: int) -> Tuple[str, bool]:
    """
    Format a countdown value that may have run past zero.

    Returns:
        Tuple of (display text, overtime flag). Overtime is rendered with a
        leading minus sign.

    Example:
        >>> fmt_countdown(133_000)
        ('02:13', False)
        >>> fmt_countdown(-133_000)
        ('-02:13', True)
    """
    overtime = remaining_ms < 0
    text = fmt_mmss(abs(int(remaining_ms)) // 1000)
    if overtime:
        text = f"-{text}"
    return text, overtime


def now_ms() -> int:
    """
    Get current timestamp in epoch milliseconds.

    Returns:
        Current wall-clock time as integer epoch milliseconds
    """
    return int(time.time() * 1000)


def local_timestamp_str(ts_ms: int) -> str:
    """Render an epoch-millisecond timestamp as a local date/time string."""
    return datetime.fromtimestamp(ts_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def local_date_str(ts_ms: int) -> str:
    """Render an epoch-millisecond timestamp as a local date string."""
    return datetime.fromtimestamp(ts_ms / 1000).strftime("%Y-%m-%d")
