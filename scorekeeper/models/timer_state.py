"""Persistable state of the match clock."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class TimerState:
    """
    Snapshot of a countdown timer.

    Attributes:
        end_timestamp: Absolute epoch ms at which the countdown hits zero
        remaining_ms: Frozen remaining time while idle
        is_running: Whether the countdown is live
    """
    end_timestamp: Optional[int] = None
    remaining_ms: Optional[int] = None
    is_running: bool = False

    def is_defined(self) -> bool:
        return (self.end_timestamp is None) != (self.remaining_ms is None)

    def validate(self) -> None:
        """
        Check the timer invariants.

        Raises:
            ValueError: If both or neither of end/remaining are set, or a
                        running timer has no end timestamp
        """
        if not self.is_defined():
            raise ValueError("Exactly one of end_timestamp or remaining_ms must be set")
        if self.is_running and self.end_timestamp is None:
            raise ValueError("A running timer needs an end timestamp")
