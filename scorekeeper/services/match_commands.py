"""
Command pattern implementation for match actions.

Every user action is a small command object. The dispatcher applies it to
the match services and returns a :class:`CommandResult`; rendering is left
to the caller, which reads the resulting state separately.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .exceptions import RestorePendingError, ScoreValidationError
from ..utils import SIDE_A, SIDES

if TYPE_CHECKING:
    from .match_controller import MatchController

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a dispatched command."""
    success: bool
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict:
        payload = {"success": self.success, "message": self.message}
        payload.update(self.data)
        return payload


class Command(ABC):
    """Abstract base class for all match commands - Command pattern."""

    mutates = True

    @abstractmethod
    def execute(self, match: "MatchController") -> CommandResult:
        """
        Execute the command.

        Raises:
            ScoreValidationError: If the command is rejected; nothing changes
        """
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""
        pass


def _side(value: Optional[str]) -> str:
    side = (value or "").strip().upper()
    if side not in SIDES:
        raise ScoreValidationError("Team must be 'A' or 'B'")
    return side


class AddPointCommand(Command):
    """Record a point for one team."""

    def __init__(self, side: str, scorer: str, assist: str):
        self.side = side
        self.scorer = scorer
        self.assist = assist

    def execute(self, match: "MatchController") -> CommandResult:
        row = match.scoreboard.append(self.side, self.scorer, self.assist)
        return CommandResult(True, "Score added", {"row": row.to_json()})

    @property
    def description(self) -> str:
        return f"Add point {self.side}: {self.scorer} from {self.assist}"


class EditPointCommand(Command):
    """Change scorer/assist of a recorded point."""

    def __init__(self, point_id: str, scorer: str, assist: str):
        self.point_id = point_id
        self.scorer = scorer
        self.assist = assist

    def execute(self, match: "MatchController") -> CommandResult:
        if not match.scoreboard.edit(self.point_id, self.scorer, self.assist):
            return CommandResult(False, "Could not find score to update.")
        return CommandResult(True, "Score updated")

    @property
    def description(self) -> str:
        return f"Edit point {self.point_id}"


class DeletePointCommand(Command):
    """Remove a recorded point."""

    def __init__(self, point_id: str):
        self.point_id = point_id

    def execute(self, match: "MatchController") -> CommandResult:
        removed = match.scoreboard.delete(self.point_id)
        if removed is None:
            return CommandResult(False, "Could not delete score. Try again.")
        return CommandResult(True, "Score deleted.", {"removed": removed.to_json()})

    @property
    def description(self) -> str:
        return f"Delete point {self.point_id}"


class SelectTeamCommand(Command):
    """Pick a team for one side and fill its roster from the roster source."""

    def __init__(self, side: str, team_name: str):
        self.side = side
        self.team_name = team_name

    def execute(self, match: "MatchController") -> CommandResult:
        side = _side(self.side)
        team_name = (self.team_name or "").strip()
        players = match.roster_service.players_for(team_name) if team_name else []
        if side == SIDE_A:
            match.session.update_fields(team_a_name=team_name, team_a_roster="\n".join(players))
        else:
            match.session.update_fields(team_b_name=team_name, team_b_roster="\n".join(players))
        return CommandResult(True, f"Team {side} set", {"players": players})

    @property
    def description(self) -> str:
        return f"Select team {self.side}: {self.team_name}"


class SetRosterCommand(Command):
    """Replace the free-text roster of one side."""

    def __init__(self, side: str, players: str):
        self.side = side
        self.players = players

    def execute(self, match: "MatchController") -> CommandResult:
        side = _side(self.side)
        field_name = "team_a_roster" if side == SIDE_A else "team_b_roster"
        match.session.update_fields(**{field_name: self.players or ""})
        return CommandResult(True, f"Roster {side} updated")

    @property
    def description(self) -> str:
        return f"Edit roster {self.side}"


class SetClockLabelCommand(Command):
    """Set the free-form game time label."""

    def __init__(self, label: str):
        self.label = label

    def execute(self, match: "MatchController") -> CommandResult:
        match.session.update_fields(match_clock_label=self.label or "")
        return CommandResult(True, "Game time updated")

    @property
    def description(self) -> str:
        return "Set game time"


class SetPossessionStartCommand(Command):
    """Choose which marker the first point receives."""

    def __init__(self, start: str):
        self.start = start

    def execute(self, match: "MatchController") -> CommandResult:
        rows = match.scoreboard.set_possession_start(self.start)
        return CommandResult(True, "Possession start updated", {"rows": [r.to_json() for r in rows]})

    @property
    def description(self) -> str:
        return f"Possession start {self.start}"


class ResetMatchCommand(Command):
    """Start a new match; a full reset also drops the roster cache and timers."""

    def __init__(self, full: bool = False):
        self.full = full

    def execute(self, match: "MatchController") -> CommandResult:
        if self.full:
            match.full_reset()
            return CommandResult(True, "All match data cleared")
        match.session.reset()
        return CommandResult(True, "New match started")

    @property
    def description(self) -> str:
        return "Full reset" if self.full else "New match"


class TimerCommand(Command):
    """Drive either the match clock or the interval timer."""

    ACTIONS = ("start", "stop", "toggle", "reset")

    def __init__(self, target: str, action: str, amount: Optional[int] = None):
        self.target = target
        self.action = action
        self.amount = amount

    def execute(self, match: "MatchController") -> CommandResult:
        timers = {"timer": match.clock_timer, "interval": match.interval_timer}
        timer = timers.get(self.target)
        if timer is None:
            raise ScoreValidationError(f"Unknown timer: {self.target}")
        if self.action not in self.ACTIONS:
            raise ScoreValidationError(f"Unknown timer action: {self.action}")

        if self.action == "reset":
            timer.reset(self.amount)
        else:
            getattr(timer, self.action)()
        return CommandResult(True, f"{self.target} {self.action}", {"timer": timer.reading().to_json()})

    @property
    def description(self) -> str:
        return f"{self.target} {self.action}"


class CommandDispatcher:
    """
    Applies commands to a match and keeps a short history of what ran.

    Mutating commands are refused while the startup restore decision is
    still open.
    """

    def __init__(self, match: "MatchController", max_history: int = 50):
        self.match = match
        self.max_history = max_history
        self._history: List[str] = []

    def dispatch(self, command: Command) -> CommandResult:
        if command.mutates and self.match.restore_pending:
            raise RestorePendingError("Resolve the previous session before making changes")

        result = command.execute(self.match)
        if result.success:
            self._history.append(command.description)
            if len(self._history) > self.max_history:
                self._history.pop(0)
            logger.debug("Applied %s", command.description)
        else:
            logger.info("Command %s rejected: %s", command.description, result.message)
        return result

    def get_command_history(self) -> List[str]:
        """Get history of command descriptions."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
