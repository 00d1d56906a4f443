"""
Reload-Proof Scorekeeper

Live score logging for a two-team match: a persisted match clock, a short
interval timer, a point log with alternating possession markers, roster
lookup and CSV export. Every piece of state survives a restart of the
process.

The Flask web interface lives in :mod:`scorekeeper.ui`.
"""
from .config import Settings
from .models import PointEntry, SessionSnapshot
from .services import MatchController, ServiceFactory
from .ui import create_app, run_web_app
from .utils import fmt_countdown, now_ms, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Settings", "PointEntry", "SessionSnapshot", "MatchController", "ServiceFactory",
    "create_app", "run_web_app", "fmt_countdown", "now_ms", "APP_TITLE"
]
