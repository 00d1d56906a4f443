"""
Web application module for the Reload-Proof Scorekeeper.

This module contains the Flask web server exposing the match controller as
JSON API endpoints. Every mutating endpoint goes through a command so the
restore gate and command history apply uniformly.
"""
import logging
from typing import Optional

from flask import Flask, Response, jsonify, request

from ..config import Settings
from ..services import MatchController, RestorePendingError, ScoreValidationError, ServiceFactory
from ..services.match_commands import (
    AddPointCommand, Command, DeletePointCommand, EditPointCommand, ResetMatchCommand,
    SelectTeamCommand, SetClockLabelCommand, SetPossessionStartCommand, SetRosterCommand,
    TimerCommand
)

logger = logging.getLogger(__name__)

TIMER_ACTIONS = TimerCommand.ACTIONS


def _error_response(e: Exception):
    """Map a service exception onto the JSON error shape and status code."""
    if isinstance(e, RestorePendingError):
        return jsonify({"success": False, "error": str(e), "restore_pending": True}), 409
    if isinstance(e, ScoreValidationError):
        return jsonify({"success": False, "error": str(e)}), 400
    logger.exception("Request failed")
    return jsonify({"success": False, "error": str(e)}), 500


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(controller: MatchController) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        controller: Initialized match controller the endpoints act on

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    def _run(command: Command):
        result = controller.dispatch(command)
        status = 200 if result.success else 404
        return jsonify(result.to_json()), status

    # ==================== State ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Get the complete match state."""
        try:
            state = controller.view()
            state["success"] = True
            return jsonify(state)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/restore", methods=["POST"])
    def resolve_restore():
        """Answer the startup question about the previous session."""
        try:
            data = _json_body()
            if "restore" not in data:
                return jsonify({"success": False, "error": "restore must be true or false"}), 400
            report = controller.resolve_restore(bool(data["restore"]))
            return jsonify({"success": True, "startup": report.to_json()})
        except Exception as e:
            return _error_response(e)

    # ==================== Teams ==================== #

    @app.route("/api/teams", methods=["GET"])
    def get_teams():
        try:
            return jsonify({"success": True, "teams": controller.roster_service.teams})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/teams/refresh", methods=["POST"])
    def refresh_teams():
        """Re-fetch rosters, falling back to the cache."""
        try:
            result = controller.refresh_teams()
            return jsonify({
                "success": True,
                "teams": result.teams,
                "source": result.source,
                "warning": result.warning,
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/teams", methods=["POST"])
    def select_team():
        try:
            data = _json_body()
            return _run(SelectTeamCommand(data.get("side", ""), data.get("team", "")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/roster", methods=["POST"])
    def set_roster():
        try:
            data = _json_body()
            return _run(SetRosterCommand(data.get("side", ""), data.get("players", "")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/clock-label", methods=["POST"])
    def set_clock_label():
        try:
            return _run(SetClockLabelCommand(_json_body().get("label", "")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/possession", methods=["POST"])
    def set_possession_start():
        try:
            return _run(SetPossessionStartCommand(_json_body().get("start", "")))
        except Exception as e:
            return _error_response(e)

    # ==================== Points ==================== #

    @app.route("/api/points", methods=["POST"])
    def add_point():
        """Record a point for team A or B."""
        try:
            data = _json_body()
            return _run(AddPointCommand(data.get("side"), data.get("scorer"), data.get("assist")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/points/<point_id>", methods=["PUT"])
    def edit_point(point_id):
        try:
            data = _json_body()
            return _run(EditPointCommand(point_id, data.get("scorer"), data.get("assist")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/points/<point_id>", methods=["DELETE"])
    def delete_point(point_id):
        try:
            return _run(DeletePointCommand(point_id))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/points/options/<side>", methods=["GET"])
    def get_point_options(side):
        """Scorer and assist choices for one side's roster."""
        try:
            with controller.lock:
                return jsonify({
                    "success": True,
                    "scorers": controller.scoreboard.scorer_options(side.upper()),
                    "assists": controller.scoreboard.assist_options(side.upper()),
                })
        except Exception as e:
            return _error_response(e)

    # ==================== Match lifecycle ==================== #

    @app.route("/api/match/reset", methods=["POST"])
    def reset_match():
        try:
            return _run(ResetMatchCommand(full=bool(_json_body().get("full", False))))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/finish", methods=["POST"])
    def finish_match():
        """Submit the log, write the CSV and start a new match."""
        try:
            result = controller.finish_match()
            payload = result.to_json()
            payload["success"] = True
            return jsonify(payload)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/match/export.csv", methods=["GET"])
    def export_csv():
        """Download the current point log as CSV."""
        try:
            with controller.lock:
                snapshot = controller.session.snapshot
                csv_text = controller.exporter.to_csv(snapshot)
                filename = controller.exporter.filename(snapshot)
            return Response(
                csv_text,
                mimetype="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )
        except Exception as e:
            return _error_response(e)

    # ==================== Timers ==================== #

    @app.route("/api/timer/<action>", methods=["POST"])
    def match_clock(action):
        """Start, stop, toggle or reset the match clock."""
        try:
            if action not in TIMER_ACTIONS:
                return jsonify({"success": False, "error": f"Unknown action: {action}"}), 404
            return _run(TimerCommand("timer", action, _json_body().get("minutes")))
        except Exception as e:
            return _error_response(e)

    @app.route("/api/interval/<action>", methods=["POST"])
    def interval_timer(action):
        """Start, stop, toggle or reset the interval countdown."""
        try:
            if action not in TIMER_ACTIONS:
                return jsonify({"success": False, "error": f"Unknown action: {action}"}), 404
            return _run(TimerCommand("interval", action, _json_body().get("seconds")))
        except Exception as e:
            return _error_response(e)

    # ==================== Client lifecycle ==================== #

    @app.route("/api/lifecycle/hidden", methods=["POST"])
    def client_hidden():
        try:
            return jsonify({"success": True, "saved": controller.on_hidden()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/lifecycle/unload", methods=["POST"])
    def client_unload():
        try:
            payload = controller.on_unload()
            payload["success"] = True
            return jsonify(payload)
        except Exception as e:
            return _error_response(e)

    # ==================== Storage ==================== #

    @app.route("/api/storage", methods=["GET"])
    def storage_info():
        try:
            with controller.lock:
                usage = controller.store.usage_info()
            return jsonify({"success": True, "storage": usage.to_json()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/storage/clear", methods=["POST"])
    def clear_storage():
        """Remove every persisted key; in-memory state is kept."""
        try:
            with controller.lock:
                controller.store.clear_all()
                usage = controller.store.usage_info()
            return jsonify({"success": True, "storage": usage.to_json()})
        except Exception as e:
            return _error_response(e)

    return app


def run_web_app(settings: Optional[Settings] = None) -> None:
    """
    Build the services, run startup and serve the API.

    A previous session found at startup is left pending; the client answers
    it through ``POST /api/session/restore``.

    Args:
        settings: Runtime settings, read from the environment when omitted
    """
    settings = settings or Settings.from_env()
    controller = ServiceFactory(settings).create_match_controller()
    report = controller.initialize()
    if report.roster and report.roster.warning:
        logger.warning(report.roster.warning)

    app = create_app(controller)
    try:
        # Bind only to localhost unless configured otherwise
        app.run(host=settings.host, port=settings.port, debug=False)
    finally:
        controller.shutdown()
