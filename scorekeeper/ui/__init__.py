"""
UI package for the Reload-Proof Scorekeeper.

This package contains the Flask web server exposing the JSON API.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
