#!/usr/bin/env python3
"""
Main entry point for the Reload-Proof Scorekeeper web application.

This script configures logging and launches the Flask-based web server.
"""
import logging

from scorekeeper.config import Settings
from scorekeeper.ui.web_app import run_web_app

if __name__ == "__main__":
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_app(settings)
