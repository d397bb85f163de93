"""
Flask application factory module.

This module creates and configures the Flask application using
the factory pattern. The task store is constructed explicitly and
handed to the application, so tests and scripts can inject their own
store instead of the one described by the configuration.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from flask import Flask, current_app
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

from eulist.config import get_config

if TYPE_CHECKING:
    from eulist.store import TaskStore

__version__ = "1.0.0"

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, store: TaskStore | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.
        store: Task store to serve requests from. When None, one is
               built from the ``DATABASE_URL`` setting.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    logger.info("Creating app with config: %s", config_class.__name__)

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass

    origins = app.config["CORS_ORIGINS"]
    if origins != "*":
        origins = [origin.strip() for origin in origins.split(",")]
    CORS(app, origins=origins)

    from eulist.store import build_store

    if store is None:
        store = build_store(app.config)
    store.init_app(app)

    from eulist.routes.api import api_bp

    app.register_blueprint(api_bp)

    return app


def get_store(app: Flask | None = None) -> TaskStore:
    """Return the task store registered on ``app`` (default: current app)."""
    if app is None:
        app = current_app
    return app.extensions["task_store"]
