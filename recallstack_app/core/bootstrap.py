"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask, jsonify
from flask.logging import default_handler

from .error_handlers import AuthorizationError, register_error_handlers
from .extensions import csrf_protect, db, login_manager
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure the package logger, which is also ``app.logger``.

    ``Flask(__name__)`` names the app logger after the package, so module
    loggers created with ``logging.getLogger(__name__)`` propagate into the
    handlers installed here.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    setup_logging(
        log_level=level_name,
        log_dir=app.config.get("LOG_DIR"),
        json_format=bool(app.config.get("LOG_JSON", False)),
        name=app.logger.name,
    )
    app.logger.removeHandler(default_handler)
    app.logger.propagate = False
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        error = AuthorizationError("Authentication required")
        return jsonify(error.to_dict()), error.status_code


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints and the shared error handlers."""

    register_error_handlers(app)
    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables for every registered model."""

    from .. import models  # noqa: F401
    from ..modules.reviews import models as review_models  # noqa: F401

    db.create_all()
    app.logger.info("Database schema ready at %s", app.config.get("SQLALCHEMY_DATABASE_URI"))
