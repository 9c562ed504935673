"""
Application factory for the Software Assignment Tracker.

Usage::

    from software_tracker import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from .config import config_by_name
from .exceptions import AssignmentStoreError, DuplicateRecordError, RecordNotFoundError
from .extensions import db, migrate

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Refuse to run production with the default secret key.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so metadata is complete for create_all and Alembic.
    from . import models  # noqa: F401  pylint: disable=import-outside-toplevel


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports — models and services can safely import ``db`` from
    extensions at module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main blueprint: index and health check at the root URL.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Organization: departments and teams.
    from .blueprints.organization import bp as org_bp

    app.register_blueprint(org_bp, url_prefix="/api")

    # Staff records and their assigned software.
    from .blueprints.staff import bp as staff_bp

    app.register_blueprint(staff_bp, url_prefix="/api/staff")

    # Software catalog and holders.
    from .blueprints.software import bp as software_bp

    app.register_blueprint(software_bp, url_prefix="/api/software")

    # Assignment edges and manual grants.
    from .blueprints.assignments import bp as assignments_bp

    app.register_blueprint(assignments_bp, url_prefix="/api/assigned-software")

    # Match rules for every scope.
    from .blueprints.matches import bp as matches_bp

    app.register_blueprint(matches_bp, url_prefix="/api/match-rules")

    # Assignment log and its exports.
    from .blueprints.logs import bp as logs_bp

    app.register_blueprint(logs_bp, url_prefix="/api/logs")


def _register_error_handlers(app: Flask) -> None:
    """Map service exceptions and HTTP errors to JSON responses."""

    @app.errorhandler(RecordNotFoundError)
    def record_not_found(error):
        return {"error": str(error)}, 404

    @app.errorhandler(DuplicateRecordError)
    def duplicate_record(error):
        return {"error": str(error)}, 409

    @app.errorhandler(ValueError)
    def invalid_input(error):
        return {"error": str(error)}, 400

    @app.errorhandler(AssignmentStoreError)
    def store_failure(error):
        db.session.rollback()
        logger.error("Assignment store failure: %s", error)
        return {"error": str(error)}, 500

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        logger.exception("Database error")
        return {"error": "Database error."}, 500

    @app.errorhandler(404)
    def not_found(error):  # pylint: disable=unused-argument
        """Handle 404 Not Found errors."""
        return {"error": "Not found."}, 404

    @app.errorhandler(405)
    def method_not_allowed(error):  # pylint: disable=unused-argument
        return {"error": "Method not allowed."}, 405

    @app.errorhandler(500)
    def internal_error(error):  # pylint: disable=unused-argument
        """Handle 500 Internal Server Error."""
        db.session.rollback()
        return {"error": "Internal server error."}, 500


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """
    Set up application logging.

    Every module logs through ``logging.getLogger(__name__)``; this only
    sets the root level from ``LOG_LEVEL``.
    """
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))

    # Quiet down noisy libraries in development.
    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
