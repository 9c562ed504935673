"""
Routes for the main blueprint — index and health check.
"""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from software_tracker.blueprints.main import bp
from software_tracker.extensions import db


@bp.route("/")
def index():
    """Name the service and point at its API root."""
    return {"service": "software-tracker", "api": "/api"}


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database.
    """
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except SQLAlchemyError as exc:
        db.session.rollback()
        return {"status": "unhealthy", "database": str(exc)}, 503
