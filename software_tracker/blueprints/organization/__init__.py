"""
Organization blueprint — departments and teams.
"""

from flask import Blueprint

bp = Blueprint("organization", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.organization import routes  # noqa: E402, F401
