"""
Logs blueprint — the software assignment log and its exports.
"""

from flask import Blueprint

bp = Blueprint("logs", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.logs import routes  # noqa: E402, F401
