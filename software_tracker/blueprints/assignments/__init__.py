"""
Assignments blueprint — assignment edges and manual grants.
"""

from flask import Blueprint

bp = Blueprint("assignments", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.assignments import routes  # noqa: E402, F401
