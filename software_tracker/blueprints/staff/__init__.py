"""
Staff blueprint — staff records, offboarding, and their software.
"""

from flask import Blueprint

bp = Blueprint("staff", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.staff import routes  # noqa: E402, F401
