"""
Match rules blueprint — organization, department, and team rules.
"""

from flask import Blueprint

bp = Blueprint("matches", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.matches import routes  # noqa: E402, F401
