"""
Software blueprint — the software catalog.
"""

from flask import Blueprint

bp = Blueprint("software", __name__)

# Import routes after blueprint creation to avoid circular imports.
from software_tracker.blueprints.software import routes  # noqa: E402, F401
