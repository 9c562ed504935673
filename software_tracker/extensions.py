"""
Flask extension instances.

Extensions are created here without binding to an application so that
the application factory can call ``init_app()`` on each one during
``create_app()``.  Models, services, and the assignment store import
``db`` from this module.
"""

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# -- Database ORM ----------------------------------------------------------
db = SQLAlchemy()

# -- Schema migrations (Alembic via Flask-Migrate) -------------------------
migrate = Migrate()
