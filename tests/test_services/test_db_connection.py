"""
Database connectivity and CLI command tests.

These tests confirm that:
  - The application can connect to the configured database.
  - The models create every expected table.
  - The ``flask`` CLI commands run against that database.

Run from your project root with::

    pytest tests/test_services/test_db_connection.py -v
"""

import pytest
from sqlalchemy import inspect

from conftest import make_department, make_software, make_staff
from software_tracker.cli import _EXPECTED_TABLES
from software_tracker.extensions import db
from software_tracker.models.common import utcnow
from software_tracker.models.match import DepartmentMatch
from software_tracker.models.organization import StaffStatus
from software_tracker.models.software import AssignedSoftware


class TestDatabaseConnectivity:
    """Verify that the app can talk to the database."""

    def test_basic_connection(self, app, db_session):
        """
        Execute a simple SELECT 1 query to confirm the database
        is reachable and the connection string is correct.
        """
        row = db_session.execute(db.text("SELECT 1 AS connected")).fetchone()
        assert row is not None
        assert row[0] == 1

    def test_expected_tables_exist(self, app, db_session):
        """Every application table is created from the models."""
        found = set(inspect(db.engine).get_table_names())
        missing = set(_EXPECTED_TABLES) - found
        assert not missing, f"Missing tables: {missing}"


class TestCliCommands:
    """Tests for the custom ``flask`` commands."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        self.session = db_session
        self.runner = app.test_cli_runner()

    def test_db_check_passes(self):
        result = self.runner.invoke(args=["db-check"])

        assert result.exit_code == 0
        assert "All checks passed" in result.output

    def test_init_db(self):
        """init-db is safe to run against an existing schema."""
        result = self.runner.invoke(args=["init-db"])

        assert result.exit_code == 0
        assert "Tables created" in result.output

    def test_resync_assignments(self):
        """Active staff pick up rules added after they were created."""
        eng = make_department(self.session, "Engineering")
        jira = make_software(self.session, "Jira")
        alice = make_staff(self.session, "alice@example.com", eng)
        make_staff(self.session, "bob@example.com", eng, status=StaffStatus.INACTIVE)
        now = utcnow()
        self.session.add(
            DepartmentMatch(
                software_id=jira.id,
                department_id=eng.id,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.commit()

        result = self.runner.invoke(args=["resync-assignments"])

        assert result.exit_code == 0
        assert "Processed: 1  Assigned: 1  Failed: 0" in result.output
        edges = AssignedSoftware.query.all()
        assert [(e.staff_id, e.software_id) for e in edges] == [(alice.id, jira.id)]

    def test_resync_is_idempotent(self):
        eng = make_department(self.session, "Engineering")
        make_staff(self.session, "alice@example.com", eng)

        self.runner.invoke(args=["resync-assignments"])
        result = self.runner.invoke(args=["resync-assignments"])

        assert "Assigned: 0" in result.output
