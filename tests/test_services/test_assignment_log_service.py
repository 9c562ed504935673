"""
Tests for the assignment log service and log exports.

Cover log creation, filtering, corrections, name resolution, and the
CSV/Excel writers.
"""

import io
from datetime import timedelta

import pytest
from openpyxl import load_workbook

from conftest import make_software, make_staff
from software_tracker.exceptions import RecordNotFoundError
from software_tracker.models.audit import (
    SYSTEM_ACTOR_ID,
    AssignmentAction,
    SoftwareAssignmentLog,
)
from software_tracker.models.common import utcnow
from software_tracker.services import assignment_log_service, export_service
from software_tracker.services.export_service import LOG_EXPORT_HEADERS


class TestAssignmentLogService:
    """Tests for assignment log CRUD and queries."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        self.session = db_session
        self.alice = make_staff(db_session, "alice@example.com")
        self.admin = make_staff(db_session, "admin@example.com")
        self.slack = make_software(db_session, "Slack")
        self.jira = make_software(db_session, "Jira")

    def test_create_log(self):
        entry = assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", self.admin.id
        )

        assert entry.id is not None
        assert entry.action == AssignmentAction.ASSIGNED
        assert entry.changed_at is not None
        assert not entry.is_system_change

    def test_create_log_rejects_unknown_action(self):
        with pytest.raises(ValueError):
            assignment_log_service.create_log(
                self.alice.id, self.slack.id, "Transferred", SYSTEM_ACTOR_ID
            )

    def test_get_logs_newest_first(self):
        first = assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        second = assignment_log_service.create_log(
            self.alice.id, self.jira.id, "Assigned", SYSTEM_ACTOR_ID
        )

        page = assignment_log_service.get_logs()

        assert [e.id for e in page.items] == [second.id, first.id]

    def test_get_logs_filters(self):
        assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Unassigned", self.admin.id
        )
        assignment_log_service.create_log(
            self.alice.id, self.jira.id, "Assigned", SYSTEM_ACTOR_ID
        )

        assert assignment_log_service.get_logs(action="Unassigned").total == 1
        assert assignment_log_service.get_logs(software_id=self.slack.id).total == 2
        assert assignment_log_service.get_logs(changed_by=SYSTEM_ACTOR_ID).total == 2

    def test_get_logs_date_range(self):
        assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        tomorrow = utcnow() + timedelta(days=1)

        assert assignment_log_service.get_logs(start_date=tomorrow).total == 0
        assert assignment_log_service.get_logs(end_date=tomorrow).total == 1

    def test_search_matches_software_and_staff_names(self):
        assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        assignment_log_service.create_log(
            self.admin.id, self.jira.id, "Assigned", SYSTEM_ACTOR_ID
        )

        assert assignment_log_service.get_logs(search="slack").total == 1
        assert assignment_log_service.get_logs(search="alice").total == 1
        assert assignment_log_service.get_logs(search="tester").total == 2

    def test_update_log(self):
        entry = assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )

        updated = assignment_log_service.update_log(
            entry.id, action="Unassigned", software_id=None
        )

        assert updated.action == AssignmentAction.UNASSIGNED
        assert updated.software_id == self.slack.id

    def test_delete_log(self):
        entry = assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )

        assignment_log_service.delete_log(entry.id)

        assert SoftwareAssignmentLog.query.count() == 0
        with pytest.raises(RecordNotFoundError):
            assignment_log_service.get_log_by_id(entry.id)

    def test_describe_logs_resolves_names(self):
        assignment_log_service.create_log(
            self.alice.id, self.slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        assignment_log_service.create_log(
            self.alice.id, self.jira.id, "Assigned", self.admin.id
        )
        # Points at a software record that no longer exists.
        assignment_log_service.create_log(
            self.alice.id, 9999, "Unassigned", SYSTEM_ACTOR_ID
        )

        rows = assignment_log_service.describe_logs(
            assignment_log_service.get_all_logs()
        )
        by_software = {row["software_id"]: row for row in rows}

        assert by_software[self.slack.id]["staff_name"] == "Alice Tester"
        assert by_software[self.slack.id]["changed_by_name"] == "System"
        assert by_software[self.jira.id]["changed_by_name"] == "Admin Tester"
        assert by_software[9999]["software_name"] is None


class TestLogExports:
    """Tests for the CSV and Excel log exports."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        alice = make_staff(db_session, "alice@example.com")
        slack = make_software(db_session, "Slack")
        assignment_log_service.create_log(
            alice.id, slack.id, "Assigned", SYSTEM_ACTOR_ID
        )
        self.rows = assignment_log_service.describe_logs(
            assignment_log_service.get_all_logs()
        )

    def test_csv_export(self):
        buffer = export_service.export_logs_csv(self.rows)
        text = buffer.getvalue().decode("utf-8-sig")
        lines = text.strip().splitlines()

        assert lines[0].split(",") == LOG_EXPORT_HEADERS
        assert len(lines) == 2
        assert "Alice Tester" in lines[1]
        assert "System" in lines[1]

    def test_excel_export(self):
        buffer = export_service.export_logs_excel(self.rows)
        workbook = load_workbook(io.BytesIO(buffer.getvalue()))
        sheet = workbook["Assignment Logs"]

        header = [cell.value for cell in sheet[1]]
        assert header == LOG_EXPORT_HEADERS
        assert sheet.max_row == 2
        assert sheet.cell(row=2, column=7).value == "Slack"

    def test_empty_export_has_header_only(self):
        buffer = export_service.export_logs_csv([])
        lines = buffer.getvalue().decode("utf-8-sig").strip().splitlines()

        assert lines == [",".join(LOG_EXPORT_HEADERS)]
