"""Tests for match rule creation, update, and deletion."""

import pytest

from conftest import make_department, make_software, make_staff, make_team
from software_tracker.exceptions import DuplicateRecordError, RecordNotFoundError
from software_tracker.models.common import utcnow
from software_tracker.models.match import DepartmentMatch, MatchScope, OrganizationMatch
from software_tracker.models.software import AssignedSoftware, AssignmentSource
from software_tracker.services import match_service


class TestMatchService:
    """Tests for match_service across the three rule scopes."""

    @pytest.fixture(autouse=True)
    def _setup(self, app, db_session):
        self.session = db_session
        self.eng = make_department(db_session, "Engineering")
        self.sales = make_department(db_session, "Sales")
        self.backend = make_team(db_session, "Backend", self.eng)
        self.tool = make_software(db_session, "Tool")
        self.other = make_software(db_session, "Other")

        self.alice = make_staff(db_session, "alice@example.com", self.eng, self.backend)
        self.bob = make_staff(db_session, "bob@example.com", self.sales)

    def test_create_department_rule_applies_to_members(self):
        match, result = match_service.create_match(
            MatchScope.DEPARTMENT, self.tool.id, self.eng.id
        )

        assert match.department_id == self.eng.id
        assert [o.staff_id for o in result.assigned] == [self.alice.id]
        edge = AssignedSoftware.query.filter_by(staff_id=self.alice.id).one()
        assert edge.source == AssignmentSource.DEPARTMENT

    def test_create_organization_rule_ignores_unit(self):
        match, result = match_service.create_match("organization", self.tool.id, 42)

        assert isinstance(match, OrganizationMatch)
        assert len(result.assigned) == 2

    def test_create_without_auto_assign(self):
        _, result = match_service.create_match(
            MatchScope.TEAM, self.tool.id, self.backend.id, auto_assign=False
        )

        assert result.outcomes == []
        assert AssignedSoftware.query.count() == 0

    def test_duplicate_rule_is_rejected_without_side_effects(self):
        """A second identical rule fails before touching assignments."""
        match_service.create_match(MatchScope.DEPARTMENT, self.tool.id, self.eng.id)
        edges_before = AssignedSoftware.query.count()

        with pytest.raises(DuplicateRecordError):
            match_service.create_match(
                MatchScope.DEPARTMENT, self.tool.id, self.eng.id
            )

        assert DepartmentMatch.query.count() == 1
        assert AssignedSoftware.query.count() == edges_before

    def test_same_software_in_other_department_is_allowed(self):
        match_service.create_match(MatchScope.DEPARTMENT, self.tool.id, self.eng.id)
        match_service.create_match(MatchScope.DEPARTMENT, self.tool.id, self.sales.id)

        assert DepartmentMatch.query.count() == 2

    def test_unit_scope_requires_unit(self):
        with pytest.raises(ValueError, match="department_id"):
            match_service.create_match(MatchScope.DEPARTMENT, self.tool.id)

    def test_unknown_software_or_unit(self):
        with pytest.raises(RecordNotFoundError):
            match_service.create_match(MatchScope.TEAM, 9999, self.backend.id)
        with pytest.raises(RecordNotFoundError):
            match_service.create_match(MatchScope.TEAM, self.tool.id, 9999)

    def test_unknown_scope(self):
        with pytest.raises(ValueError):
            match_service.get_matches("division")

    def test_delete_rule_revokes_its_edges_only(self):
        """Manual grants of the same software survive rule deletion."""
        match, _ = match_service.create_match(
            MatchScope.ORGANIZATION, self.tool.id
        )
        self.session.query(AssignedSoftware).filter_by(
            staff_id=self.bob.id
        ).update({"source": AssignmentSource.MANUAL})
        self.session.commit()

        result = match_service.delete_match(MatchScope.ORGANIZATION, match.id)

        assert [o.staff_id for o in result.unassigned] == [self.alice.id]
        remaining = AssignedSoftware.query.all()
        assert [(e.staff_id, e.source) for e in remaining] == [
            (self.bob.id, AssignmentSource.MANUAL)
        ]
        assert OrganizationMatch.query.count() == 0

    def test_delete_without_revoke_keeps_edges(self):
        match, _ = match_service.create_match(
            MatchScope.TEAM, self.tool.id, self.backend.id
        )

        result = match_service.delete_match(MatchScope.TEAM, match.id, revoke=False)

        assert result.outcomes == []
        assert AssignedSoftware.query.count() == 1

    def test_update_rule_changes_software(self):
        match, _ = match_service.create_match(
            MatchScope.DEPARTMENT, self.tool.id, self.eng.id, auto_assign=False
        )

        updated = match_service.update_match(
            MatchScope.DEPARTMENT, match.id, software_id=self.other.id
        )

        assert updated.software_id == self.other.id
        assert updated.department_id == self.eng.id

    def test_update_rule_cannot_duplicate_another(self):
        match_service.create_match(
            MatchScope.DEPARTMENT, self.tool.id, self.eng.id, auto_assign=False
        )
        second, _ = match_service.create_match(
            MatchScope.DEPARTMENT, self.other.id, self.eng.id, auto_assign=False
        )

        with pytest.raises(DuplicateRecordError):
            match_service.update_match(
                MatchScope.DEPARTMENT, second.id, software_id=self.tool.id
            )

    def test_get_matches_filters_by_unit(self):
        now = utcnow()
        self.session.add_all(
            [
                DepartmentMatch(
                    software_id=self.tool.id,
                    department_id=self.eng.id,
                    created_at=now,
                    updated_at=now,
                ),
                DepartmentMatch(
                    software_id=self.tool.id,
                    department_id=self.sales.id,
                    created_at=now,
                    updated_at=now,
                ),
            ]
        )
        self.session.commit()

        matches = match_service.get_matches(
            MatchScope.DEPARTMENT, unit_id=self.sales.id
        )

        assert [m.department_id for m in matches] == [self.sales.id]

    def test_get_match_by_id_missing(self):
        with pytest.raises(RecordNotFoundError):
            match_service.get_match_by_id(MatchScope.TEAM, 9999)
