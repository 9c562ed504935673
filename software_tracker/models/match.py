"""
Match rule models.

A match rule states that a software product must be assigned to every
staff member in a scope: the whole organization, one department, or
one team.  Each (software, scope unit) pair may exist only once.

``MatchScope`` is the closed set of scopes.  ``MATCH_MODELS`` maps each
scope to its rule model; each model names the ``Staff`` column that
selects the staff members it covers (``None`` for organization scope).
"""

import enum

from software_tracker.extensions import db
from software_tracker.models.common import isoformat
from software_tracker.models.software import AssignmentSource


class MatchScope(str, enum.Enum):
    """The three levels a match rule can target."""

    ORGANIZATION = "organization"
    DEPARTMENT = "department"
    TEAM = "team"

    @property
    def source(self) -> AssignmentSource:
        """Assignment source tag used for edges created by this scope."""
        return AssignmentSource(self.value)

    @property
    def model(self) -> type["_MatchMixin"]:
        """Rule model storing matches for this scope."""
        return MATCH_MODELS[self]


class _MatchMixin:
    """Columns and helpers shared by the three rule tables."""

    # Name of the column on both the rule and ``Staff`` identifying the
    # scope unit.  ``None`` means the rule covers every staff member.
    unit_column = None
    scope = None

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    @property
    def unit_id(self) -> int | None:
        """Primary key of the department/team this rule targets."""
        if self.unit_column is None:
            return None
        return getattr(self, self.unit_column)

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        data = {
            "id": self.id,
            "scope": self.scope.value,
            "software_id": self.software_id,
        }
        if self.unit_column is not None:
            data[self.unit_column] = self.unit_id
        if self.software is not None:
            data["software"] = self.software.name
        data["created_at"] = isoformat(self.created_at)
        data["updated_at"] = isoformat(self.updated_at)
        return data


class OrganizationMatch(_MatchMixin, db.Model):
    """Software assigned to every staff member in the organization."""

    __tablename__ = "software_organization_matches"
    __table_args__ = (
        db.UniqueConstraint("software_id", name="UQ_org_match_software"),
    )

    scope = MatchScope.ORGANIZATION

    software_id = db.Column(
        db.Integer, db.ForeignKey("software.id"), nullable=False, index=True
    )

    software = db.relationship("Software")

    def __repr__(self) -> str:
        return f"<OrganizationMatch software={self.software_id}>"


class DepartmentMatch(_MatchMixin, db.Model):
    """Software assigned to every staff member of one department."""

    __tablename__ = "software_department_matches"
    __table_args__ = (
        db.UniqueConstraint(
            "software_id", "department_id", name="UQ_dept_match_software_dept"
        ),
    )

    scope = MatchScope.DEPARTMENT
    unit_column = "department_id"

    software_id = db.Column(
        db.Integer, db.ForeignKey("software.id"), nullable=False, index=True
    )
    department_id = db.Column(
        db.Integer, db.ForeignKey("departments.id"), nullable=False, index=True
    )

    software = db.relationship("Software")
    department = db.relationship("Department")

    def __repr__(self) -> str:
        return (
            f"<DepartmentMatch software={self.software_id} "
            f"department={self.department_id}>"
        )


class TeamMatch(_MatchMixin, db.Model):
    """Software assigned to every staff member of one team."""

    __tablename__ = "software_team_matches"
    __table_args__ = (
        db.UniqueConstraint(
            "software_id", "team_id", name="UQ_team_match_software_team"
        ),
    )

    scope = MatchScope.TEAM
    unit_column = "team_id"

    software_id = db.Column(
        db.Integer, db.ForeignKey("software.id"), nullable=False, index=True
    )
    team_id = db.Column(
        db.Integer, db.ForeignKey("teams.id"), nullable=False, index=True
    )

    software = db.relationship("Software")
    team = db.relationship("Team")

    def __repr__(self) -> str:
        return f"<TeamMatch software={self.software_id} team={self.team_id}>"


MATCH_MODELS: dict[MatchScope, type[_MatchMixin]] = {
    MatchScope.ORGANIZATION: OrganizationMatch,
    MatchScope.DEPARTMENT: DepartmentMatch,
    MatchScope.TEAM: TeamMatch,
}
