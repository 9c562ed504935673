"""
Organization structure models: departments, teams, and staff.

Staff membership in a department and a team drives the department-
and team-level match rules.  Both memberships are nullable; a staff
member without a team simply receives no team-level software.
"""

import enum

from software_tracker.extensions import db
from software_tracker.models.common import enum_type, isoformat


class StaffStatus(str, enum.Enum):
    """Lifecycle status of a staff member."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Department(db.Model):
    """Top-level organizational unit.  Department names are unique."""

    __tablename__ = "departments"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), unique=True, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    teams = db.relationship("Team", back_populates="department", lazy="dynamic")
    staff = db.relationship("Staff", back_populates="department", lazy="dynamic")

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "id": self.id,
            "name": self.name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Department {self.id}: {self.name}>"


class Team(db.Model):
    """A team within a department."""

    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), nullable=False)
    department_id = db.Column(
        db.Integer,
        db.ForeignKey("departments.id"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    department = db.relationship("Department", back_populates="teams")
    staff = db.relationship("Staff", back_populates="team", lazy="dynamic")

    def to_dict(self, include_department: bool = False) -> dict:
        """Return a JSON-serializable representation."""
        data = {
            "id": self.id,
            "name": self.name,
            "department_id": self.department_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_department and self.department is not None:
            data["department"] = self.department.to_dict()
        return data

    def __repr__(self) -> str:
        return f"<Team {self.id}: {self.name}>"


class Staff(db.Model):
    """
    Individual staff member.

    ``department_id`` and ``team_id`` select which department and team
    match rules apply.  Setting ``status`` to ``inactive`` triggers
    revocation of auto-assigned software in ``staff_service``.
    """

    __tablename__ = "staff"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False, index=True)
    department_id = db.Column(
        db.Integer, db.ForeignKey("departments.id"), nullable=True, index=True
    )
    team_id = db.Column(
        db.Integer, db.ForeignKey("teams.id"), nullable=True, index=True
    )
    status = db.Column(
        enum_type(StaffStatus, "staff_status"),
        nullable=False,
        default=StaffStatus.ACTIVE,
    )
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    department = db.relationship("Department", back_populates="staff")
    team = db.relationship("Team", back_populates="staff")
    assignments = db.relationship(
        "AssignedSoftware", back_populates="staff", lazy="dynamic"
    )

    @property
    def full_name(self) -> str:
        """Return the staff member's display name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == StaffStatus.ACTIVE

    def to_dict(self, include_units: bool = False) -> dict:
        """Return a JSON-serializable representation."""
        data = {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "department_id": self.department_id,
            "team_id": self.team_id,
            "status": self.status.value if self.status else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_units:
            data["department"] = (
                self.department.to_dict() if self.department else None
            )
            data["team"] = self.team.to_dict() if self.team else None
        return data

    def __repr__(self) -> str:
        return f"<Staff {self.id}: {self.full_name}>"
