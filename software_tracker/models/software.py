"""
Software catalog and assignment models.

``Software`` is a catalog entry (unique by name).  ``AssignedSoftware``
is the materialized edge between a staff member and a software product,
tagged with the ``AssignmentSource`` that created it.
"""

import enum

from software_tracker.extensions import db
from software_tracker.models.common import enum_type, isoformat


class AssignmentSource(str, enum.Enum):
    """
    Why an assignment edge exists.

    ``manual`` edges are granted by an administrator.  The other three
    are created by the assignment engine from match rules and are
    revoked by it when the rule or the staff member's membership goes
    away.
    """

    MANUAL = "manual"
    DEPARTMENT = "department"
    TEAM = "team"
    ORGANIZATION = "organization"

    @property
    def is_automatic(self) -> bool:
        """True for sources created by match rules."""
        return self is not AssignmentSource.MANUAL


class Software(db.Model):
    """A software license or tool that can be assigned to staff."""

    __tablename__ = "software"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), unique=True, nullable=False)
    description = db.Column(db.String(500), nullable=True)
    # Free-form category, e.g. "SaaS" or "License".
    software_type = db.Column(db.String(50), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    assignments = db.relationship(
        "AssignedSoftware", back_populates="software", lazy="dynamic"
    )

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.software_type,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Software {self.name}>"


class AssignedSoftware(db.Model):
    """
    A software product assigned to a staff member.

    At most one edge should exist per (staff, software) pair.  This is
    enforced by the assignment engine and the manual assignment
    service rather than by a unique constraint.
    """

    __tablename__ = "assigned_software"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    staff_id = db.Column(
        db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True
    )
    software_id = db.Column(
        db.Integer, db.ForeignKey("software.id"), nullable=False, index=True
    )
    source = db.Column(
        enum_type(AssignmentSource, "assignment_source"),
        nullable=False,
        default=AssignmentSource.MANUAL,
    )
    assigned_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    staff = db.relationship("Staff", back_populates="assignments")
    software = db.relationship("Software", back_populates="assignments")

    def to_dict(self, include_software: bool = False) -> dict:
        """Return a JSON-serializable representation."""
        data = {
            "id": self.id,
            "staff_id": self.staff_id,
            "software_id": self.software_id,
            "source": self.source.value if self.source else None,
            "assigned_at": isoformat(self.assigned_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_software and self.software is not None:
            data["software"] = self.software.name
        return data

    def __repr__(self) -> str:
        return (
            f"<AssignedSoftware staff={self.staff_id} "
            f"software={self.software_id} source={self.source}>"
        )
