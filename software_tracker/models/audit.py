"""
Assignment audit log model.

``SoftwareAssignmentLog`` records every time a software product is
assigned to or unassigned from a staff member.  Rows are append-only
from the engine's point of view; the log API allows explicit
corrections, which are ordinary record edits.

``staff_id`` and ``software_id`` are deliberately not foreign keys so
the trail outlives deleted staff and software records.
"""

import enum

from software_tracker.extensions import db
from software_tracker.models.common import enum_type, isoformat

# ``changed_by`` value recorded for engine-initiated changes.
SYSTEM_ACTOR_ID = 0


class AssignmentAction(str, enum.Enum):
    """What happened to the assignment edge."""

    ASSIGNED = "Assigned"
    UNASSIGNED = "Unassigned"


class SoftwareAssignmentLog(db.Model):
    """
    One assignment or unassignment event.

    ``changed_by`` is the acting identity; ``SYSTEM_ACTOR_ID`` (0) marks
    changes made by the assignment engine.
    """

    __tablename__ = "software_assignment_logs"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    staff_id = db.Column(db.Integer, nullable=False, index=True)
    software_id = db.Column(db.Integer, nullable=False, index=True)
    action = db.Column(
        enum_type(AssignmentAction, "assignment_action"), nullable=False
    )
    changed_by = db.Column(db.Integer, nullable=False, default=SYSTEM_ACTOR_ID)
    changed_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now(), index=True
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    @property
    def is_system_change(self) -> bool:
        return self.changed_by == SYSTEM_ACTOR_ID

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "software_id": self.software_id,
            "action": self.action.value if self.action else None,
            "changed_by": self.changed_by,
            "changed_at": isoformat(self.changed_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return (
            f"<SoftwareAssignmentLog {self.action} "
            f"staff={self.staff_id} software={self.software_id}>"
        )
