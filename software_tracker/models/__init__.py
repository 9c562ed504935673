"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - organization.py -> departments, teams, staff
  - software.py     -> software catalog and assignment edges
  - match.py        -> organization / department / team match rules
  - audit.py        -> assignment audit log
"""

from software_tracker.models.organization import (  # noqa: F401
    Department,
    Staff,
    StaffStatus,
    Team,
)
from software_tracker.models.software import (  # noqa: F401
    AssignedSoftware,
    AssignmentSource,
    Software,
)
from software_tracker.models.match import (  # noqa: F401
    MATCH_MODELS,
    DepartmentMatch,
    MatchScope,
    OrganizationMatch,
    TeamMatch,
)
from software_tracker.models.audit import (  # noqa: F401
    SYSTEM_ACTOR_ID,
    AssignmentAction,
    SoftwareAssignmentLog,
)
