"""Initial schema for the software assignment tracker

Creates the organization tables (departments, teams, staff), the
software catalog, assignment edges, the three match rule tables, and
the assignment log.

Enum-like columns (staff.status, assigned_software.source,
software_assignment_logs.action) are plain VARCHAR(20); the ORM
validates their values.  Log rows deliberately carry no foreign keys
so the trail survives deletion of staff and software.

Revision ID: 3f9c2a71b4d0
Revises:
Create Date: 2026-10-19 09:12:44.310522

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c2a71b4d0"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names: str) -> list[sa.Column]:
    return [
        sa.Column(name, sa.DateTime(), server_default=sa.func.now(), nullable=False)
        for name in names
    ]


def upgrade() -> None:
    """Create all application tables."""
    # -- Organization ------------------------------------------------------
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_teams_department_id", "teams", ["department_id"])

    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_staff_email", "staff", ["email"], unique=True)
    op.create_index("ix_staff_department_id", "staff", ["department_id"])
    op.create_index("ix_staff_team_id", "staff", ["team_id"])

    # -- Software and assignments ------------------------------------------
    op.create_table(
        "software",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("software_type", sa.String(length=50), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "assigned_software",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("software_id", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(length=20), nullable=False),
        *_timestamps("assigned_at", "updated_at"),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"]),
        sa.ForeignKeyConstraint(["software_id"], ["software.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_assigned_software_staff_id", "assigned_software", ["staff_id"])
    op.create_index(
        "ix_assigned_software_software_id", "assigned_software", ["software_id"]
    )

    # -- Match rules -------------------------------------------------------
    op.create_table(
        "software_organization_matches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("software_id", sa.Integer(), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.ForeignKeyConstraint(["software_id"], ["software.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("software_id", name="UQ_org_match_software"),
    )
    op.create_index(
        "ix_software_organization_matches_software_id",
        "software_organization_matches",
        ["software_id"],
    )
    op.create_table(
        "software_department_matches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("software_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.ForeignKeyConstraint(["software_id"], ["software.id"]),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "software_id", "department_id", name="UQ_dept_match_software_dept"
        ),
    )
    op.create_index(
        "ix_software_department_matches_software_id",
        "software_department_matches",
        ["software_id"],
    )
    op.create_index(
        "ix_software_department_matches_department_id",
        "software_department_matches",
        ["department_id"],
    )
    op.create_table(
        "software_team_matches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("software_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.ForeignKeyConstraint(["software_id"], ["software.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "software_id", "team_id", name="UQ_team_match_software_team"
        ),
    )
    op.create_index(
        "ix_software_team_matches_software_id",
        "software_team_matches",
        ["software_id"],
    )
    op.create_index(
        "ix_software_team_matches_team_id", "software_team_matches", ["team_id"]
    )

    # -- Assignment log (no foreign keys) ----------------------------------
    op.create_table(
        "software_assignment_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("software_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("changed_by", sa.Integer(), nullable=False),
        *_timestamps("changed_at", "updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_software_assignment_logs_staff_id",
        "software_assignment_logs",
        ["staff_id"],
    )
    op.create_index(
        "ix_software_assignment_logs_software_id",
        "software_assignment_logs",
        ["software_id"],
    )
    op.create_index(
        "ix_software_assignment_logs_changed_at",
        "software_assignment_logs",
        ["changed_at"],
    )


def downgrade() -> None:
    """Drop all application tables in dependency order."""
    op.drop_table("software_assignment_logs")
    op.drop_table("software_team_matches")
    op.drop_table("software_department_matches")
    op.drop_table("software_organization_matches")
    op.drop_table("assigned_software")
    op.drop_table("software")
    op.drop_table("staff")
    op.drop_table("teams")
    op.drop_table("departments")
