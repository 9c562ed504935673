"""
Custom Flask CLI commands.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check             # Verify database connectivity and tables
    flask init-db              # Create all tables (local development)
    flask resync-assignments   # Re-apply match rules to every active staff member
"""

import click
from flask.cli import with_appcontext
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from software_tracker.exceptions import AssignmentStoreError
from software_tracker.extensions import db

_EXPECTED_TABLES = (
    "departments",
    "teams",
    "staff",
    "software",
    "assigned_software",
    "software_organization_matches",
    "software_department_matches",
    "software_team_matches",
    "software_assignment_logs",
)


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Tests the connection string from the app config, runs a simple
    query, and lists which application tables are present.
    """
    click.echo("=" * 60)
    click.echo("  Software Tracker — Database Connectivity Check")
    click.echo("=" * 60)

    db_uri = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_uri}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Is ODBC Driver 18 for SQL Server installed?")
        click.echo("    - Does DATABASE_URL match your server config?")
        raise SystemExit(1)
    if not row or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        raise SystemExit(1)
    click.secho("      ✓ Connected successfully.", fg="green")

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    existing = set(inspect(db.engine).get_table_names())
    missing = [name for name in _EXPECTED_TABLES if name not in existing]
    for name in _EXPECTED_TABLES:
        mark = "✓" if name in existing else "✗"
        click.echo(f"      {mark} {name}")

    if missing:
        click.secho(
            f"\n      {len(missing)} table(s) missing. "
            "Run 'flask db upgrade' or 'flask init-db'.",
            fg="yellow",
        )
        raise SystemExit(1)

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all tables directly from the models (no migration history)."""
    db.create_all()
    backend = db.engine.url.get_backend_name()
    click.secho(f"Tables created ({backend}).", fg="green")


@click.command("resync-assignments")
@click.option(
    "--staff-id",
    type=int,
    default=None,
    help="Only re-sync this staff member.",
)
@with_appcontext
def resync_assignments_command(staff_id):
    """
    Re-apply match rules to active staff members.

    Runs auto-assignment for each active staff member's current units.
    Existing assignments are kept; missing ones are created and logged.
    """
    # pylint: disable=import-outside-toplevel
    from software_tracker.models.organization import Staff, StaffStatus
    from software_tracker.services import assignment_engine
    from software_tracker.services.store import get_store

    query = Staff.query.filter(Staff.status == StaffStatus.ACTIVE)
    if staff_id is not None:
        query = query.filter(Staff.id == staff_id)
    staff_members = query.order_by(Staff.id).all()

    store = get_store()
    assigned = failed = 0
    for staff in staff_members:
        try:
            result = assignment_engine.auto_assign(
                store, staff.id, staff.department_id, staff.team_id
            )
        except AssignmentStoreError as exc:
            click.secho(f"Staff {staff.id}: {exc}", fg="red")
            failed += 1
            continue
        assigned += len(result.assigned)
        failed += len(result.failures)
        for failure in result.failures:
            click.secho(
                f"Staff {failure.staff_id} software {failure.software_id}: "
                f"{failure.error}",
                fg="red",
            )

    click.echo(
        f"Processed: {len(staff_members)}  Assigned: {assigned}  Failed: {failed}"
    )


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(init_db_command)
    app.cli.add_command(resync_assignments_command)
