"""
Pytest configuration and shared fixtures.

Provides a test application, database session, and test client that
all test modules can use. Uses the ``testing`` configuration, which
defaults to an in-memory SQLite database.
"""

import pytest

from software_tracker import create_app
from software_tracker.extensions import db as _db
from software_tracker.models.common import utcnow
from software_tracker.models.organization import Department, Staff, StaffStatus, Team
from software_tracker.models.software import Software


@pytest.fixture(scope="session")
def app():
    """
    Create a Flask application configured for testing.

    The app is created once per test session, with an application
    context held open for the whole session.
    """
    app = create_app("testing")

    # Establish an application context for the entire test session.
    with app.app_context():
        yield app


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Provide a clean database for each test function.

    Tables are created before the test and dropped afterwards, so every
    test starts from an empty schema.
    """
    _db.create_all()

    yield _db.session

    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


# -- Record builders -------------------------------------------------------


def make_department(session, name: str) -> Department:
    now = utcnow()
    department = Department(name=name, created_at=now, updated_at=now)
    session.add(department)
    session.commit()
    return department


def make_team(session, name: str, department: Department) -> Team:
    now = utcnow()
    team = Team(
        name=name, department_id=department.id, created_at=now, updated_at=now
    )
    session.add(team)
    session.commit()
    return team


def make_staff(
    session,
    email: str,
    department: Department | None = None,
    team: Team | None = None,
    status: StaffStatus = StaffStatus.ACTIVE,
) -> Staff:
    now = utcnow()
    local = email.split("@")[0]
    staff = Staff(
        first_name=local.capitalize(),
        last_name="Tester",
        email=email,
        department_id=department.id if department else None,
        team_id=team.id if team else None,
        status=status,
        created_at=now,
        updated_at=now,
    )
    session.add(staff)
    session.commit()
    return staff


def make_software(session, name: str) -> Software:
    now = utcnow()
    software = Software(
        name=name, software_type="SaaS", created_at=now, updated_at=now
    )
    session.add(software)
    session.commit()
    return software
