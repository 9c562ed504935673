"""
Service layer package.

Each service module encapsulates one domain of business logic.
Services are the only layer that interacts with models; routes
never access the database directly.

The assignment engine receives an ``AssignmentStore`` explicitly; the
CRUD services obtain one with ``store.get_store()`` when they need to
trigger it::

    from software_tracker.services import assignment_engine
    from software_tracker.services.store import get_store

    assignment_engine.auto_assign(get_store(), staff.id, dept_id, team_id)
"""
