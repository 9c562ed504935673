"""
Assignment store — the persistence handle used by the assignment engine.

``AssignmentStore`` wraps a SQLAlchemy session and exposes the small set
of primitives the engine needs (get, find, exists, pluck, insert, delete,
delete_where).  Every write is committed on its own; a failure in one
write never rolls back an earlier one.

Database errors are rolled back and re-raised as ``StoreReadFailure`` or
``StoreWriteFailure`` so callers never deal with raw SQLAlchemy
exceptions.  Tests substitute a subclass to inject failures.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from software_tracker.exceptions import StoreReadFailure, StoreWriteFailure
from software_tracker.extensions import db

logger = logging.getLogger(__name__)


class AssignmentStore:
    """
    Thin persistence handle over a SQLAlchemy session.

    Filters are keyword equality filters on mapped columns, e.g.
    ``store.find(AssignedSoftware, staff_id=3, source=AssignmentSource.TEAM)``.
    """

    def __init__(self, session) -> None:
        self.session = session

    # -- Reads -------------------------------------------------------------

    def get(self, model, record_id: int):
        """Return the record with the given primary key, or None."""
        try:
            return self.session.get(model, record_id)
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreReadFailure(
                f"Failed to load {model.__name__} {record_id}: {exc}"
            ) from exc

    def find(self, model, **filters: Any) -> list:
        """Return all records matching the filters, ordered by ID."""
        stmt = (
            select(model)
            .where(*self._criteria(model, filters))
            .order_by(model.id)
        )
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreReadFailure(
                f"Failed to query {model.__name__}: {exc}"
            ) from exc

    def first(self, model, **filters: Any):
        """Return the first record matching the filters, or None."""
        stmt = (
            select(model)
            .where(*self._criteria(model, filters))
            .order_by(model.id)
            .limit(1)
        )
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreReadFailure(
                f"Failed to query {model.__name__}: {exc}"
            ) from exc

    def exists(self, model, **filters: Any) -> bool:
        """Return True if at least one record matches the filters."""
        return self.first(model, **filters) is not None

    def pluck(self, model, column: str, **filters: Any) -> list:
        """Return a single column's values for every matching record."""
        stmt = (
            select(getattr(model, column))
            .where(*self._criteria(model, filters))
            .order_by(model.id)
        )
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreReadFailure(
                f"Failed to read {model.__name__}.{column}: {exc}"
            ) from exc

    # -- Writes ------------------------------------------------------------

    def insert(self, record):
        """Add and commit a new record.  Returns the record."""
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreWriteFailure(
                f"Failed to insert {type(record).__name__}: {exc}"
            ) from exc
        return record

    def delete(self, record) -> None:
        """Delete and commit a single record."""
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreWriteFailure(
                f"Failed to delete {type(record).__name__} "
                f"{getattr(record, 'id', None)}: {exc}"
            ) from exc

    def delete_where(self, model, **filters: Any) -> int:
        """
        Bulk-delete every record matching the filters.

        Returns:
            The number of rows deleted.
        """
        try:
            count = (
                self.session.query(model)
                .filter(*self._criteria(model, filters))
                .delete(synchronize_session="fetch")
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreWriteFailure(
                f"Failed to delete {model.__name__} rows: {exc}"
            ) from exc
        return count

    # -- Internals ---------------------------------------------------------

    @staticmethod
    def _criteria(model, filters: dict[str, Any]) -> list:
        return [getattr(model, name) == value for name, value in filters.items()]

    def _rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed after store error.")


def get_store() -> AssignmentStore:
    """Return a store bound to the current Flask-SQLAlchemy session."""
    return AssignmentStore(db.session)
