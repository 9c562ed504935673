"""
Column helpers shared by the model modules.
"""

import enum
from datetime import datetime, timezone

from software_tracker.extensions import db


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime (DB convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_type(enum_cls: type[enum.Enum], name: str) -> db.Enum:
    """
    Build a SQLAlchemy ``Enum`` column type that stores member values.

    The type is non-native (VARCHAR) so the same schema works on SQL
    Server and SQLite.  ``validate_strings`` makes the ORM reject any
    string that is not a member value instead of writing it through.
    """
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        validate_strings=True,
        values_callable=lambda members: [member.value for member in members],
    )


def isoformat(value: datetime | None) -> str | None:
    """Serialize a datetime for JSON responses."""
    return value.isoformat() if value is not None else None
