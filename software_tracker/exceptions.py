"""
Exception types raised by the service layer.

The request layer maps each type to an HTTP status in
``software_tracker.create_app``:

  - ``RecordNotFoundError``  -> 404
  - ``DuplicateRecordError`` -> 409
  - ``ValueError``           -> 400 (invalid input)
  - ``AssignmentStoreError`` -> 500

``RecordNotFoundError`` and ``DuplicateRecordError`` subclass
``ValueError`` so callers that only care about "bad request" can catch
the base class.
"""


class RecordNotFoundError(ValueError):
    """A referenced record does not exist."""


class DuplicateRecordError(ValueError):
    """A record violating a uniqueness rule was rejected before insert."""


class AssignmentStoreError(Exception):
    """Base class for failures reported by the assignment store."""


class StoreReadFailure(AssignmentStoreError):
    """A lookup or list query against the store failed."""


class StoreWriteFailure(AssignmentStoreError):
    """A create, update, or delete against the store failed."""
