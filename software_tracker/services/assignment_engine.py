"""
Assignment engine — keeps staff software assignments in line with match rules.

Match rules exist at three levels (department, team, organization).  The
engine materializes them as ``AssignedSoftware`` edges tagged with the
source that created them, and removes those edges again when a staff
member leaves the unit, a rule is deleted, or the staff member is
offboarded.  Manually granted edges are never touched, except by
``revoke_software`` (software deletion) and staff hard deletion.

All operations:
  - take an ``AssignmentStore`` and primitive IDs,
  - log every edge created or removed as ``SYSTEM_ACTOR_ID``,
  - raise ``StoreReadFailure`` if a read fails (before any write for
    ``auto_assign``),
  - keep going past per-item write failures and report them in the
    returned ``AssignmentResult``.

There is no cross-statement transaction: each write commits on its own.
"""

import logging
from dataclasses import dataclass, field

from software_tracker.exceptions import AssignmentStoreError
from software_tracker.models.audit import SYSTEM_ACTOR_ID, AssignmentAction
from software_tracker.models.common import utcnow
from software_tracker.models.match import (
    DepartmentMatch,
    MatchScope,
    OrganizationMatch,
    TeamMatch,
)
from software_tracker.models.organization import Staff
from software_tracker.models.software import AssignedSoftware, AssignmentSource
from software_tracker.services import assignment_log_service

logger = logging.getLogger(__name__)

_AUTOMATIC_SOURCES = tuple(s for s in AssignmentSource if s.is_automatic)


# ==========================================================================
# Result types
# ==========================================================================

@dataclass
class AssignmentOutcome:
    """What happened to one (staff, software) pair."""

    staff_id: int
    software_id: int
    action: AssignmentAction
    source: AssignmentSource | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "software_id": self.software_id,
            "action": self.action.value,
            "source": self.source.value if self.source else None,
            "error": self.error,
        }


@dataclass
class AssignmentResult:
    """Per-item outcomes of one engine operation."""

    outcomes: list[AssignmentOutcome] = field(default_factory=list)

    def add(self, outcome: AssignmentOutcome) -> None:
        self.outcomes.append(outcome)

    def extend(self, other: "AssignmentResult") -> None:
        self.outcomes.extend(other.outcomes)

    @property
    def assigned(self) -> list[AssignmentOutcome]:
        return [
            o for o in self.outcomes
            if o.succeeded and o.action == AssignmentAction.ASSIGNED
        ]

    @property
    def unassigned(self) -> list[AssignmentOutcome]:
        return [
            o for o in self.outcomes
            if o.succeeded and o.action == AssignmentAction.UNASSIGNED
        ]

    @property
    def failures(self) -> list[AssignmentOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def first_error(self) -> str | None:
        failures = self.failures
        return failures[0].error if failures else None

    def to_dict(self) -> dict:
        return {
            "assigned": len(self.assigned),
            "unassigned": len(self.unassigned),
            "failed": len(self.failures),
            "errors": [o.to_dict() for o in self.failures],
        }


# ==========================================================================
# Internal helpers
# ==========================================================================

def _create_edge(
    store,
    staff_id: int,
    software_id: int,
    source: AssignmentSource,
) -> AssignmentOutcome:
    """Insert one edge and log it.  Write failures become the outcome's error."""
    outcome = AssignmentOutcome(
        staff_id, software_id, AssignmentAction.ASSIGNED, source
    )
    now = utcnow()
    try:
        store.insert(
            AssignedSoftware(
                staff_id=staff_id,
                software_id=software_id,
                source=source,
                assigned_at=now,
                updated_at=now,
            )
        )
    except AssignmentStoreError as exc:
        logger.error(
            "Failed to assign software %s to staff %s: %s",
            software_id, staff_id, exc,
        )
        outcome.error = str(exc)
        return outcome

    _log(store, outcome)
    return outcome


def _remove_edge(store, edge: AssignedSoftware) -> AssignmentOutcome:
    """Delete one loaded edge and log it."""
    outcome = AssignmentOutcome(
        edge.staff_id, edge.software_id, AssignmentAction.UNASSIGNED, edge.source
    )
    try:
        store.delete(edge)
    except AssignmentStoreError as exc:
        logger.error(
            "Failed to unassign software %s from staff %s: %s",
            outcome.software_id, outcome.staff_id, exc,
        )
        outcome.error = str(exc)
        return outcome

    _log(store, outcome)
    return outcome


def _remove_by_source(
    store,
    staff_id: int,
    software_id: int,
    source: AssignmentSource,
) -> list[AssignmentOutcome]:
    """
    Delete edges (staff, software, source).  One outcome and one log
    row per deleted row; nothing when no row matched.
    """
    try:
        deleted = store.delete_where(
            AssignedSoftware,
            staff_id=staff_id,
            software_id=software_id,
            source=source,
        )
    except AssignmentStoreError as exc:
        logger.error(
            "Failed to unassign %s software %s from staff %s: %s",
            source.value, software_id, staff_id, exc,
        )
        return [
            AssignmentOutcome(
                staff_id, software_id, AssignmentAction.UNASSIGNED,
                source, str(exc),
            )
        ]

    outcomes = []
    for _ in range(deleted):
        outcome = AssignmentOutcome(
            staff_id, software_id, AssignmentAction.UNASSIGNED, source
        )
        _log(store, outcome)
        outcomes.append(outcome)
    return outcomes


def _log(store, outcome: AssignmentOutcome) -> None:
    """Write the audit row for a completed edge change."""
    try:
        assignment_log_service.log_change(
            store,
            staff_id=outcome.staff_id,
            software_id=outcome.software_id,
            action=outcome.action,
            changed_by=SYSTEM_ACTOR_ID,
        )
    except AssignmentStoreError as exc:
        logger.error(
            "Edge change for staff %s software %s applied but not logged: %s",
            outcome.staff_id, outcome.software_id, exc,
        )
        outcome.error = f"audit log failed: {exc}"


def _staff_in_scope(store, scope: MatchScope, scope_id: int | None) -> list[int]:
    """Return the IDs of staff members covered by a rule at this scope."""
    unit_column = scope.model.unit_column
    if unit_column is None:
        return store.pluck(Staff, "id")
    if not scope_id:
        return []
    return store.pluck(Staff, "id", **{unit_column: scope_id})


# ==========================================================================
# Auto-assignment
# ==========================================================================

def auto_assign(
    store,
    staff_id: int,
    department_id: int | None,
    team_id: int | None,
) -> AssignmentResult:
    """
    Grant a staff member every software their units' rules call for.

    Candidates are taken in order: department rules, team rules, then
    organization rules.  A candidate already assigned from any source
    is skipped, so the first source to claim a software keeps it.
    Running this twice changes nothing the second time.

    Args:
        store:         Assignment store handle.
        staff_id:      Staff member to assign to.
        department_id: The staff member's department, or None/0 for none.
        team_id:       The staff member's team, or None/0 for none.

    Returns:
        AssignmentResult with one outcome per created edge.

    Raises:
        StoreReadFailure: If existing assignments or rules cannot be read.
            Nothing has been written in that case.
    """
    result = AssignmentResult()

    existing = set(store.pluck(AssignedSoftware, "software_id", staff_id=staff_id))

    # Read everything before the first write.
    candidates: list[tuple[int, AssignmentSource]] = []
    if department_id:
        candidates.extend(
            (sid, AssignmentSource.DEPARTMENT)
            for sid in store.pluck(
                DepartmentMatch, "software_id", department_id=department_id
            )
        )
    if team_id:
        candidates.extend(
            (sid, AssignmentSource.TEAM)
            for sid in store.pluck(TeamMatch, "software_id", team_id=team_id)
        )
    candidates.extend(
        (sid, AssignmentSource.ORGANIZATION)
        for sid in store.pluck(OrganizationMatch, "software_id")
    )

    for software_id, source in candidates:
        if software_id in existing:
            continue
        # Claimed even when the insert fails; one attempt per software.
        existing.add(software_id)
        result.add(_create_edge(store, staff_id, software_id, source))

    logger.info(
        "Auto-assign staff %s: %d assigned, %d failed",
        staff_id, len(result.assigned), len(result.failures),
    )
    return result


# ==========================================================================
# Synchronization
# ==========================================================================

def sync_staff_assignments(
    store,
    staff_id: int,
    old_department_id: int | None,
    old_team_id: int | None,
    new_department_id: int | None,
    new_team_id: int | None,
) -> AssignmentResult:
    """
    Re-align a staff member's software after a department/team move.

    Revokes the old department's and old team's rule-sourced edges
    (edges of the matching source only), then runs ``auto_assign`` for
    the new units.  Manual and organization edges are left in place, as
    are the edges of a unit that did not change; syncing identical old
    and new units writes nothing.

    Raises:
        StoreReadFailure: If rules or assignments cannot be read.
    """
    result = AssignmentResult()

    old_units = (
        (MatchScope.DEPARTMENT, old_department_id, new_department_id),
        (MatchScope.TEAM, old_team_id, new_team_id),
    )
    for scope, unit_id, new_unit_id in old_units:
        # An unchanged unit keeps its edges.
        if not unit_id or unit_id == new_unit_id:
            continue
        software_ids = store.pluck(
            scope.model, "software_id", **{scope.model.unit_column: unit_id}
        )
        for software_id in software_ids:
            result.outcomes.extend(
                _remove_by_source(store, staff_id, software_id, scope.source)
            )

    result.extend(auto_assign(store, staff_id, new_department_id, new_team_id))

    logger.info(
        "Synced staff %s (dept %s->%s, team %s->%s): "
        "%d assigned, %d unassigned, %d failed",
        staff_id,
        old_department_id, new_department_id,
        old_team_id, new_team_id,
        len(result.assigned), len(result.unassigned), len(result.failures),
    )
    return result


def assign_to_scope(
    store,
    scope: MatchScope,
    scope_id: int | None,
    software_id: int,
) -> AssignmentResult:
    """
    Apply a newly created rule to every staff member it covers.

    Each staff member is checked individually; those who already hold
    the software from any source are skipped.  New edges are tagged with
    the rule's scope as their source.

    Args:
        store:       Assignment store handle.
        scope:       The rule's scope.
        scope_id:    Department/team ID; ignored for organization scope.
        software_id: The rule's software.

    Raises:
        StoreReadFailure: If the staff list cannot be read.
    """
    scope = MatchScope(scope)
    result = AssignmentResult()

    for staff_id in _staff_in_scope(store, scope, scope_id):
        try:
            already = store.exists(
                AssignedSoftware, staff_id=staff_id, software_id=software_id
            )
        except AssignmentStoreError as exc:
            logger.error(
                "Could not check software %s for staff %s: %s",
                software_id, staff_id, exc,
            )
            result.add(
                AssignmentOutcome(
                    staff_id, software_id, AssignmentAction.ASSIGNED,
                    scope.source, str(exc),
                )
            )
            continue
        if already:
            logger.debug(
                "Staff %s already has software %s; skipping.",
                staff_id, software_id,
            )
            continue
        result.add(_create_edge(store, staff_id, software_id, scope.source))

    logger.info(
        "Rule %s:%s software %s applied: %d assigned, %d failed",
        scope.value, scope_id, software_id,
        len(result.assigned), len(result.failures),
    )
    return result


def revoke_from_scope(
    store,
    scope: MatchScope,
    scope_id: int | None,
    software_id: int,
) -> AssignmentResult:
    """
    Undo a deleted rule for every staff member it covered.

    Only edges whose source equals the rule's scope are removed, so a
    manual grant or a grant from another level survives.

    Raises:
        StoreReadFailure: If the staff list cannot be read.
    """
    scope = MatchScope(scope)
    result = AssignmentResult()

    for staff_id in _staff_in_scope(store, scope, scope_id):
        result.outcomes.extend(
            _remove_by_source(store, staff_id, software_id, scope.source)
        )

    logger.info(
        "Rule %s:%s software %s revoked: %d unassigned, %d failed",
        scope.value, scope_id, software_id,
        len(result.unassigned), len(result.failures),
    )
    return result


# ==========================================================================
# Revocation
# ==========================================================================

def revoke_all(
    store,
    staff_id: int,
    include_manual: bool = False,
) -> AssignmentResult:
    """
    Remove a staff member's rule-sourced software (offboarding).

    Args:
        store:          Assignment store handle.
        staff_id:       Staff member to revoke from.
        include_manual: Also remove manual edges.  Only used when the
                        staff record itself is being deleted.

    Raises:
        StoreReadFailure: If the staff member's edges cannot be read.
    """
    result = AssignmentResult()

    for edge in store.find(AssignedSoftware, staff_id=staff_id):
        if edge.source in _AUTOMATIC_SOURCES or include_manual:
            result.add(_remove_edge(store, edge))

    logger.info(
        "Revoked software from staff %s: %d unassigned, %d failed",
        staff_id, len(result.unassigned), len(result.failures),
    )
    return result


def revoke_software(store, software_id: int) -> AssignmentResult:
    """
    Remove every edge referencing a software product, regardless of source.

    Used before deleting the software record itself.

    Raises:
        StoreReadFailure: If the edges cannot be read.
    """
    result = AssignmentResult()

    for edge in store.find(AssignedSoftware, software_id=software_id):
        result.add(_remove_edge(store, edge))

    logger.info(
        "Revoked software %s from all staff: %d unassigned, %d failed",
        software_id, len(result.unassigned), len(result.failures),
    )
    return result
