"""
Status Workflow Engine - incident lifecycle state machine.

DESIGN PRINCIPLES:
- Forward only: submitted → assigned → en_route → on_scene → resolved
- Skipping forward is allowed (an agency may report on_scene directly)
- resolved is terminal
- Entering assigned happens only through agency assignment
- All transitions logged in status_history
"""

from typing import Dict, FrozenSet, List, Optional

from app.core.errors import ConflictError, ValidationError
from app.models.report import IncidentStatus, StatusHistoryEntry
import logging

logger = logging.getLogger(__name__)


class StatusWorkflowEngine:
    """
    State machine for report lifecycle status.

    Rules:
    - No backward transitions
    - Nothing leaves resolved
    - Agency admins may only target en_route, on_scene or resolved
    """

    ORDER: List[IncidentStatus] = [
        IncidentStatus.SUBMITTED,
        IncidentStatus.ASSIGNED,
        IncidentStatus.EN_ROUTE,
        IncidentStatus.ON_SCENE,
        IncidentStatus.RESOLVED,
    ]

    # Targets reachable by advance_status
    ADVANCEABLE_TARGETS: FrozenSet[IncidentStatus] = frozenset({
        IncidentStatus.EN_ROUTE,
        IncidentStatus.ON_SCENE,
        IncidentStatus.RESOLVED,
    })

    # Allowed transitions map: {from_status: [to_status, ...]}
    ALLOWED_TRANSITIONS: Dict[IncidentStatus, List[IncidentStatus]] = {
        IncidentStatus.SUBMITTED: [IncidentStatus.ASSIGNED],
        IncidentStatus.ASSIGNED: [IncidentStatus.EN_ROUTE, IncidentStatus.ON_SCENE, IncidentStatus.RESOLVED],
        IncidentStatus.EN_ROUTE: [IncidentStatus.ON_SCENE, IncidentStatus.RESOLVED],
        IncidentStatus.ON_SCENE: [IncidentStatus.RESOLVED],
        IncidentStatus.RESOLVED: []  # Terminal state, no transitions allowed
    }

    @classmethod
    def rank(cls, status: IncidentStatus) -> int:
        return cls.ORDER.index(IncidentStatus(status))

    @classmethod
    def is_terminal(cls, status: IncidentStatus) -> bool:
        return IncidentStatus(status) == IncidentStatus.RESOLVED

    @classmethod
    def is_at_least(cls, status: IncidentStatus, floor: IncidentStatus) -> bool:
        return cls.rank(status) >= cls.rank(floor)

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid.

        Same status counts as valid (no-op) except on the terminal state.
        """
        try:
            from_enum = IncidentStatus(from_status)
            to_enum = IncidentStatus(to_status)
        except ValueError:
            return False

        if from_enum == to_enum:
            return not cls.is_terminal(from_enum)

        return to_enum in cls.ALLOWED_TRANSITIONS.get(from_enum, [])

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> List[str]:
        try:
            current_enum = IncidentStatus(current_status)
        except ValueError:
            return []
        return [status.value for status in cls.ALLOWED_TRANSITIONS.get(current_enum, [])]

    @classmethod
    def validate_advance(cls, current_status: IncidentStatus, target: IncidentStatus) -> None:
        """
        Validate an agency-driven status advance.

        Raises:
            ConflictError: Report is resolved, still submitted, or target is behind current
            ValidationError: Target is not en_route, on_scene or resolved
        """
        current_status = IncidentStatus(current_status)
        if cls.is_terminal(current_status):
            raise ConflictError("Report is resolved; no further status changes are allowed")

        try:
            target = IncidentStatus(target)
        except ValueError:
            raise ValidationError(f"Unknown status: {target!r}")
        if target not in cls.ADVANCEABLE_TARGETS:
            allowed = sorted(status.value for status in cls.ADVANCEABLE_TARGETS)
            raise ValidationError(f"Cannot advance to {target.value}. Allowed targets: {allowed}")

        if current_status == IncidentStatus.SUBMITTED:
            raise ConflictError("Report must be assigned to an agency before its status can advance")

        if not cls.is_valid_transition(current_status.value, target.value):
            allowed = cls.get_allowed_transitions(current_status.value)
            raise ConflictError(
                f"Invalid status transition: {current_status.value} → {target.value}. "
                f"Allowed transitions from {current_status.value}: {allowed}"
            )

    @classmethod
    def create_status_history_entry(
        cls,
        from_status: Optional[IncidentStatus],
        to_status: IncidentStatus,
        changed_by: str,
        note: Optional[str] = None
    ) -> StatusHistoryEntry:
        """Create a status history entry for the audit trail."""
        return StatusHistoryEntry(
            from_status=from_status,
            to_status=to_status,
            changed_by=changed_by,
            note=note or ""
        )
