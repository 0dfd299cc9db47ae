"""
Visibility & Authorization Policy.

Pure functions over (actor, report). No state, no I/O.

- dispatch_admin: every non-resolved report; verify, assign agency, set priority
- agency_admin: reports assigned to its own agency; advance status once assigned
- citizen: own submission history (resolved included); read-only
"""

from enum import Enum
from typing import FrozenSet

from app.core.errors import ForbiddenError
from app.models.actor import AgencyAdminActor, CitizenActor, DispatchAdminActor, unhandled_actor
from app.models.report import IncidentStatus, Report
from app.services.status_workflow import StatusWorkflowEngine


class Capability(str, Enum):
    VERIFY = "verify"
    ASSIGN_AGENCY = "assign_agency"
    SET_PRIORITY = "set_priority"
    ADVANCE_STATUS = "advance_status"


DISPATCH_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.VERIFY,
    Capability.ASSIGN_AGENCY,
    Capability.SET_PRIORITY,
})
AGENCY_CAPABILITIES: FrozenSet[Capability] = frozenset({Capability.ADVANCE_STATUS})
NO_CAPABILITIES: FrozenSet[Capability] = frozenset()


def _is_resolved(report: Report) -> bool:
    return StatusWorkflowEngine.is_terminal(report.current_status)


def _owns_assignment(actor: AgencyAdminActor, report: Report) -> bool:
    return report.assigned_agency == actor.agency


def visible(actor, report: Report) -> bool:
    """Whether the report appears in the actor's dashboard or history list."""
    if isinstance(actor, DispatchAdminActor):
        return not _is_resolved(report)
    if isinstance(actor, AgencyAdminActor):
        return _owns_assignment(actor, report) and not _is_resolved(report)
    if isinstance(actor, CitizenActor):
        return report.user_id == actor.account_id
    raise unhandled_actor(actor)


def readable(actor, report: Report) -> bool:
    """Direct lookup by id. Operators keep read access to resolved reports they handled."""
    if isinstance(actor, DispatchAdminActor):
        return True
    if isinstance(actor, AgencyAdminActor):
        return _owns_assignment(actor, report)
    if isinstance(actor, CitizenActor):
        return report.user_id == actor.account_id
    raise unhandled_actor(actor)


def role_capabilities(actor, report: Report) -> FrozenSet[Capability]:
    """Capabilities the actor's role and agency grant on this report, ignoring lifecycle state."""
    if isinstance(actor, DispatchAdminActor):
        return DISPATCH_CAPABILITIES
    if isinstance(actor, AgencyAdminActor):
        return AGENCY_CAPABILITIES if _owns_assignment(actor, report) else NO_CAPABILITIES
    if isinstance(actor, CitizenActor):
        return NO_CAPABILITIES
    raise unhandled_actor(actor)


def mutable_fields(actor, report: Report) -> FrozenSet[Capability]:
    """Commands the actor can issue on the report right now."""
    if _is_resolved(report):
        return NO_CAPABILITIES
    capabilities = role_capabilities(actor, report)
    if Capability.ADVANCE_STATUS in capabilities and not StatusWorkflowEngine.is_at_least(
        report.current_status, IncidentStatus.ASSIGNED
    ):
        capabilities = capabilities - {Capability.ADVANCE_STATUS}
    return capabilities


def authorize(actor, report: Report, capability: Capability) -> None:
    """
    Re-check role, ownership and agency at commit time.

    Raises:
        ForbiddenError: The actor can never hold this capability on this report
    """
    if capability not in role_capabilities(actor, report):
        raise ForbiddenError(
            f"{type(actor).__name__} {actor.account_id} may not {capability.value} on report {report.id}"
        )
