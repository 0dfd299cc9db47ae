"""
Lifecycle Engine - the single mutator of accounts and reports.

DESIGN PRINCIPLES:
- Every command runs under one mutation lock; no two commands interleave
- Authorization is re-checked at commit time, whatever the UI already checked
- Account decisions cascade onto the owner's reports inside the same locked step
- Reads return deep-copied snapshots taken under the lock
- Advisory analysis runs outside the lock and is never written back
"""

from datetime import datetime, timezone
from typing import List, Optional
import logging
import threading

from app.core.errors import ConflictError, ForbiddenError, ValidationError
from app.models.account import (
    Account,
    AccountCreate,
    AccountFilter,
    AccountVerificationStatus,
    AgencyType,
    Role,
    VerificationDecision,
)
from app.models.actor import DispatchAdminActor, actor_for
from app.models.advisory import AdvisorySuggestion
from app.models.report import (
    IncidentStatus,
    IncidentType,
    PriorityLevel,
    Report,
    ReportCreate,
    ReportVerificationStatus,
)
from app.services.advisory import AdvisoryGateway, get_advisory_gateway
from app.services.identity_registry import AccountVerificationDecided, IdentityRegistry
from app.services.report_store import ReportStore, new_report_id
from app.services.status_workflow import StatusWorkflowEngine
from app.services import visibility_policy
from app.services.visibility_policy import Capability

logger = logging.getLogger(__name__)

DEFAULT_LANDMARK = "Current Location"


class LifecycleEngine:
    """
    Owns the IdentityRegistry and ReportStore behind command methods.
    """

    def __init__(self, registry: Optional[IdentityRegistry] = None, store: Optional[ReportStore] = None,
                 advisory: Optional[AdvisoryGateway] = None):
        self._lock = threading.RLock()
        self._registry = registry if registry is not None else IdentityRegistry()
        self._store = store if store is not None else ReportStore()
        self._advisory = advisory
        self._workflow = StatusWorkflowEngine()
        self._registry.subscribe(self._on_account_decided)

    # ------------------------------------------------------------------
    # Identity commands
    # ------------------------------------------------------------------

    def register(self, profile: AccountCreate) -> Account:
        with self._lock:
            return self._registry.register(profile)

    def provision_staff(self, actor, profile: AccountCreate, role: Role,
                        agency: Optional[AgencyType] = None) -> Account:
        """Dispatch admin creates a dispatch_admin or agency_admin account."""
        if not isinstance(actor, DispatchAdminActor):
            raise ForbiddenError("Only a dispatch admin can provision staff accounts")
        with self._lock:
            return self._registry.provision(profile, role, agency)

    def submit_identity_document(self, actor, account_id: str, image_ref: str) -> Account:
        """Owner-only self-service: unverified → pending."""
        if actor.account_id != account_id:
            raise ForbiddenError("Identity documents can only be submitted by the account owner")
        with self._lock:
            return self._registry.submit_identity_document(account_id, image_ref)

    def decide(self, actor, account_id: str, decision: VerificationDecision) -> Account:
        """
        Approve or reject an account's identity.

        The registry publishes the decision and _on_account_decided cascades it
        while the lock is still held, so no reader sees the account and its
        reports disagree.
        """
        with self._lock:
            return self._registry.decide(account_id, decision, actor)

    def _on_account_decided(self, event: AccountVerificationDecided) -> None:
        with self._lock:
            trusted = event.new_status == AccountVerificationStatus.VERIFIED
            report_ids = self._store.owned_ids(event.account_id)
            for report_id in report_ids:
                self._store.update(report_id, {"user_is_verified": trusted})
            logger.info(
                f"Cascaded account {event.account_id} → {event.new_status.value} "
                f"onto {len(report_ids)} report(s)"
            )

    # ------------------------------------------------------------------
    # Report commands
    # ------------------------------------------------------------------

    def submit(self, account_id: str, payload: ReportCreate) -> Report:
        """
        Create a report for account_id.

        The trust flag is read from the account's current status. An unknown
        account fails closed (untrusted) rather than rejecting the report.

        Raises:
            ValidationError: Blank description or missing coordinates
        """
        self._validate_payload(payload)

        with self._lock:
            account = self._registry.find(account_id)
            if account is None:
                logger.warning(f"Report submitted for unknown account {account_id}; marking untrusted")

            now = datetime.now(timezone.utc)
            landmark = (payload.address_landmark or "").strip() or DEFAULT_LANDMARK
            report = Report(
                id=self._next_report_id(),
                user_id=account_id,
                user_name=account.full_name if account else "",
                user_phone=account.phone if account else "",
                user_is_verified=bool(account and account.verification_status == AccountVerificationStatus.VERIFIED),
                incident_type=payload.incident_type or IncidentType.OTHER,
                description=payload.description.strip(),
                latitude=payload.latitude,
                longitude=payload.longitude,
                address_landmark=landmark,
                verification_status=ReportVerificationStatus.PENDING,
                priority_level=PriorityLevel.NONE,
                current_status=IncidentStatus.SUBMITTED,
                assigned_agency=AgencyType.NONE,
                image_url=payload.image_url,
                created_at=now,
                updated_at=now,
                status_history=[self._workflow.create_status_history_entry(
                    from_status=None,
                    to_status=IncidentStatus.SUBMITTED,
                    changed_by="system",
                    note="Report submitted"
                )],
            )
            created = self._store.create(report)
            logger.info(
                f"Report {created.id} submitted by {account_id} "
                f"(type={created.incident_type.value}, trusted={created.user_is_verified})"
            )
            return created

    def set_verification(self, actor, report_id: str, status: ReportVerificationStatus) -> Report:
        """Dispatch admin marks a report pending, verified or false."""
        try:
            status = ReportVerificationStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid verification status: {status!r}")

        with self._lock:
            report = self._store.get(report_id)
            visibility_policy.authorize(actor, report, Capability.VERIFY)
            self._reject_if_resolved(report)
            updated = self._store.update(report_id, {"verification_status": status})
            logger.info(f"Report {report_id} verification → {status.value} by {actor.account_id}")
            return updated

    def assign_agency(self, actor, report_id: str, agency: AgencyType) -> Report:
        """
        Dispatch admin assigns an agency.

        Always moves the report to assigned, even when it had progressed to
        en_route or on_scene: reassignment restarts the response.
        """
        try:
            agency = AgencyType(agency)
        except ValueError:
            raise ValidationError(f"Invalid agency: {agency!r}")
        if agency == AgencyType.NONE:
            raise ValidationError("Agency must be one of BFP, PNP or PCG")

        with self._lock:
            report = self._store.get(report_id)
            visibility_policy.authorize(actor, report, Capability.ASSIGN_AGENCY)
            self._reject_if_resolved(report)

            fields = {
                "assigned_agency": agency,
                "current_status": IncidentStatus.ASSIGNED,
            }
            if report.current_status != IncidentStatus.ASSIGNED or report.assigned_agency != agency:
                fields["status_history"] = report.status_history + [
                    self._workflow.create_status_history_entry(
                        from_status=report.current_status,
                        to_status=IncidentStatus.ASSIGNED,
                        changed_by=actor.account_id,
                        note=f"Assigned to {agency.value}"
                    )
                ]
            if StatusWorkflowEngine.rank(report.current_status) > StatusWorkflowEngine.rank(IncidentStatus.ASSIGNED):
                logger.warning(
                    f"Report {report_id} reassigned from {report.current_status.value}; status reset to assigned"
                )

            updated = self._store.update(report_id, fields)
            logger.info(f"Report {report_id} assigned to {agency.value} by {actor.account_id}")
            return updated

    def set_priority(self, actor, report_id: str, priority: PriorityLevel) -> Report:
        """Dispatch admin sets the priority (e.g. after reviewing an advisory suggestion)."""
        try:
            priority = PriorityLevel(priority)
        except ValueError:
            raise ValidationError(f"Invalid priority: {priority!r}")

        with self._lock:
            report = self._store.get(report_id)
            visibility_policy.authorize(actor, report, Capability.SET_PRIORITY)
            self._reject_if_resolved(report)
            updated = self._store.update(report_id, {"priority_level": priority})
            logger.info(f"Report {report_id} priority → {priority.value} by {actor.account_id}")
            return updated

    def advance_status(self, actor, report_id: str, target: IncidentStatus, note: Optional[str] = None) -> Report:
        """
        Assigned agency moves a report to en_route, on_scene or resolved.

        Raises:
            ForbiddenError: Actor is not the admin of the assigned agency
            ConflictError: Report resolved, still submitted, or target behind current
            ValidationError: Target outside en_route / on_scene / resolved
        """
        with self._lock:
            report = self._store.get(report_id)
            visibility_policy.authorize(actor, report, Capability.ADVANCE_STATUS)
            self._workflow.validate_advance(report.current_status, target)
            target = IncidentStatus(target)

            if target == report.current_status:
                logger.info(f"Report {report_id} already {target.value}; no change")
                return report

            history = report.status_history + [
                self._workflow.create_status_history_entry(
                    from_status=report.current_status,
                    to_status=target,
                    changed_by=actor.account_id,
                    note=note
                )
            ]
            updated = self._store.update(report_id, {"current_status": target, "status_history": history})
            logger.info(
                f"Report {report_id} {report.current_status.value} → {target.value} "
                f"by {actor.account_id} ({actor.agency.value})"
            )
            return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_visible_reports(self, actor, incident_type: Optional[IncidentType] = None,
                             status: Optional[IncidentStatus] = None) -> List[Report]:
        """Reports the actor may see, newest first."""
        with self._lock:
            reports = self._store.all()
        result = [
            report for report in reports
            if visibility_policy.visible(actor, report)
            and (incident_type is None or report.incident_type == incident_type)
            and (status is None or report.current_status == status)
        ]
        result.sort(key=lambda report: report.created_at, reverse=True)
        return result

    def list_accounts(self, actor, account_filter: Optional[AccountFilter] = None) -> List[Account]:
        if not isinstance(actor, DispatchAdminActor):
            raise ForbiddenError("Only a dispatch admin can review accounts")
        with self._lock:
            return self._registry.list(account_filter)

    def get_report(self, report_id: str) -> Report:
        with self._lock:
            return self._store.get(report_id)

    def get_report_for(self, actor, report_id: str) -> Report:
        report = self.get_report(report_id)
        if not visibility_policy.readable(actor, report):
            raise ForbiddenError(f"Report {report_id} is not visible to {actor.account_id}")
        return report

    def get_account(self, account_id: str) -> Account:
        with self._lock:
            return self._registry.get(account_id)

    def actor_for_account(self, account_id: str):
        return actor_for(self.get_account(account_id))

    def export_snapshot(self, actor) -> List[Report]:
        """Full report collection for the export collaborator (read-only copies)."""
        if not isinstance(actor, DispatchAdminActor):
            raise ForbiddenError("Only a dispatch admin can export reports")
        with self._lock:
            reports = self._store.all()
        reports.sort(key=lambda report: report.created_at, reverse=True)
        return reports

    def stats(self) -> dict:
        with self._lock:
            return {"accounts": len(self._registry), "reports": len(self._store)}

    def capabilities(self, actor, report_id: str):
        report = self.get_report_for(actor, report_id)
        return visibility_policy.mutable_fields(actor, report)

    # ------------------------------------------------------------------
    # Advisory
    # ------------------------------------------------------------------

    def advise(self, actor, report_id: str) -> Optional[AdvisorySuggestion]:
        """
        Ask the advisory service about a report.

        Only the snapshot read happens under the lock. The suggestion is
        returned to the caller and never applied to the report.
        """
        if not isinstance(actor, DispatchAdminActor):
            raise ForbiddenError("Only a dispatch admin can request advisory analysis")
        report = self.get_report(report_id)
        gateway = self._advisory or get_advisory_gateway()
        return gateway.suggest(report.description, report.incident_type)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_report_id(self) -> str:
        report_id = new_report_id()
        while self._store.find(report_id) is not None:
            report_id = new_report_id()
        return report_id

    @staticmethod
    def _reject_if_resolved(report: Report) -> None:
        if StatusWorkflowEngine.is_terminal(report.current_status):
            raise ConflictError(f"Report {report.id} is resolved; no further changes are allowed")

    @staticmethod
    def _validate_payload(payload: ReportCreate) -> None:
        errors = []
        if not payload.description or not payload.description.strip():
            errors.append("description is required")
        if payload.latitude is None or payload.longitude is None:
            errors.append("latitude and longitude are required")
        if errors:
            raise ValidationError("; ".join(errors))


# Global engine instance (singleton pattern)
_engine: Optional[LifecycleEngine] = None
_engine_lock = threading.Lock()


def get_lifecycle_engine() -> LifecycleEngine:
    """
    Get or create the LifecycleEngine singleton.

    Seeds demo staff accounts on first creation when SEED_DEMO_DATA is on.
    """
    global _engine
    with _engine_lock:
        if _engine is None:
            from app.core.settings import settings
            from app.services.seed_data import seed_demo_accounts

            registry = IdentityRegistry()
            if settings.SEED_DEMO_DATA:
                seed_demo_accounts(registry)
            _engine = LifecycleEngine(registry=registry)
        return _engine


def reset_lifecycle_engine(engine: Optional[LifecycleEngine] = None) -> None:
    """Replace (or drop) the singleton. Used by tests and the seed script."""
    global _engine
    with _engine_lock:
        _engine = engine
