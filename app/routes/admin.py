"""
Admin endpoints - dispatch command center.

SCOPE OF ADMIN (dispatch_admin only):
✅ Review and decide citizen identity verification
✅ Mark reports verified / false / pending
✅ Assign an agency (always resets status to assigned)
✅ Set priority, optionally after reading an advisory suggestion
✅ Export the report collection as CSV

❌ NOT advance lifecycle status (the assigned agency does that)
❌ NOT apply advisory suggestions automatically
❌ NOT delete reports or accounts
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from typing import List, Optional

from app.models.account import (
    Account,
    AccountFilter,
    AccountVerificationStatus,
    Role,
    StaffAccountCreate,
    VerificationDecision,
)
from app.models.advisory import AdvisoryResult
from app.models.report import (
    AgencyAssignmentRequest,
    PriorityUpdateRequest,
    Report,
    VerificationUpdateRequest,
)
from app.services.export_service import export_reports_csv
from app.services.lifecycle_engine import LifecycleEngine
from app.utils.security import get_current_actor, get_engine
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class AccountDecisionRequest(BaseModel):
    """Identity decision for an account."""
    decision: VerificationDecision


@router.get("/accounts", response_model=List[Account])
async def list_accounts(
    search: Optional[str] = Query(None, description="Match on name or email"),
    verification_status: Optional[AccountVerificationStatus] = Query(None, description="Filter by status"),
    role: Optional[Role] = Query(None, description="Filter by role"),
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Account review queue.

    Typical use: verification_status=pending to see accounts awaiting ID review.
    """
    account_filter = AccountFilter(search=search, verification_status=verification_status, role=role)
    return engine.list_accounts(actor, account_filter)


@router.post("/accounts", response_model=Account, status_code=status.HTTP_201_CREATED)
async def provision_staff(
    request: StaffAccountCreate,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Provision a dispatch_admin or agency_admin account.

    Raises:
        403: Caller is not a dispatch admin
        422: Role/agency mismatch or missing contact fields
    """
    return engine.provision_staff(actor, request, request.role, request.agency)


@router.patch("/accounts/{account_id}/verification", response_model=Account)
async def decide_account(
    account_id: str,
    request: AccountDecisionRequest,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Approve (verified) or reject (unverified) an account's identity.

    Every report the account has filed is re-flagged before this returns.
    """
    account = engine.decide(actor, account_id, request.decision)
    logger.info(f"PATCH /admin/accounts/{account_id}/verification → {account.verification_status.value}")
    return account


@router.patch("/reports/{report_id}/verification", response_model=Report)
async def set_report_verification(
    report_id: str,
    request: VerificationUpdateRequest,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Mark a report pending, verified or false.

    Raises:
        403: Caller is not a dispatch admin
        404: Unknown report
        409: Report already resolved
    """
    return engine.set_verification(actor, report_id, request.verification_status)


@router.patch("/reports/{report_id}/agency", response_model=Report)
async def assign_agency(
    report_id: str,
    request: AgencyAssignmentRequest,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Assign BFP, PNP or PCG. Status becomes assigned, even on reassignment.

    Raises:
        403: Caller is not a dispatch admin
        404: Unknown report
        409: Report already resolved
        422: Agency is NONE
    """
    return engine.assign_agency(actor, report_id, request.agency)


@router.patch("/reports/{report_id}/priority", response_model=Report)
async def set_priority(
    report_id: str,
    request: PriorityUpdateRequest,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Set the report's priority level."""
    return engine.set_priority(actor, report_id, request.priority_level)


@router.post("/reports/{report_id}/advisory", response_model=AdvisoryResult)
def request_advisory(
    report_id: str,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Advisory analysis of a report (priority, agency, first actions).

    Informational only; nothing is written to the report. available=false
    means the analysis service did not answer; retry later.

    Declared sync so FastAPI runs the network-bound call in its threadpool.
    """
    suggestion = engine.advise(actor, report_id)
    return AdvisoryResult(report_id=report_id, available=suggestion is not None, suggestion=suggestion)


@router.get("/reports/export")
async def export_reports(
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Download every report (resolved included) as CSV."""
    reports = engine.export_snapshot(actor)
    return Response(
        content=export_reports_csv(reports),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=respond_reports.csv"},
    )
