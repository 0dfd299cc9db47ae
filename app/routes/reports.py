"""
Report endpoints - citizen submission, per-actor listing and agency status updates.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from app.models.actor import CitizenActor
from app.core.errors import ForbiddenError
from app.models.report import (
    IncidentStatus,
    IncidentType,
    Report,
    ReportCreate,
    StatusAdvanceRequest,
)
from app.services.lifecycle_engine import LifecycleEngine
from app.utils.security import get_current_actor, get_engine
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report: ReportCreate,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Submit a new incident report.

    Only citizens file reports. The report is stamped with the citizen's
    current verification status and starts submitted / pending.

    Raises:
        403: Caller is not a citizen
        422: Missing description or coordinates
    """
    if not isinstance(actor, CitizenActor):
        raise ForbiddenError("Only citizen accounts can submit reports")

    logger.info(f"📝 POST /reports - type={report.incident_type.value} by {actor.account_id}")
    return engine.submit(actor.account_id, report)


@router.get("", response_model=List[Report])
async def list_reports(
    incident_type: Optional[IncidentType] = Query(None, description="Filter by incident type"),
    current_status: Optional[IncidentStatus] = Query(None, alias="status", description="Filter by lifecycle status"),
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Reports visible to the caller, newest first.

    - citizen: own submission history (resolved included)
    - dispatch_admin: every active report
    - agency_admin: active reports assigned to its agency
    """
    return engine.list_visible_reports(actor, incident_type=incident_type, status=current_status)


@router.get("/{report_id}", response_model=Report)
async def get_report(
    report_id: str,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Single report, if the caller may read it.

    Raises:
        403: Not the caller's report / agency
        404: Unknown report
    """
    return engine.get_report_for(actor, report_id)


@router.get("/{report_id}/capabilities")
async def get_capabilities(
    report_id: str,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Commands the caller may issue on this report right now (drives which controls a UI shows)."""
    capabilities = engine.capabilities(actor, report_id)
    return {
        "report_id": report_id,
        "capabilities": sorted(capability.value for capability in capabilities),
    }


@router.patch("/{report_id}/status", response_model=Report)
async def advance_status(
    report_id: str,
    request: StatusAdvanceRequest,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Agency admin advances a report: en_route, on_scene or resolved.

    Raises:
        403: Caller is not the admin of the assigned agency
        409: Report resolved, not yet assigned, or target behind current status
        422: Target outside en_route / on_scene / resolved
    """
    return engine.advance_status(actor, report_id, request.status, note=request.note)
