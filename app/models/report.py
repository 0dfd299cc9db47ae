"""
Pydantic models for incident reports.
These models handle validation for report submission and responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional, List
from enum import Enum

from app.models.account import AgencyType


class IncidentType(str, Enum):
    """Closed set of incident categories."""
    FIRE = "fire"
    CRIME = "crime"
    MEDICAL = "medical"
    FLOOD = "flood"
    ACCIDENT = "accident"
    OTHER = "other"


class ReportVerificationStatus(str, Enum):
    """
    Whether dispatch has confirmed the incident is genuine.
    Free transitions between all three values.
    """
    PENDING = "pending"
    VERIFIED = "verified"
    FALSE = "false"


class PriorityLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    """
    Dispatch pipeline stage:
    submitted → assigned → en_route → on_scene → resolved
    """
    SUBMITTED = "submitted"
    ASSIGNED = "assigned"
    EN_ROUTE = "en_route"
    ON_SCENE = "on_scene"
    RESOLVED = "resolved"


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    These are the fields citizens provide when submitting a report.
    """
    incident_type: IncidentType = Field(default=IncidentType.OTHER, description="Incident category")
    description: str = Field("", max_length=2000, description="What the citizen observed")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude coordinate")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude coordinate")
    address_landmark: Optional[str] = Field(None, max_length=300, description="Nearest landmark or address")
    image_url: Optional[str] = Field(None, description="Optional evidence image reference")

    class Config:
        json_schema_extra = {
            "example": {
                "incident_type": "fire",
                "description": "Smoke coming out of a house near the public market.",
                "latitude": 5.0283,
                "longitude": 119.7731,
                "address_landmark": "Bongao Public Market",
            }
        }
        extra = "ignore"


class StatusHistoryEntry(BaseModel):
    """Lifecycle status change log entry."""
    from_status: Optional[IncidentStatus] = Field(None, description="Previous status (None on submission)")
    to_status: IncidentStatus = Field(..., description="New status")
    changed_by: str = Field(..., description="Account id of the actor, or 'system'")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    note: str = ""


class Report(BaseModel):
    """
    A citizen incident report.

    user_name / user_phone are captured at submission time. user_is_verified
    is kept equal to the owner's current account verification by cascade.
    """
    id: str = Field(..., description="Report token (REP- prefix)")
    user_id: str
    user_name: str = ""
    user_phone: str = ""
    user_is_verified: bool = False
    incident_type: IncidentType
    description: str
    latitude: float
    longitude: float
    address_landmark: str
    verification_status: ReportVerificationStatus = ReportVerificationStatus.PENDING
    priority_level: PriorityLevel = PriorityLevel.NONE
    current_status: IncidentStatus = IncidentStatus.SUBMITTED
    assigned_agency: AgencyType = AgencyType.NONE
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)


class VerificationUpdateRequest(BaseModel):
    verification_status: ReportVerificationStatus


class AgencyAssignmentRequest(BaseModel):
    agency: AgencyType


class PriorityUpdateRequest(BaseModel):
    priority_level: PriorityLevel


class StatusAdvanceRequest(BaseModel):
    status: IncidentStatus
    note: Optional[str] = Field(None, max_length=500, description="Optional note for the status log")
