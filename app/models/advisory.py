"""
Advisory analysis models.

A suggestion is informational only. Nothing here is ever written back
into a report without an explicit operator command.
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.account import AgencyType
from app.models.report import PriorityLevel


class AdvisorySuggestion(BaseModel):
    """Parsed response from an advisory provider."""
    suggested_priority: PriorityLevel = Field(..., alias="suggestedPriority")
    summary: str = Field("", alias="summary")
    recommended_agency: AgencyType = Field(..., alias="recommendedAgency")
    immediate_actions: List[str] = Field(default_factory=list, alias="immediateActions")
    model_name: Optional[str] = None

    class Config:
        populate_by_name = True

class AdvisoryResult(BaseModel):
    """HTTP envelope: available=False means the analysis service could not answer."""
    report_id: str
    available: bool
    suggestion: Optional[AdvisorySuggestion] = None
