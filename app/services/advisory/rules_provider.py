"""
Rule-based Advisory Provider - keyword fallback when Gemini is unavailable.

Deterministic and instant. Only registered when ADVISORY_RULES_FALLBACK
is enabled.
"""

from app.models.account import AgencyType
from app.models.advisory import AdvisorySuggestion
from app.models.report import IncidentType, PriorityLevel
from app.services.advisory.base import AdvisoryProvider
from typing import Dict
import logging

logger = logging.getLogger(__name__)


CATEGORY_DEFAULTS = {
    IncidentType.FIRE: (AgencyType.BFP, PriorityLevel.HIGH, [
        "Dispatch nearest BFP fire truck",
        "Advise reporter to evacuate and keep distance",
    ]),
    IncidentType.CRIME: (AgencyType.PNP, PriorityLevel.MEDIUM, [
        "Dispatch PNP patrol unit",
        "Advise reporter to stay in a safe location",
    ]),
    IncidentType.MEDICAL: (AgencyType.BFP, PriorityLevel.HIGH, [
        "Dispatch BFP emergency medical responders",
        "Call reporter back to confirm patient condition",
    ]),
    IncidentType.FLOOD: (AgencyType.PCG, PriorityLevel.HIGH, [
        "Alert PCG water rescue team",
        "Identify nearest evacuation center",
    ]),
    IncidentType.ACCIDENT: (AgencyType.PNP, PriorityLevel.MEDIUM, [
        "Dispatch PNP traffic unit",
        "Check whether medical responders are needed",
    ]),
    IncidentType.OTHER: (AgencyType.PNP, PriorityLevel.LOW, [
        "Call reporter back to clarify the incident",
    ]),
}

CRITICAL_WORDS = ["trapped", "unconscious", "not breathing", "drowning", "explosion", "gunshot", "armed"]
HIGH_WORDS = ["injured", "bleeding", "spreading", "collapsed", "fire", "missing"]
MARITIME_WORDS = ["boat", "sea", "capsized", "vessel", "shore", "drowning"]


class RuleBasedAdvisoryProvider(AdvisoryProvider):
    """
    Keyword and category rules.

    Always enabled once registered.
    """

    MODEL_NAME = "rules-v1"
    MODEL_VERSION = "1.0.0"
    TIMEOUT_SECONDS = 0.1  # No network call

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.MODEL_NAME,
            "version": self.MODEL_VERSION
        }

    def get_timeout_seconds(self) -> float:
        return self.TIMEOUT_SECONDS

    def suggest(self, description: str, category: IncidentType) -> AdvisorySuggestion:
        category = IncidentType(category)
        desc_lower = description.lower()
        agency, priority, actions = CATEGORY_DEFAULTS[category]

        if any(word in desc_lower for word in CRITICAL_WORDS):
            priority = PriorityLevel.CRITICAL
        elif priority in (PriorityLevel.LOW, PriorityLevel.MEDIUM) and any(word in desc_lower for word in HIGH_WORDS):
            priority = PriorityLevel.HIGH

        if any(word in desc_lower for word in MARITIME_WORDS):
            agency = AgencyType.PCG

        summary = description.split(".")[0].strip()
        if len(summary) > 100:
            summary = summary[:97] + "..."

        return AdvisorySuggestion(
            suggested_priority=priority,
            summary=summary,
            recommended_agency=agency,
            immediate_actions=list(actions),
            model_name=self.MODEL_NAME,
        )
