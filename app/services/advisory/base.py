"""
Advisory Provider Base Interface.

Defines the contract for analysis providers. Providers may raise; the
AdvisoryGateway turns every failure into "no suggestion".
"""

from abc import ABC, abstractmethod
from typing import Dict

from app.models.advisory import AdvisorySuggestion
from app.models.report import IncidentType


class AdvisoryProvider(ABC):
    """
    Abstract base class for advisory providers.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check if this provider is configured and ready.

        Returns:
            True if provider can be called, False otherwise
        """
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """
        Get model information.

        Returns:
            Dict with 'name' and 'version' keys
        """
        pass

    @abstractmethod
    def suggest(self, description: str, category: IncidentType) -> AdvisorySuggestion:
        """
        Analyze an incident report.

        Args:
            description: The citizen's free-text description
            category: Incident category chosen by the citizen

        Returns:
            AdvisorySuggestion

        Raises:
            Any exception on failure (network, parsing, quota)
        """
        pass

    @abstractmethod
    def get_timeout_seconds(self) -> float:
        """Per-call network timeout in seconds."""
        pass
