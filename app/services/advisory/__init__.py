"""
Advisory analysis plug-in.

Suggests a priority, agency and first actions for a report.
Fails to None and never blocks report handling.
"""

from app.services.advisory.base import AdvisoryProvider
from app.services.advisory.gemini_provider import GeminiAdvisoryProvider
from app.services.advisory.rules_provider import RuleBasedAdvisoryProvider
from app.services.advisory.gateway import AdvisoryGateway, get_advisory_gateway, shutdown_advisory_gateway

__all__ = [
    "AdvisoryProvider",
    "AdvisoryGateway",
    "GeminiAdvisoryProvider",
    "RuleBasedAdvisoryProvider",
    "get_advisory_gateway",
    "shutdown_advisory_gateway",
]
