"""
Advisory Gateway - boundary to the external analysis service.

Selects providers in priority order, bounds each call with a timeout and
returns None on any failure. Never mutates reports and never raises.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Optional
import logging
import threading

from app.core.settings import settings
from app.models.advisory import AdvisorySuggestion
from app.models.report import IncidentType
from app.services.advisory.base import AdvisoryProvider
from app.services.advisory.gemini_provider import GeminiAdvisoryProvider
from app.services.advisory.rules_provider import RuleBasedAdvisoryProvider

logger = logging.getLogger(__name__)


class AdvisoryGateway:
    """
    Tries each enabled provider until one answers.

    Callers wait only for their own suggestion; the engine invokes this
    outside its mutation lock.
    """

    def __init__(self, providers: Optional[List[AdvisoryProvider]] = None,
                 timeout_seconds: Optional[float] = None, enabled: Optional[bool] = None):
        self.enabled = settings.AI_ENABLED if enabled is None else enabled
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS
        self.providers: List[AdvisoryProvider] = providers if providers is not None else self._default_providers()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="advisory")

    @staticmethod
    def _default_providers() -> List[AdvisoryProvider]:
        providers: List[AdvisoryProvider] = []

        gemini_provider = GeminiAdvisoryProvider()
        if gemini_provider.is_enabled():
            providers.append(gemini_provider)
            logger.info("✅ Gemini advisory provider registered")

        if settings.ADVISORY_RULES_FALLBACK:
            providers.append(RuleBasedAdvisoryProvider())
            logger.info("✅ Rule-based advisory provider registered (fallback)")

        if not providers:
            logger.info("⚠️ No advisory providers configured; suggestions will be unavailable")
        return providers

    def suggest(self, description: str, category: IncidentType) -> Optional[AdvisorySuggestion]:
        """
        Ask for an advisory suggestion.

        Each provider call is bounded by the smaller of its own timeout and
        the gateway's.

        Returns:
            AdvisorySuggestion from the first provider that answers in time,
            or None when analysis is disabled or every provider fails
        """
        if not self.enabled:
            logger.info("Advisory analysis disabled (AI_ENABLED=false)")
            return None

        for provider in self.providers:
            name = type(provider).__name__
            future = None
            try:
                name = provider.get_model_info().get("name", name)
                if not provider.is_enabled():
                    continue
                timeout = min(provider.get_timeout_seconds(), self.timeout_seconds)
                future = self._executor.submit(provider.suggest, description, category)
                suggestion = future.result(timeout=timeout)
                logger.info(f"✅ Advisory suggestion produced by {name}")
                return suggestion
            except FutureTimeoutError:
                future.cancel()
                logger.warning(f"⚠️ Advisory provider {name} timed out")
            except Exception as e:
                logger.warning(f"⚠️ Advisory provider {name} failed: {e}")

        logger.warning("Advisory analysis unavailable; report continues un-analyzed")
        return None

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)


# Global gateway instance (singleton)
_gateway: Optional[AdvisoryGateway] = None
_gateway_lock = threading.Lock()


def get_advisory_gateway() -> AdvisoryGateway:
    """
    Get or create the AdvisoryGateway singleton.

    Returns:
        AdvisoryGateway: The global advisory gateway
    """
    global _gateway
    with _gateway_lock:
        if _gateway is None:
            _gateway = AdvisoryGateway()
        return _gateway


def shutdown_advisory_gateway() -> None:
    """Stop the singleton's worker threads, if it was ever built."""
    global _gateway
    with _gateway_lock:
        if _gateway is not None:
            _gateway.shutdown()
            _gateway = None
