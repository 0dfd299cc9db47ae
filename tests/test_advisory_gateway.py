import json
import time

import pytest

from app.core.errors import ForbiddenError
from app.models.account import AgencyType
from app.models.advisory import AdvisorySuggestion
from app.models.report import IncidentStatus, IncidentType, PriorityLevel
from app.services.advisory.base import AdvisoryProvider
from app.services.advisory.gateway import AdvisoryGateway
from app.services.advisory.gemini_provider import GeminiAdvisoryProvider
from app.services.advisory.rules_provider import RuleBasedAdvisoryProvider


class StaticProvider(AdvisoryProvider):
    """Advisory provider returning a canned suggestion (or raising)."""

    def __init__(self, suggestion=None, error=None):
        self.suggestion = suggestion
        self.error = error
        self.calls = []

    def is_enabled(self):
        return True

    def get_model_info(self):
        return {"name": "static", "version": "test"}

    def get_timeout_seconds(self):
        return 1.0

    def suggest(self, description, category):
        self.calls.append((description, category))
        if self.error is not None:
            raise self.error
        return self.suggestion


SUGGESTION = AdvisorySuggestion(
    suggested_priority=PriorityLevel.HIGH,
    summary="House fire near the market",
    recommended_agency=AgencyType.BFP,
    immediate_actions=["Dispatch fire truck"],
)


class SlowProvider(StaticProvider):
    def suggest(self, description, category):
        time.sleep(0.5)
        return super().suggest(description, category)


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = json.dumps(body)

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def post(self, url, params=None, json=None, timeout=None):
        self.requests.append({"url": url, "params": params, "json": json, "timeout": timeout})
        return self.response


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_gateway_returns_first_answer():
    provider = StaticProvider(suggestion=SUGGESTION)
    gateway = AdvisoryGateway(providers=[provider], enabled=True, timeout_seconds=1.0)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) == SUGGESTION
    assert provider.calls == [("Smoke everywhere", IncidentType.FIRE)]


def test_gateway_disabled_returns_none():
    provider = StaticProvider(suggestion=SUGGESTION)
    gateway = AdvisoryGateway(providers=[provider], enabled=False, timeout_seconds=1.0)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) is None
    assert provider.calls == []


def test_gateway_failure_returns_none():
    gateway = AdvisoryGateway(providers=[StaticProvider(error=RuntimeError("quota"))], enabled=True, timeout_seconds=1.0)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) is None


def test_gateway_timeout_returns_none():
    gateway = AdvisoryGateway(providers=[SlowProvider(suggestion=SUGGESTION)], enabled=True, timeout_seconds=0.05)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) is None


def test_gateway_falls_through_to_next_provider():
    failing = StaticProvider(error=ValueError("bad json"))
    backup = StaticProvider(suggestion=SUGGESTION)
    gateway = AdvisoryGateway(providers=[failing, backup], enabled=True, timeout_seconds=1.0)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) == SUGGESTION
    assert len(failing.calls) == 1
    assert len(backup.calls) == 1


def test_gemini_provider_parses_fenced_json():
    text = "```json\n" + json.dumps({
        "suggestedPriority": "Critical",
        "summary": "Boat capsized",
        "recommendedAgency": "pcg",
        "immediateActions": ["Launch rescue boat"],
    }) + "\n```"
    session = FakeSession(FakeResponse(200, gemini_body(text)))
    provider = GeminiAdvisoryProvider(api_key="test-key", model="gemini-test", timeout_seconds=2.0, session=session)

    suggestion = provider.suggest("Boat capsized off the pier", IncidentType.FLOOD)

    assert suggestion.suggested_priority == PriorityLevel.CRITICAL
    assert suggestion.recommended_agency == AgencyType.PCG
    assert suggestion.immediate_actions == ["Launch rescue boat"]
    assert suggestion.model_name == "gemini-test"
    sent = session.requests[0]
    assert sent["url"].endswith("/gemini-test:generateContent")
    assert sent["params"] == {"key": "test-key"}
    assert sent["timeout"] == 2.0
    assert sent["json"]["generationConfig"]["responseMimeType"] == "application/json"


def test_gemini_provider_raises_on_http_error():
    session = FakeSession(FakeResponse(429, {"error": "quota"}))
    provider = GeminiAdvisoryProvider(api_key="test-key", model="gemini-test", session=session)

    with pytest.raises(RuntimeError):
        provider.suggest("Smoke", IncidentType.FIRE)


def test_gemini_provider_disabled_without_key():
    provider = GeminiAdvisoryProvider(api_key="", session=FakeSession(None))

    assert provider.is_enabled() is False


def test_gemini_failure_through_gateway_is_none():
    session = FakeSession(FakeResponse(200, gemini_body("not json at all")))
    provider = GeminiAdvisoryProvider(api_key="test-key", model="gemini-test", session=session)
    gateway = AdvisoryGateway(providers=[provider], enabled=True, timeout_seconds=1.0)

    assert gateway.suggest("Smoke", IncidentType.FIRE) is None


@pytest.mark.parametrize("category,description,agency,priority", [
    (IncidentType.FIRE, "Smoke from a kitchen.", AgencyType.BFP, PriorityLevel.HIGH),
    (IncidentType.CRIME, "Someone is armed outside the store.", AgencyType.PNP, PriorityLevel.CRITICAL),
    (IncidentType.OTHER, "A man is injured on the road.", AgencyType.PNP, PriorityLevel.HIGH),
    (IncidentType.ACCIDENT, "A boat hit the pier.", AgencyType.PCG, PriorityLevel.MEDIUM),
])
def test_rules_provider(category, description, agency, priority):
    suggestion = RuleBasedAdvisoryProvider().suggest(description, category)

    assert suggestion.recommended_agency == agency
    assert suggestion.suggested_priority == priority
    assert suggestion.immediate_actions


def test_engine_advise_never_mutates(registry, dispatch, bfp, payload):
    from app.models.account import AccountCreate
    from app.services.lifecycle_engine import LifecycleEngine

    provider = StaticProvider(suggestion=SUGGESTION)
    engine = LifecycleEngine(
        registry=registry,
        advisory=AdvisoryGateway(providers=[provider], enabled=True, timeout_seconds=1.0),
    )
    account = engine.register(AccountCreate(full_name="Reporter", email="reporter@example.ph", phone="0917"))
    report = engine.submit(account.id, payload)

    assert engine.advise(dispatch, report.id) == SUGGESTION
    after = engine.get_report(report.id)
    assert after.priority_level == PriorityLevel.NONE
    assert after.assigned_agency == AgencyType.NONE
    assert after.current_status == IncidentStatus.SUBMITTED
    with pytest.raises(ForbiddenError):
        engine.advise(bfp, report.id)


class BrokenMetadataProvider(StaticProvider):
    def get_model_info(self):
        raise RuntimeError("metadata endpoint down")


class BrokenEnabledProvider(StaticProvider):
    def is_enabled(self):
        raise RuntimeError("config store down")


def test_gateway_survives_provider_metadata_errors():
    backup = StaticProvider(suggestion=SUGGESTION)
    gateway = AdvisoryGateway(
        providers=[BrokenMetadataProvider(suggestion=SUGGESTION), BrokenEnabledProvider(suggestion=SUGGESTION), backup],
        enabled=True,
        timeout_seconds=1.0,
    )

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) == SUGGESTION
    assert len(backup.calls) == 1


def test_gateway_metadata_error_alone_returns_none():
    gateway = AdvisoryGateway(providers=[BrokenMetadataProvider(suggestion=SUGGESTION)], enabled=True, timeout_seconds=1.0)

    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) is None


def test_gateway_applies_provider_timeout():
    class QuickTimeoutProvider(SlowProvider):
        def get_timeout_seconds(self):
            return 0.05

    gateway = AdvisoryGateway(providers=[QuickTimeoutProvider(suggestion=SUGGESTION)], enabled=True, timeout_seconds=5.0)

    began = time.monotonic()
    assert gateway.suggest("Smoke everywhere", IncidentType.FIRE) is None
    assert time.monotonic() - began < 0.4


def test_shutdown_advisory_gateway_drops_singleton(monkeypatch):
    from app.services.advisory import gateway as gateway_module

    monkeypatch.setattr(gateway_module, "_gateway", None)
    monkeypatch.setattr(gateway_module.AdvisoryGateway, "_default_providers", staticmethod(lambda: []))

    first = gateway_module.get_advisory_gateway()
    assert gateway_module.get_advisory_gateway() is first

    gateway_module.shutdown_advisory_gateway()

    assert gateway_module._gateway is None
    with pytest.raises(RuntimeError):
        first._executor.submit(print)
