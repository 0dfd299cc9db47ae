"""
Gemini Advisory Provider - LLM analysis of emergency reports.

Calls the Gemini generateContent REST endpoint in JSON mode.
Raises on any failure; the gateway converts failures to None.
"""

from app.core.settings import settings
from app.models.advisory import AdvisorySuggestion
from app.models.report import IncidentType
from app.services.advisory.base import AdvisoryProvider
from typing import Dict, Optional
import json
import logging
import requests

logger = logging.getLogger(__name__)


RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "suggestedPriority": {
            "type": "STRING",
            "description": "low, medium, high, or critical",
        },
        "summary": {
            "type": "STRING",
            "description": "Short summary of the incident.",
        },
        "recommendedAgency": {
            "type": "STRING",
            "description": "BFP, PNP, or PCG",
        },
        "immediateActions": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Actionable steps for dispatchers.",
        },
    },
    "required": ["suggestedPriority", "summary", "recommendedAgency", "immediateActions"],
}


class GeminiAdvisoryProvider(AdvisoryProvider):
    """
    Google Gemini API provider.

    Requires GEMINI_API_KEY in environment variables.
    """

    MODEL_VERSION = "1.0"
    API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout_seconds: Optional[float] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.enabled = bool(self.api_key and self.api_key.strip())

        if self.enabled:
            logger.info(f"✅ Gemini advisory provider initialized: {self.model}")
        else:
            logger.info("⚠️ Gemini advisory provider disabled: No API key configured")

    def is_enabled(self) -> bool:
        return self.enabled

    def get_model_info(self) -> Dict[str, str]:
        return {
            "name": self.model,
            "version": self.MODEL_VERSION
        }

    def get_timeout_seconds(self) -> float:
        return self.timeout_seconds

    def suggest(self, description: str, category: IncidentType) -> AdvisorySuggestion:
        if not self.enabled:
            raise RuntimeError("Gemini API key not configured")

        prompt = self._build_prompt(description, category)
        text = self._call_gemini_api(prompt)
        suggestion = self._parse_gemini_response(text)
        suggestion.model_name = self.model
        return suggestion

    def _build_prompt(self, description: str, category: IncidentType) -> str:
        category_value = category.value if isinstance(category, IncidentType) else str(category)
        return f"""Analyze this emergency report and suggest verification priority and primary response steps.
Type: {category_value}
Description: {description}

Agencies: BFP (fire and rescue), PNP (police), PCG (coast guard and maritime/flood response).
Priority must be one of: low, medium, high, critical."""

    def _call_gemini_api(self, prompt: str) -> str:
        """POST to generateContent and return the model's text part."""
        url = f"{self.API_BASE_URL}/{self.model}:generateContent"
        payload = {
            "contents": [{
                "parts": [{"text": prompt}]
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

        response = self.session.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout_seconds
        )

        if response.status_code != 200:
            raise RuntimeError(f"Gemini API returned status {response.status_code}: {response.text[:200]}")

        data = response.json()
        text = data.get("candidates", [{}])[0].get("content", {}).get("parts", [{}])[0].get("text", "")
        if not text:
            raise ValueError("Gemini API returned an empty response")
        return text

    def _parse_gemini_response(self, text: str) -> AdvisorySuggestion:
        """Parse the JSON body into an AdvisorySuggestion."""
        # The model sometimes wraps JSON in markdown code fences
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0].strip()
        elif "```" in text:
            text = text.split("```")[1].split("```")[0].strip()

        parsed = json.loads(text)
        parsed["suggestedPriority"] = str(parsed.get("suggestedPriority", "")).strip().lower()
        parsed["recommendedAgency"] = str(parsed.get("recommendedAgency", "")).strip().upper()
        actions = parsed.get("immediateActions") or []
        if not isinstance(actions, list):
            actions = [str(actions)]
        parsed["immediateActions"] = [str(action) for action in actions]
        return AdvisorySuggestion.model_validate(parsed)
