"""
Narrative Generator Service
app/services/narrative_generator.py

Turns engine output into a human-readable recommendation using an
OpenAI-compatible chat completions endpoint. Any failure (no API key,
HTTP error, timeout, empty or malformed output) falls back to a
deterministic summary built only from the ranked gap records.
"""

import json
import logging
import re
from typing import Optional

import httpx
from pydantic import ValidationError

from app.core.exceptions import NarrativeGenerationError
from app.models.enumerations import RecommendationSource
from app.models.recommendation import GrowthLever, Recommendation
from app.services.prompts import SYSTEM_PROMPT, NarrativeInput, recommendation_prompt

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class NarrativeGenerator:
    """Client for the external narrative generator."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings) -> Optional["NarrativeGenerator"]:
        """Build from Settings; None when no API key is configured."""
        if not settings.narrative_enabled:
            return None
        return cls(
            api_key=settings.OPENAI_API_KEY.get_secret_value(),
            base_url=settings.LLM_BASE_URL,
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def generate(self, data: NarrativeInput) -> Recommendation:
        """
        Request a recommendation.

        Raises:
            NarrativeGenerationError: on transport failure or unusable output.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": recommendation_prompt(data)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            resp = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            raise NarrativeGenerationError(
                f"Narrative generator returned {e.response.status_code}", cause=e
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise NarrativeGenerationError(f"Narrative generator request failed: {e}", cause=e) from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise NarrativeGenerationError("Narrative generator response has no content", cause=e) from e

        if not content or not content.strip():
            raise NarrativeGenerationError("Narrative generator returned empty content")

        return parse_recommendation(content)

    async def aclose(self) -> None:
        await self.client.aclose()


def parse_recommendation(content: str) -> Recommendation:
    """Parse generator text into a Recommendation (code fences allowed)."""
    text = _CODE_FENCE.sub("", content.strip())
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise NarrativeGenerationError("Narrative generator returned invalid JSON", cause=e) from e

    if not isinstance(raw, dict):
        raise NarrativeGenerationError("Narrative generator returned a non-object JSON value")

    try:
        recommendation = Recommendation.model_validate(
            {
                "summary": raw.get("summary"),
                "levers": raw.get("levers") or [],
                "risks": raw.get("risks") or [],
                "source": RecommendationSource.LLM,
            }
        )
    except ValidationError as e:
        raise NarrativeGenerationError("Narrative generator output failed validation", cause=e) from e

    if not recommendation.levers:
        raise NarrativeGenerationError("Narrative generator returned no levers")
    return recommendation


def build_fallback_recommendation(data: NarrativeInput) -> Recommendation:
    """
    Deterministic recommendation from engine output only.

    The summary names the top-3 gap levers; levers come from
    AssessmentScoringService.fallback_levers.
    """
    names = [gap.display_name for gap in data.top_gaps[:3]]
    if names:
        summary = (
            "Assessment completed successfully. Your biggest opportunities to move "
            f"the score are: {_join_names(names)}."
        )
    elif data.lowest_modules:
        summary = (
            "Assessment completed successfully. No capability gaps were found in your answers; "
            f"focus next on {_join_names(data.lowest_modules)}."
        )
    else:
        summary = "Assessment completed successfully."

    return Recommendation(
        summary=summary,
        levers=[GrowthLever.model_validate(lever) for lever in data.fallback_levers],
        risks=list(data.risks),
        source=RecommendationSource.FALLBACK,
    )


async def recommend(generator: Optional[NarrativeGenerator], data: NarrativeInput) -> Recommendation:
    """Generator output when available, otherwise the deterministic fallback."""
    if generator is None:
        logger.info("narrative_fallback", extra={"reason": "not_configured"})
        return build_fallback_recommendation(data)

    try:
        return await generator.generate(data)
    except NarrativeGenerationError as e:
        logger.warning(
            "narrative_fallback",
            extra={"reason": e.message, "company": data.company},
        )
        return build_fallback_recommendation(data)


def _join_names(names) -> str:
    names = list(names)
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + f" and {names[-1]}"
