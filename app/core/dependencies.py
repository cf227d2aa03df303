"""
Dependencies - LeadGen Maturity Assessment
app/core/dependencies.py

FastAPI dependency injection for repositories, the scoring engine and
external collaborators.
"""

from functools import lru_cache
from typing import Optional

from app.config import get_settings
from app.repositories.assessment_repository import AssessmentRepository
from app.scoring.integration_service import AssessmentScoringService
from app.scoring.lever_tables import scoring_config_from_settings
from app.services.hubspot import HubSpotService
from app.services.narrative_generator import NarrativeGenerator


@lru_cache()
def get_assessment_repository() -> AssessmentRepository:
    """Get cached AssessmentRepository instance."""
    return AssessmentRepository()


@lru_cache()
def get_scoring_service() -> AssessmentScoringService:
    """Get cached scoring engine configured from settings."""
    return AssessmentScoringService(scoring_config_from_settings(get_settings()))


@lru_cache()
def get_narrative_generator() -> Optional[NarrativeGenerator]:
    """Narrative generator, or None when no API key is configured."""
    return NarrativeGenerator.from_settings(get_settings())


@lru_cache()
def get_hubspot_service() -> Optional[HubSpotService]:
    """HubSpot client, or None when no API key is configured."""
    return HubSpotService.from_settings(get_settings())


async def close_http_clients() -> None:
    """Close outbound HTTP clients that were built; unbuilt ones stay unbuilt."""
    for getter in (get_narrative_generator, get_hubspot_service):
        if not getter.cache_info().currsize:
            continue
        client = getter()
        if client is not None:
            await client.aclose()
        getter.cache_clear()
