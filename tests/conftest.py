# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for the engine and API

API tests never touch Snowflake, Redis, the narrative generator or HubSpot:
the repository is replaced by an in-memory fake through
app.dependency_overrides and the results cache is disabled.
"""

import pytest
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from app.core.dependencies import (
    get_assessment_repository,
    get_hubspot_service,
    get_narrative_generator,
)
from app.core.exceptions import RepositoryException
from app.main import app
from app.models.enumerations import Module
from app.scoring.lever_tables import LEVER_WEIGHTS, ScoringConfig


# =============================================================================
# IN-MEMORY COLLABORATORS
# =============================================================================

class FakeAssessmentRepository:
    """Dict-backed stand-in for AssessmentRepository (same record shape)."""

    def __init__(self):
        self.records: Dict[UUID, Dict[str, Any]] = {}

    def create(self, email, company, industry, company_size, responses) -> Dict[str, Any]:
        assessment_id = uuid4()
        self.records[assessment_id] = {
            "id": assessment_id,
            "email": email,
            "company": company,
            "industry": industry,
            "company_size": company_size,
            "responses": deepcopy(responses),
            "scores": None,
            "confidence": None,
            "gaps": [],
            "summary": None,
            "growth_levers": [],
            "risk_flags": [],
            "prerequisites": [],
            "recommendation_source": None,
            "crm_contact_id": None,
            "created_at": datetime.now(timezone.utc),
            "scored_at": None,
            "synced_at": None,
        }
        return self.get_by_id(assessment_id)

    def get_by_id(self, assessment_id) -> Optional[Dict[str, Any]]:
        record = self.records.get(UUID(str(assessment_id)))
        return deepcopy(record) if record else None

    def save_results(self, assessment_id, scores, recommendation) -> Optional[Dict[str, Any]]:
        record = self.records[UUID(str(assessment_id))]
        record.update(
            scores=scores.scores_dict(),
            confidence=scores.confidence.value,
            gaps=[gap.to_dict() for gap in scores.gaps],
            summary=recommendation.summary,
            growth_levers=[lever.model_dump(mode="json") for lever in recommendation.levers],
            risk_flags=list(recommendation.risks),
            prerequisites=list(scores.prerequisites),
            recommendation_source=recommendation.source.value,
            scored_at=datetime.now(timezone.utc),
        )
        return self.get_by_id(assessment_id)

    def mark_crm_synced(self, assessment_id, contact_id: str) -> None:
        record = self.records[UUID(str(assessment_id))]
        record.update(crm_contact_id=contact_id, synced_at=datetime.now(timezone.utc))


class UnavailableRepository:
    """Every call fails the way a lost Snowflake connection does."""

    def create(self, *args, **kwargs):
        raise RepositoryException("Database error: connection reset")

    def get_by_id(self, *args, **kwargs):
        raise RepositoryException("Database error: connection reset")


# =============================================================================
# FASTAPI TEST CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def fake_repo():
    return FakeAssessmentRepository()


@pytest.fixture
def unavailable_repo():
    return UnavailableRepository()


@pytest.fixture
def client(fake_repo, monkeypatch):
    """TestClient with in-memory storage, no cache and no external collaborators."""
    monkeypatch.setattr("app.routers.assessments.get_cache", lambda: None)
    monkeypatch.setattr("app.routers.health.get_cache", lambda: None)

    app.dependency_overrides[get_assessment_repository] = lambda: fake_repo
    app.dependency_overrides[get_narrative_generator] = lambda: None
    app.dependency_overrides[get_hubspot_service] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# RESPONSE DOCUMENT FIXTURES
# =============================================================================

def build_responses(value: Dict[str, Any]) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Every lever in the table answered with the same value."""
    return {
        module.value: {lever: dict(value) for lever in levers}
        for module, levers in LEVER_WEIGHTS.items()
    }


@pytest.fixture
def scoring_config():
    return ScoringConfig()


@pytest.fixture
def all_absent_responses():
    """Every lever applicable and explicitly absent."""
    return build_responses({"present": False, "applicable": True})


@pytest.fixture
def crm_only_responses():
    """Only infra.crm in place; every other lever not applicable."""
    responses = build_responses({"applicable": False})
    responses[Module.INFRA.value]["crm"] = {"present": True, "applicable": True}
    return responses


@pytest.fixture
def company_submission(all_absent_responses):
    return {
        "email": "Jane.Doe@AcmeAnalytics.io",
        "company": "Acme Analytics",
        "industry": "SaaS",
        "company_size": "51-200",
        "responses": all_absent_responses,
    }
