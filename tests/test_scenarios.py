# tests/test_scenarios.py
"""
End-to-end engine scenarios through AssessmentScoringService, including the
deterministic recommendation used when no narrative output is available.
"""

import pytest

from app.models.enumerations import ConfidenceLevel, Module, Outcome, RecommendationSource
from app.scoring.gap_ranker import CRM_PREREQUISITE, INFRA_PREREQUISITE
from app.scoring.integration_service import (
    AssessmentScoringService,
    extract_stack,
    gap_names,
    lowest_modules,
)
from app.scoring.responses import ResponseDocument
from app.services.narrative_generator import build_fallback_recommendation
from app.services.prompts import build_narrative_input


@pytest.fixture
def service(scoring_config):
    return AssessmentScoringService(scoring_config)


class TestCrmOnlyScenario:
    """infra.crm present, every other lever not applicable."""

    def test_scores(self, service, crm_only_responses):
        result = service.score(ResponseDocument.from_dict(crm_only_responses))
        assert result.module_scores[Module.INFRA] == 100
        for module in Module:
            if module != Module.INFRA:
                assert result.module_scores[module] is None
        assert result.overall == 100
        assert result.outcome == Outcome.OPTIMIZATION

    def test_advisories_and_confidence(self, service, crm_only_responses):
        result = service.score(ResponseDocument.from_dict(crm_only_responses))
        assert result.prerequisites == [CRM_PREREQUISITE]
        assert result.risks == []
        assert result.gaps == []
        assert result.confidence == ConfidenceLevel.HIGH

    def test_fallback_uses_lowest_modules_when_no_gaps(self, service, crm_only_responses):
        result = service.score(ResponseDocument.from_dict(crm_only_responses))
        levers = service.fallback_levers(result)
        assert [lever["name"] for lever in levers] == [
            "Inbound Marketing",
            "Outbound Sales",
            "Content Marketing",
        ]
        assert "n/a" in levers[0]["why"]

    def test_stack(self, crm_only_responses):
        assert extract_stack(ResponseDocument.from_dict(crm_only_responses)) == ["CRM"]


class TestAllAbsentScenario:
    """Every lever applicable and absent."""

    def test_scores(self, service, all_absent_responses):
        result = service.score(ResponseDocument.from_dict(all_absent_responses))
        assert all(result.module_scores[m] == 0 for m in Module)
        assert result.overall == 0
        assert result.outcome == Outcome.FOUNDATION
        assert result.scores_dict()["outcome"] == "Foundation"

    def test_advisories_and_confidence(self, service, all_absent_responses):
        result = service.score(ResponseDocument.from_dict(all_absent_responses))
        assert result.prerequisites == [INFRA_PREREQUISITE]
        assert result.risks == []
        assert result.confidence == ConfidenceLevel.HIGH
        assert len(result.gaps) == 28

    def test_fallback_recommendation(self, service, all_absent_responses):
        document = ResponseDocument.from_dict(all_absent_responses)
        result = service.score(document)
        data = build_narrative_input(
            result, document, service.fallback_levers(result), company="Acme Analytics"
        )
        recommendation = build_fallback_recommendation(data)

        assert recommendation.source == RecommendationSource.FALLBACK
        assert recommendation.summary == (
            "Assessment completed successfully. Your biggest opportunities to move the "
            "score are: Email Deliverability, Lead Scoring and CRM System."
        )
        assert [lever.name for lever in recommendation.levers] == [
            "Email Deliverability",
            "Lead Scoring",
            "CRM System",
        ]
        assert recommendation.levers[0].expected_impact == (
            "100% improvement in lead quality and conversion rates"
        )
        assert recommendation.levers[0].confidence == ConfidenceLevel.HIGH
        assert recommendation.risks == []

    def test_narrative_input(self, service, all_absent_responses):
        document = ResponseDocument.from_dict(all_absent_responses)
        result = service.score(document)
        data = build_narrative_input(result, document, [], top_n=10)
        assert len(data.top_gaps) == 10
        assert data.scores["outbound"] == 0
        assert data.outcome == "Foundation"
        assert data.stack == []
        assert data.lowest_modules == ["Inbound Marketing", "Outbound Sales", "Content Marketing"]


class TestMixedScenario:

    def test_weight_five_gap_impact_text(self, service, all_absent_responses):
        for module, lever in [("outbound", "deliverability"), ("nurture", "scoringTriggers"),
                              ("infra", "crm"), ("attr", "multiTouch")]:
            all_absent_responses[module][lever] = {"present": True}
        result = service.score(ResponseDocument.from_dict(all_absent_responses))
        assert gap_names(result.top_gaps(2)) == ["Cold Email Campaigns", "Case Studies & Success Stories"]
        levers = service.fallback_levers(result)
        assert levers[0]["expected_impact"] == "83% improvement in lead quality and conversion rates"

    def test_sparse_document_falls_back_to_lowest_modules(self, service):
        document = ResponseDocument.from_dict({"infra": {"crm": {"present": True}}})
        result = service.score(document)
        assert result.gaps == []

        levers = service.fallback_levers(result)
        assert [lever["name"] for lever in levers] == [
            "Inbound Marketing",
            "Outbound Sales",
            "Content Marketing",
        ]
        data = build_narrative_input(result, document, levers)
        summary = build_fallback_recommendation(data).summary
        assert summary.startswith("Assessment completed successfully. No capability gaps")
        assert "Email Deliverability" not in summary

    def test_lowest_modules_ties_keep_module_order(self):
        scores = {Module.INBOUND: 40, Module.OUTBOUND: None, Module.CONTENT: 10, Module.PAID: 10}
        assert lowest_modules(scores, 3) == [Module.OUTBOUND, Module.CONTENT, Module.PAID]
