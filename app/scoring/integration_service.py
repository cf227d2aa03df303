"""
scoring/integration_service.py

Full engine pass: ResponseDocument → scores, gaps, advisories, confidence.

Class: AssessmentScoringService
Method: score(document) → AssessmentScores

Pipeline steps:
  1. ModuleScorer per module (canonical module order)
  2. OverallAggregator → overall + outcome
  3. GapRanker → ranked GapRecords
  4. evaluate_advisories → prerequisites + risks
  5. ConfidenceEstimator → low / medium / high

Also builds the deterministic growth levers used when no narrative
generator output is available.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.models.enumerations import ConfidenceLevel, Module, Outcome
from app.scoring.confidence_estimator import ConfidenceEstimator, ConfidenceResult
from app.scoring.gap_ranker import GapRanker, GapRecord, evaluate_advisories
from app.scoring.lever_tables import (
    STACK_LABELS,
    ScoringConfig,
    lever_display_name,
    module_display_name,
)
from app.scoring.module_scorer import ModuleScorer, ModuleScoreResult
from app.scoring.overall_aggregator import OverallAggregator
from app.scoring.responses import ResponseDocument
from app.scoring.utils import round_half_up

logger = logging.getLogger(__name__)

FALLBACK_LEVER_COUNT = 3


@dataclass(frozen=True)
class AssessmentScores:
    """Everything the engine derives from one ResponseDocument."""
    module_scores: Dict[Module, Optional[int]]
    overall: int
    outcome: Outcome
    prerequisites: List[str]
    risks: List[str]
    gaps: List[GapRecord]
    confidence: ConfidenceLevel
    module_details: Dict[Module, ModuleScoreResult] = field(default_factory=dict)
    confidence_detail: Optional[ConfidenceResult] = None

    def top_gaps(self, n: int) -> List[GapRecord]:
        return self.gaps[:n]

    def scores_dict(self) -> Dict[str, Any]:
        """Flat {module: score, ..., overall, outcome} view."""
        data: Dict[str, Any] = {m.value: s for m, s in self.module_scores.items()}
        data["overall"] = self.overall
        data["outcome"] = self.outcome.value
        return data


class AssessmentScoringService:
    """Run every engine component over one response document."""

    def __init__(self, config: ScoringConfig):
        self.config = config
        self.module_scorer = ModuleScorer()
        self.aggregator = OverallAggregator()
        self.gap_ranker = GapRanker(config)
        self.confidence_estimator = ConfidenceEstimator(config)

    def score(self, document: ResponseDocument) -> AssessmentScores:
        details: Dict[Module, ModuleScoreResult] = {}
        for module in Module:
            details[module] = self.module_scorer.calculate(
                document.module(module),
                self.config.lever_weights.get(module, {}),
                module=module,
            )
        module_scores = {module: result.score for module, result in details.items()}

        overall = self.aggregator.calculate(module_scores, self.config.module_weights)
        gaps = self.gap_ranker.rank(document)
        advisories = evaluate_advisories(document, module_scores, self.config)
        confidence = self.confidence_estimator.estimate(document)

        logger.info(
            "assessment_scored",
            extra={
                "overall": overall.overall,
                "outcome": overall.outcome.value,
                "gap_count": len(gaps),
                "confidence": confidence.level.value,
            },
        )

        return AssessmentScores(
            module_scores=module_scores,
            overall=overall.overall,
            outcome=overall.outcome,
            prerequisites=advisories.prerequisites,
            risks=advisories.risks,
            gaps=gaps,
            confidence=confidence.level,
            module_details=details,
            confidence_detail=confidence,
        )

    # ------------------------------------------------------------------
    # Deterministic recommendation helpers
    # ------------------------------------------------------------------

    def fallback_levers(self, scores: AssessmentScores) -> List[Dict[str, str]]:
        """
        Top-3 growth levers built only from engine output.

        Uses the highest-impact gaps; when there are none, the three
        lowest-scoring modules.
        """
        confidence = scores.confidence.value
        gaps = scores.top_gaps(FALLBACK_LEVER_COUNT)

        if not gaps:
            return [
                {
                    "name": module_display_name(module),
                    "why": (
                        f"Your current score in this area ({_score_text(scores.module_scores[module])}/100) "
                        "indicates room to build further."
                    ),
                    "expected_impact": "High - building foundational capabilities creates compound growth",
                    "confidence": confidence,
                    "first_step": f"Start by formalising your {module_display_name(module).lower()} processes.",
                }
                for module in lowest_modules(scores.module_scores, FALLBACK_LEVER_COUNT)
            ]

        max_weight = max(w for _, _, w in self.config.iter_levers())
        levers = []
        for gap in gaps:
            name = gap.display_name
            impact_pct = round_half_up(gap.computed_impact * 100 / max_weight)
            levers.append(
                {
                    "name": name,
                    "why": (
                        f"{name} is not in place yet and carries a weight of "
                        f"{gap.weight} in {module_display_name(gap.module)}."
                    ),
                    "expected_impact": f"{impact_pct}% improvement in lead quality and conversion rates",
                    "confidence": confidence,
                    "first_step": f"Review your current {name.lower()} processes and identify quick wins.",
                }
            )
        return levers


def lowest_modules(module_scores: Dict[Module, Optional[int]], n: int = 3) -> List[Module]:
    """The n lowest-scoring modules; None counts as 0, ties keep module order."""
    ordered = sorted(module_scores.items(), key=lambda item: item[1] or 0)
    return [module for module, _ in ordered[:n]]


def extract_stack(document: ResponseDocument) -> List[str]:
    """Labels of the infrastructure levers the respondent has in place."""
    return [
        label
        for lever, label in STACK_LABELS.items()
        if document.is_present(Module.INFRA, lever)
    ]


def gap_names(gaps: List[GapRecord]) -> List[str]:
    return [lever_display_name(g.module, g.lever) for g in gaps]


def _score_text(value: Optional[int]) -> str:
    return "n/a" if value is None else str(value)
