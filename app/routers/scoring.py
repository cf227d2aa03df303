"""
Scoring API Router
app/routers/scoring.py

Endpoints:
  GET  /api/v1/scoring/weights  - Lever and module weight tables
  POST /api/v1/scoring/preview  - Score a response document without storing it

Scoring a well-formed document never fails; unknown modules and levers
are ignored.
"""

from fastapi import APIRouter, Depends
import logging

from app.core.dependencies import get_scoring_service
from app.models.assessment import (
    GapRecordResponse,
    ModuleScores,
    ScoreBreakdown,
    ScorePreviewRequest,
    WeightsResponse,
)
from app.scoring.integration_service import AssessmentScores, AssessmentScoringService
from app.scoring.responses import ResponseDocument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/scoring", tags=["Scoring"])


def to_breakdown(scores: AssessmentScores) -> ScoreBreakdown:
    """API view of an engine result."""
    return ScoreBreakdown(
        scores=ModuleScores(**scores.scores_dict()),
        confidence=scores.confidence,
        prerequisites=scores.prerequisites,
        risks=scores.risks,
        gaps=[GapRecordResponse(**gap.to_dict()) for gap in scores.gaps],
    )


@router.get(
    "/weights",
    response_model=WeightsResponse,
    summary="Scoring weights",
    description="Returns the canonical lever weights per module and the module weights used for the overall score.",
)
async def get_weights(
    service: AssessmentScoringService = Depends(get_scoring_service),
) -> WeightsResponse:
    config = service.config
    return WeightsResponse(
        lever_weights={
            module.value: dict(levers) for module, levers in config.lever_weights.items()
        },
        module_weights={module.value: weight for module, weight in config.module_weights.items()},
        lever_count=config.lever_count,
    )


@router.post(
    "/preview",
    response_model=ScoreBreakdown,
    summary="Preview scores",
    description="Scores a response document without persisting it. Returns engine output only (no narrative).",
)
async def preview_scores(
    payload: ScorePreviewRequest,
    service: AssessmentScoringService = Depends(get_scoring_service),
) -> ScoreBreakdown:
    document = ResponseDocument.from_dict(payload.responses_dict())
    scores = service.score(document)

    logger.info(
        "score_preview",
        extra={"overall": scores.overall, "outcome": scores.outcome.value},
    )
    return to_breakdown(scores)
