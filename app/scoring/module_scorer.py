# app/scoring/module_scorer.py
"""
Module Scorer
-------------
Turns the lever responses of one module into a 0-100 maturity score.

Formula (over applicable levers only):
    coverage = round(100 × present_count / applicable_count)
    weighted = round(100 × Σ(weight × present) / Σ weight)
    score    = round(0.6 × coverage + 0.4 × weighted)

A lever with applicable=False is excluded entirely. A lever in the weight
table with no response counts as applicable but absent. If no lever is
applicable the module has no score (None) and drops out of aggregation.
"""
import structlog
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from app.models.enumerations import Module
from app.scoring.responses import UNANSWERED, LeverAnswer
from app.scoring.utils import clamp, percentage, round_half_up

logger = structlog.get_logger(__name__)

COVERAGE_BLEND = Decimal("0.6")
WEIGHTED_BLEND = Decimal("0.4")


@dataclass(frozen=True)
class ModuleScoreResult:
    """Output of ModuleScorer.calculate()."""
    module: Optional[Module]
    score: Optional[int]            # [0, 100] or None when nothing is applicable
    coverage_score: Optional[int]   # share of applicable levers present
    weighted_score: Optional[int]   # weight share of present levers
    applicable_count: int
    present_count: int


class ModuleScorer:
    """Score a single module from its lever responses."""

    def calculate(
        self,
        module_responses: Mapping[str, LeverAnswer],
        lever_weights: Mapping[str, int],
        module: Optional[Module] = None,
    ) -> ModuleScoreResult:
        """
        Args:
            module_responses: lever key → LeverResponse for this module.
                              Keys outside lever_weights are ignored.
            lever_weights: lever key → positive weight for this module.
            module: Optional module tag carried into the result and logs.

        Returns:
            ModuleScoreResult; score is None when no lever is applicable.

        Examples:
            >>> from app.scoring.responses import LeverResponse
            >>> scorer = ModuleScorer()
            >>> weights = {"sequences": 5, "deliverability": 6, "linkedin": 4, "phone": 2}
            >>> scorer.calculate({"sequences": LeverResponse(present=True)}, weights).score
            27
        """
        applicable_weight = 0
        present_weight = 0
        applicable_count = 0
        present_count = 0

        for lever, weight in lever_weights.items():
            answer = module_responses.get(lever, UNANSWERED)
            if not answer.applicable:
                continue
            applicable_count += 1
            applicable_weight += weight
            if answer.is_present:
                present_count += 1
                present_weight += weight

        if applicable_count == 0:
            logger.debug("module_not_applicable", module=_tag(module))
            return ModuleScoreResult(
                module=module,
                score=None,
                coverage_score=None,
                weighted_score=None,
                applicable_count=0,
                present_count=0,
            )

        coverage = round_half_up(percentage(present_count, applicable_count))
        weighted = round_half_up(percentage(present_weight, applicable_weight))

        blended = COVERAGE_BLEND * coverage + WEIGHTED_BLEND * weighted
        score = round_half_up(clamp(blended))

        logger.info(
            "module_scored",
            module=_tag(module),
            applicable_count=applicable_count,
            present_count=present_count,
            coverage_score=coverage,
            weighted_score=weighted,
            score=score,
        )

        return ModuleScoreResult(
            module=module,
            score=score,
            coverage_score=coverage,
            weighted_score=weighted,
            applicable_count=applicable_count,
            present_count=present_count,
        )


def score(
    module_responses: Mapping[str, LeverAnswer],
    lever_weights: Mapping[str, int],
) -> Optional[int]:
    """Module score in [0, 100], or None when no lever is applicable."""
    return ModuleScorer().calculate(module_responses, lever_weights).score


def _tag(module: Optional[Module]) -> Optional[str]:
    return module.value if module is not None else None
