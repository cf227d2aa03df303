"""
scoring/overall_aggregator.py

Combines module scores into the overall maturity score and outcome band.

Formula (modules with a score only):
    overall = round(Σ(score × module_weight) / Σ module_weight)

Modules scored None are excluded from numerator and denominator alike.
If every module is None, overall = 0 (outcome Foundation).

Outcome bands:
    Foundation    overall < 50
    Momentum      50 ≤ overall < 75
    Optimization  overall ≥ 75
"""

import structlog
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from app.models.enumerations import Module, Outcome
from app.scoring.utils import round_half_up, weighted_mean

logger = structlog.get_logger(__name__)

MOMENTUM_FLOOR = 50
OPTIMIZATION_FLOOR = 75


@dataclass(frozen=True)
class OverallResult:
    """Output of OverallAggregator.calculate()."""
    overall: int                     # [0, 100]
    outcome: Outcome
    modules_used: Tuple[Module, ...]  # modules that contributed a score


def classify_outcome(overall: int) -> Outcome:
    if overall < MOMENTUM_FLOOR:
        return Outcome.FOUNDATION
    if overall < OPTIMIZATION_FLOOR:
        return Outcome.MOMENTUM
    return Outcome.OPTIMIZATION


class OverallAggregator:
    """Weight-average the non-null module scores."""

    def calculate(
        self,
        module_scores: Mapping[Module, Optional[int]],
        module_weights: Mapping[Module, int],
    ) -> OverallResult:
        """
        Args:
            module_scores: module → score in [0, 100] or None.
            module_weights: module → weight. Modules missing here contribute nothing.

        Returns:
            OverallResult with overall score, outcome and the modules used.

        Examples:
            >>> agg = OverallAggregator()
            >>> r = agg.calculate(
            ...     {Module.INBOUND: 100, Module.OUTBOUND: 0, Module.PAID: None},
            ...     {Module.INBOUND: 20, Module.OUTBOUND: 10, Module.PAID: 18},
            ... )
            >>> (r.overall, r.outcome.value)
            (67, 'Momentum')
        """
        used = [
            module
            for module, value in module_scores.items()
            if value is not None and module_weights.get(module, 0) > 0
        ]

        if not used:
            overall = 0
        else:
            mean = weighted_mean(
                [module_scores[m] for m in used],
                [module_weights[m] for m in used],
            )
            overall = round_half_up(mean)

        outcome = classify_outcome(overall)

        logger.info(
            "overall_aggregated",
            modules_used=[m.value for m in used],
            overall=overall,
            outcome=outcome.value,
        )

        return OverallResult(overall=overall, outcome=outcome, modules_used=tuple(used))


def aggregate(
    module_scores: Mapping[Module, Optional[int]],
    module_weights: Mapping[Module, int],
) -> Tuple[int, Outcome]:
    """(overall, outcome) for the given module scores."""
    result = OverallAggregator().calculate(module_scores, module_weights)
    return result.overall, result.outcome
