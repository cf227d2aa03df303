"""
scoring/confidence_estimator.py

Rates how much of the questionnaire was meaningfully answered.

Counts:
    answered_levers  - levers with applicable=False or present explicitly True/False
    modules_answered - modules with at least one answered lever
    infra anchor     - infra.crm or infra.marketingAutomation answered
    attr anchor      - attr.multiTouch or attr.dashboards answered

Rules, applied in this order:
    high    answered ≥ 18 and modules ≥ 5 and both anchors
    medium  9 ≤ answered < 18
    low     otherwise (including answered ≥ 18 without the high conditions)
"""

import logging
from dataclasses import dataclass

from app.models.enumerations import ConfidenceLevel, Module
from app.scoring.lever_tables import ScoringConfig
from app.scoring.responses import ResponseDocument

logger = logging.getLogger(__name__)

INFRA_ANCHORS = ("crm", "marketingAutomation")
ATTR_ANCHORS = ("multiTouch", "dashboards")


@dataclass(frozen=True)
class ConfidenceResult:
    """Output of ConfidenceEstimator.estimate()."""
    level: ConfidenceLevel
    answered_levers: int
    modules_answered: int
    has_infra_anchor: bool
    has_attr_anchor: bool


class ConfidenceEstimator:
    """Estimate data sufficiency for a response document."""

    def __init__(self, config: ScoringConfig):
        self.config = config

    def estimate(self, document: ResponseDocument) -> ConfidenceResult:
        answered_levers = 0
        modules_answered = 0

        for _, levers in document.modules():
            answered_here = sum(1 for response in levers.values() if response.is_answered)
            answered_levers += answered_here
            if answered_here:
                modules_answered += 1

        has_infra_anchor = any(
            document.get(Module.INFRA, lever).is_answered for lever in INFRA_ANCHORS
        )
        has_attr_anchor = any(
            document.get(Module.ATTR, lever).is_answered for lever in ATTR_ANCHORS
        )

        cfg = self.config
        if (
            answered_levers >= cfg.high_min_answered
            and modules_answered >= cfg.high_min_modules
            and has_infra_anchor
            and has_attr_anchor
        ):
            level = ConfidenceLevel.HIGH
        elif cfg.medium_min_answered <= answered_levers < cfg.high_min_answered:
            level = ConfidenceLevel.MEDIUM
        else:
            level = ConfidenceLevel.LOW

        logger.info(
            "confidence_estimated",
            extra={
                "answered_levers": answered_levers,
                "modules_answered": modules_answered,
                "has_infra_anchor": has_infra_anchor,
                "has_attr_anchor": has_attr_anchor,
                "confidence": level.value,
            },
        )

        return ConfidenceResult(
            level=level,
            answered_levers=answered_levers,
            modules_answered=modules_answered,
            has_infra_anchor=has_infra_anchor,
            has_attr_anchor=has_attr_anchor,
        )


def confidence(document: ResponseDocument, config: ScoringConfig) -> ConfidenceLevel:
    """low / medium / high for the document."""
    return ConfidenceEstimator(config).estimate(document).level
