# app/scoring/gap_ranker.py
"""
Gap/Impact Ranker
-----------------
Ranks the absent capabilities by how much score they leave on the table,
and evaluates the fixed prerequisite / risk advisory rules.

Impact per lever (binary presence model):
    present_multiplier = 1 if present else 0
    impact = weight × (1 − present_multiplier)

Gaps are levers with a response object that are applicable and have
impact > 0; present=None still counts. Gaps are sorted by impact descending; ties
keep canonical table order (stable sort).

Advisories never feed back into any score. Each rule is independent and
emits at most one message.
"""
import structlog
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Tuple

from app.models.enumerations import Module, PresenceTrigger
from app.scoring.lever_tables import ScoringConfig, lever_display_name
from app.scoring.responses import UNANSWERED, ResponseDocument

logger = structlog.get_logger(__name__)

INFRA_PREREQUISITE = "Marketing infrastructure needs improvement before advanced tactics"
DELIVERABILITY_PREREQUISITE = "Email deliverability needs improvement before scaling outbound"
CRM_PREREQUISITE = "CRM hygiene needs improvement before advanced automation"
ATTRIBUTION_PREREQUISITE = "Attribution tracking needs improvement before scaling spend"

BOFU_RISK = "Paid traffic may leak without strong bottom-of-funnel content"
LEAD_SCORING_RISK = "Lead scoring needs improvement to optimize nurture sequences"
DELIVERABILITY_RISK = "Outbound sequences may underperform without proper deliverability"


@dataclass(frozen=True)
class GapRecord:
    """One absent, applicable lever and the score it leaves on the table."""
    module: Module
    lever: str
    present: bool
    weight: int
    computed_impact: int

    @property
    def display_name(self) -> str:
        return lever_display_name(self.module, self.lever)

    def to_dict(self) -> dict:
        return {
            "module": self.module.value,
            "lever": self.lever,
            "name": self.display_name,
            "present": self.present,
            "weight": self.weight,
            "computed_impact": self.computed_impact,
        }


@dataclass(frozen=True)
class Advisories:
    """Output of evaluate_advisories()."""
    prerequisites: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)


class GapRanker:
    """Compute and rank lever gaps against the canonical weight table."""

    def __init__(self, config: ScoringConfig):
        self.config = config

    def rank(self, document: ResponseDocument) -> List[GapRecord]:
        """
        Args:
            document: The respondent's ResponseDocument.

        Returns:
            GapRecords sorted by computed_impact descending, table order on ties.
        """
        gaps: List[GapRecord] = []
        for module, lever, weight in self.config.iter_levers():
            answer = document.get(module, lever)
            if answer is UNANSWERED or not answer.applicable:
                continue
            present = answer.is_present
            impact = weight * (1 - (1 if present else 0))
            if impact > 0:
                gaps.append(
                    GapRecord(
                        module=module,
                        lever=lever,
                        present=present,
                        weight=weight,
                        computed_impact=impact,
                    )
                )

        # sorted() is stable, so equal impacts stay in table order
        ranked = sorted(gaps, key=lambda g: g.computed_impact, reverse=True)

        logger.info(
            "gaps_ranked",
            gap_count=len(ranked),
            top=[f"{g.module.value}.{g.lever}" for g in ranked[:3]],
        )
        return ranked


# ---------------------------------------------------------------------------
# Advisory rules
# ---------------------------------------------------------------------------

RuleCheck = Callable[[ResponseDocument, Mapping[Module, Optional[int]], ScoringConfig], bool]


@dataclass(frozen=True)
class AdvisoryRule:
    kind: str  # "prerequisite" or "risk"
    message: str
    check: RuleCheck


def _infra_below_threshold(doc, scores, config) -> bool:
    # A module without a score counts as 0 here
    return (scores.get(Module.INFRA) or 0) < config.infra_prerequisite_threshold


def _presence_triggered(module: Module, lever: str) -> RuleCheck:
    def check(doc, scores, config) -> bool:
        if config.presence_trigger == PresenceTrigger.PRESENT:
            return doc.is_present(module, lever)
        if config.presence_trigger == PresenceTrigger.ABSENT:
            return doc.is_absent(module, lever)
        return False
    return check


def _present_without(
    present: Tuple[Module, str],
    absent: Tuple[Module, str],
) -> RuleCheck:
    def check(doc, scores, config) -> bool:
        return doc.is_present(*present) and doc.is_absent(*absent)
    return check


ADVISORY_RULES: Tuple[AdvisoryRule, ...] = (
    AdvisoryRule("prerequisite", INFRA_PREREQUISITE, _infra_below_threshold),
    AdvisoryRule(
        "prerequisite",
        DELIVERABILITY_PREREQUISITE,
        _presence_triggered(Module.OUTBOUND, "deliverability"),
    ),
    AdvisoryRule("prerequisite", CRM_PREREQUISITE, _presence_triggered(Module.INFRA, "crm")),
    AdvisoryRule(
        "prerequisite",
        ATTRIBUTION_PREREQUISITE,
        _presence_triggered(Module.ATTR, "multiTouch"),
    ),
    AdvisoryRule(
        "risk",
        BOFU_RISK,
        _present_without((Module.PAID, "ppc"), (Module.CONTENT, "boFuAssets")),
    ),
    AdvisoryRule(
        "risk",
        LEAD_SCORING_RISK,
        _present_without((Module.NURTURE, "drip"), (Module.NURTURE, "scoringTriggers")),
    ),
    AdvisoryRule(
        "risk",
        DELIVERABILITY_RISK,
        _present_without((Module.OUTBOUND, "sequences"), (Module.OUTBOUND, "deliverability")),
    ),
)


def evaluate_advisories(
    document: ResponseDocument,
    module_scores: Mapping[Module, Optional[int]],
    config: ScoringConfig,
    rules: Tuple[AdvisoryRule, ...] = ADVISORY_RULES,
) -> Advisories:
    """
    Evaluate every advisory rule against the document and module scores.

    Returns:
        Advisories with prerequisites and risks in rule-table order.
    """
    prerequisites: List[str] = []
    risks: List[str] = []
    for rule in rules:
        if not rule.check(document, module_scores, config):
            continue
        if rule.kind == "prerequisite":
            prerequisites.append(rule.message)
        else:
            risks.append(rule.message)

    logger.info(
        "advisories_evaluated",
        prerequisite_count=len(prerequisites),
        risk_count=len(risks),
    )
    return Advisories(prerequisites=prerequisites, risks=risks)


def rank_gaps(document: ResponseDocument, config: ScoringConfig) -> List[GapRecord]:
    """Sorted GapRecords for the document."""
    return GapRanker(config).rank(document)


def advisories(
    document: ResponseDocument,
    module_scores: Mapping[Module, Optional[int]],
    config: ScoringConfig,
) -> Advisories:
    """Prerequisite and risk advisories for the document."""
    return evaluate_advisories(document, module_scores, config)
