"""
scoring/lever_tables.py

Static weight tables for the seven capability modules and the
ScoringConfig value that carries them into every calculator.

Lever weights are module-local and reflect pipeline impact. Module weights
are the coarser share each module has in the overall score:

    inbound   20     outbound  18     content  15     paid  18
    nurture   18     infra      6     attr      5

Table order is significant: it is the tie-break order for gap ranking.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

from app.models.enumerations import Module, PresenceTrigger

LEVER_WEIGHTS: Mapping[Module, Mapping[str, int]] = MappingProxyType({
    Module.INBOUND: MappingProxyType({"seo": 3, "leadMagnets": 4, "webinars": 3}),
    Module.OUTBOUND: MappingProxyType(
        {"sequences": 5, "deliverability": 6, "linkedin": 4, "phone": 2}
    ),
    Module.CONTENT: MappingProxyType(
        {"blog": 2, "caseStudies": 5, "moFuAssets": 3, "boFuAssets": 5, "distribution": 2}
    ),
    Module.PAID: MappingProxyType(
        {"ppc": 4, "linkedinLeadGen": 5, "retargeting": 4, "socialAds": 2, "abm": 3}
    ),
    Module.NURTURE: MappingProxyType(
        {"drip": 5, "scoringTriggers": 6, "intentSignals": 4, "reactivation": 3}
    ),
    Module.INFRA: MappingProxyType(
        {"crm": 6, "marketingAutomation": 5, "enrichment": 3, "realtimeSync": 2}
    ),
    Module.ATTR: MappingProxyType({"multiTouch": 6, "dashboards": 4, "ctaTracking": 3}),
})

MODULE_WEIGHTS: Mapping[Module, int] = MappingProxyType({
    Module.INBOUND: 20,
    Module.OUTBOUND: 18,
    Module.CONTENT: 15,
    Module.PAID: 18,
    Module.NURTURE: 18,
    Module.INFRA: 6,
    Module.ATTR: 5,
})

MODULE_DISPLAY: Mapping[Module, str] = MappingProxyType({
    Module.INBOUND: "Inbound Marketing",
    Module.OUTBOUND: "Outbound Sales",
    Module.CONTENT: "Content Marketing",
    Module.PAID: "Paid Advertising",
    Module.NURTURE: "Lead Nurturing",
    Module.INFRA: "Marketing Infrastructure",
    Module.ATTR: "Attribution & Analytics",
})

LEVER_DISPLAY: Mapping[Tuple[Module, str], str] = MappingProxyType({
    (Module.INBOUND, "seo"): "SEO & Content Marketing",
    (Module.INBOUND, "leadMagnets"): "Lead Magnets",
    (Module.INBOUND, "webinars"): "Webinars & Events",
    (Module.OUTBOUND, "sequences"): "Cold Email Campaigns",
    (Module.OUTBOUND, "deliverability"): "Email Deliverability",
    (Module.OUTBOUND, "linkedin"): "LinkedIn Outreach",
    (Module.OUTBOUND, "phone"): "Phone Outreach",
    (Module.CONTENT, "blog"): "Blog & SEO Content",
    (Module.CONTENT, "caseStudies"): "Case Studies & Success Stories",
    (Module.CONTENT, "moFuAssets"): "Middle-of-Funnel Content",
    (Module.CONTENT, "boFuAssets"): "Bottom-of-Funnel Content",
    (Module.CONTENT, "distribution"): "Content Distribution",
    (Module.PAID, "ppc"): "Google & Bing Ads",
    (Module.PAID, "linkedinLeadGen"): "LinkedIn Lead Generation",
    (Module.PAID, "retargeting"): "Retargeting Campaigns",
    (Module.PAID, "socialAds"): "Social Media Ads",
    (Module.PAID, "abm"): "Account-Based Marketing",
    (Module.NURTURE, "drip"): "Email Sequences",
    (Module.NURTURE, "scoringTriggers"): "Lead Scoring",
    (Module.NURTURE, "intentSignals"): "Intent Signals",
    (Module.NURTURE, "reactivation"): "Lead Reactivation",
    (Module.INFRA, "crm"): "CRM System",
    (Module.INFRA, "marketingAutomation"): "Marketing Automation",
    (Module.INFRA, "enrichment"): "Data Enrichment",
    (Module.INFRA, "realtimeSync"): "Real-time Data Sync",
    (Module.ATTR, "multiTouch"): "Multi-touch Attribution",
    (Module.ATTR, "dashboards"): "Analytics Dashboard",
    (Module.ATTR, "ctaTracking"): "CTA Tracking",
})

# Short stack labels for present infrastructure levers
STACK_LABELS: Mapping[str, str] = MappingProxyType({
    "crm": "CRM",
    "marketingAutomation": "Marketing Automation",
    "enrichment": "Data Enrichment",
    "realtimeSync": "Real-time Sync",
})


@dataclass(frozen=True)
class ScoringConfig:
    """
    Immutable scoring configuration passed explicitly to each calculator.

    Attributes:
        lever_weights: module → lever key → positive weight (table order kept).
        module_weights: module → weight in the overall score.
        infra_prerequisite_threshold: infra score below which the
            infrastructure prerequisite fires.
        presence_trigger: when the deliverability / CRM / attribution
            prerequisites fire ("present", "absent" or "never").
        high_min_answered / high_min_modules / medium_min_answered:
            confidence thresholds.
    """
    lever_weights: Mapping[Module, Mapping[str, int]] = field(default_factory=lambda: LEVER_WEIGHTS)
    module_weights: Mapping[Module, int] = field(default_factory=lambda: MODULE_WEIGHTS)
    infra_prerequisite_threshold: int = 40
    presence_trigger: PresenceTrigger = PresenceTrigger.PRESENT
    high_min_answered: int = 18
    high_min_modules: int = 5
    medium_min_answered: int = 9

    def __post_init__(self):
        for module, levers in self.lever_weights.items():
            for lever, weight in levers.items():
                if weight <= 0:
                    raise ValueError(f"Lever weight must be positive: {module.value}.{lever}={weight}")

    def iter_levers(self) -> Iterator[Tuple[Module, str, int]]:
        """Yield (module, lever, weight) in canonical table order."""
        for module, levers in self.lever_weights.items():
            for lever, weight in levers.items():
                yield module, lever, weight

    @property
    def lever_count(self) -> int:
        return sum(len(levers) for levers in self.lever_weights.values())


def lever_display_name(module: Module, lever: str) -> str:
    return LEVER_DISPLAY.get((module, lever), f"{module.value} - {lever}")


def module_display_name(module: Module) -> str:
    return MODULE_DISPLAY.get(module, module.value)


def scoring_config_from_settings(settings) -> ScoringConfig:
    """Build a ScoringConfig from application Settings (advisory parameters only)."""
    return ScoringConfig(
        infra_prerequisite_threshold=settings.INFRA_PREREQUISITE_THRESHOLD,
        presence_trigger=PresenceTrigger(settings.ADVISORY_PRESENCE_TRIGGER),
    )
