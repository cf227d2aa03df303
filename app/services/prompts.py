"""
Narrative Prompts
app/services/prompts.py

Prompt text sent to the narrative generator. Only engine output goes in;
the generator is told not to invent anything beyond it.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.scoring.gap_ranker import GapRecord
from app.scoring.integration_service import AssessmentScores, extract_stack, lowest_modules
from app.scoring.lever_tables import module_display_name
from app.scoring.responses import ResponseDocument

SYSTEM_PROMPT = "You are a B2B demand generation strategist. Return only valid JSON."


@dataclass
class NarrativeInput:
    """Structured engine output handed to the narrative generator."""
    company: str
    industry: str
    scores: Dict[str, Optional[int]]
    outcome: str
    top_gaps: List[GapRecord]
    lowest_modules: List[str]
    stack: List[str]
    confidence: str
    prerequisites: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    fallback_levers: List[Dict[str, str]] = field(default_factory=list)


GUARDRAILS = [
    "Do not invent metrics or stack. Tie every recommendation to a specific lever gap.",
    "If inputs are sparse, lower confidence and state that more data is needed.",
    "If a module has no present levers, do not invent recommendations. Offer prerequisites only.",
    "Prefer actions that measurably reduce CAC or shorten time to first meeting.",
    "No absolutes, no hand-wavy advice. Use verbs, owners, and simple measures.",
    "Keep tone neutral and non-judgmental; prefer 'could strengthen' over 'lacks' or 'fails'.",
    "Be honest about maturity: 0-20 is just starting, 20-40 has some basics, 40+ has a solid foundation.",
    "Do not claim a 'strong foundation' if the overall score is below 30.",
    "If overall < 20, focus ONLY on foundational capabilities (CRM, basic content, one channel).",
    "If overall < 30, start with 'Start here: [foundational step]' before advanced recommendations.",
    "Flag missing foundational infrastructure before recommending advanced tactics.",
    "Consider interdependencies (e.g., content fuels both inbound and nurture).",
]


def _gap_line(gap: GapRecord) -> str:
    return (
        f"{gap.module.value}.{gap.lever} ({gap.display_name}): "
        f"present={str(gap.present).lower()}, weight={gap.weight}, impact={gap.computed_impact:.1f}"
    )


def recommendation_prompt(data: NarrativeInput) -> str:
    """User prompt asking for {summary, levers, risks} JSON."""
    gap_lines = "\n".join(_gap_line(g) for g in data.top_gaps) or "none"
    guardrails = "\n".join(f"- {rule}" for rule in GUARDRAILS)

    return f"""You are a B2B growth strategist for mid-market tech companies. Use ONLY the supplied inputs.

Company: {data.company or 'Not specified'}
Industry: {data.industry or 'Not specified'}
Scores: {json.dumps(data.scores)}
Outcome: {data.outcome}
Lowest-scoring modules: {', '.join(data.lowest_modules) or 'none'}
Stack: {', '.join(data.stack) or 'none reported'}
Confidence Level: {data.confidence}
Prerequisites: {'; '.join(data.prerequisites) or 'none'}
Detected risks: {'; '.join(data.risks) or 'none'}

Top Gap Analysis (use only these computed values):
{gap_lines}

Return ONLY valid JSON in this exact format:
{{
  "summary": "string, 120-160 words, neutral tone",
  "levers": [
    {{"name": "string", "why": "string", "expectedImpact": "string", "confidence": "low|medium|high", "firstStep": "string"}}
  ],
  "risks": ["string"]
}}

Return exactly three levers, highest impact first.

Guardrails:
{guardrails}
"""


def build_narrative_input(
    scores: AssessmentScores,
    document: ResponseDocument,
    fallback_levers: List[Dict[str, str]],
    company: Optional[str] = None,
    industry: Optional[str] = None,
    top_n: int = 10,
) -> NarrativeInput:
    """Collect the engine output the narrative generator is allowed to use."""
    return NarrativeInput(
        company=company or "",
        industry=industry or "",
        scores={module.value: score for module, score in scores.module_scores.items()},
        outcome=scores.outcome.value,
        top_gaps=scores.top_gaps(top_n),
        lowest_modules=[module_display_name(m) for m in lowest_modules(scores.module_scores)],
        stack=extract_stack(document),
        confidence=scores.confidence.value,
        prerequisites=list(scores.prerequisites),
        risks=list(scores.risks),
        fallback_levers=fallback_levers,
    )
