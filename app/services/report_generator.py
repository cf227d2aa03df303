"""
Assessment Report Generator Service
app/services/report_generator.py

Renders a scored assessment record as a markdown report, and as the
plain-text note attached to the CRM contact.
"""

import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from app.models.enumerations import Module
from app.scoring.lever_tables import module_display_name

logger = logging.getLogger(__name__)


def _level_label(score: Optional[float]) -> str:
    if score is None: return "Not applicable"
    if score >= 80: return "Excellent"
    if score >= 60: return "Good"
    if score >= 40: return "Growing"
    return "Ready to Scale"


def _fmt(value: Any) -> str:
    return "-" if value is None else str(value)


# =====================================================================
# Markdown Report
# =====================================================================

def generate_assessment_report(record: Dict[str, Any]) -> str:
    """Generate a markdown report for one scored assessment record."""

    scores = record.get("scores") or {}
    company = record.get("company") or "Your company"
    scored_at = record.get("scored_at") or datetime.now(timezone.utc)
    now = scored_at.strftime("%Y-%m-%d")

    lines = []
    lines.append(f"# Lead Generation Maturity Report: {company}")
    lines.append(f"")
    lines.append(
        f"> Industry: {record.get('industry') or 'Not specified'} | "
        f"Size: {record.get('company_size') or 'Not specified'} | Scored: {now}"
    )
    lines.append(f"")
    lines.append(f"---")
    lines.append(f"")

    # ── Overall ──
    lines.append(f"## Overall")
    lines.append(f"")
    lines.append(f"**Score:** {_fmt(scores.get('overall'))}/100 ({scores.get('outcome', 'Unscored')})")
    lines.append(f"")
    lines.append(f"**Confidence:** {record.get('confidence') or 'n/a'}")
    lines.append(f"")

    # ── Module Scores ──
    lines.append(f"## Module Scores")
    lines.append(f"")
    lines.append(f"| Module | Score | Level |")
    lines.append(f"|:---|---:|:---|")
    for module in Module:
        score = scores.get(module.value)
        lines.append(f"| {module_display_name(module)} | {_fmt(score)} | {_level_label(score)} |")
    lines.append(f"")

    # ── Summary ──
    if record.get("summary"):
        lines.append(f"## Summary")
        lines.append(f"")
        lines.append(record["summary"])
        lines.append(f"")

    # ── Growth Levers ──
    levers = record.get("growth_levers") or []
    if levers:
        lines.append(f"## Top Growth Levers")
        lines.append(f"")
        for i, lever in enumerate(levers, 1):
            lines.append(f"### {i}. {lever.get('name')}")
            lines.append(f"")
            lines.append(f"- **Why:** {lever.get('why')}")
            lines.append(f"- **Expected impact:** {lever.get('expected_impact')}")
            lines.append(f"- **Confidence:** {lever.get('confidence')}")
            lines.append(f"- **First step:** {lever.get('first_step')}")
            lines.append(f"")

    _append_bullets(lines, "Prerequisites", record.get("prerequisites") or [])
    _append_bullets(lines, "Risk Flags", record.get("risk_flags") or [])

    # ── Gaps ──
    gaps = record.get("gaps") or []
    if gaps:
        lines.append(f"## Capability Gaps")
        lines.append(f"")
        lines.append(f"| Capability | Module | Weight | Impact |")
        lines.append(f"|:---|:---|---:|---:|")
        for gap in gaps:
            lines.append(
                f"| {gap.get('name')} | {module_display_name(Module(gap['module']))} | "
                f"{gap.get('weight')} | {gap.get('computed_impact')} |"
            )
        lines.append(f"")

    lines.append(f"---")
    lines.append(f"")

    return "\n".join(lines)


def _append_bullets(lines: List[str], title: str, items: List[str]) -> None:
    if not items:
        return
    lines.append(f"## {title}")
    lines.append(f"")
    for item in items:
        lines.append(f"- {item}")
    lines.append(f"")


# =====================================================================
# CRM Note
# =====================================================================

def generate_crm_note(record: Dict[str, Any]) -> str:
    """Plain-text note body for the CRM contact."""
    scores = record.get("scores") or {}

    lines = [
        "Lead Gen Assessment Completed",
        "",
        f"Overall Score: {_fmt(scores.get('overall'))}/100 ({scores.get('outcome', 'Unscored')})",
        f"Company: {record.get('company') or 'Not specified'}",
        f"Industry: {record.get('industry') or 'Not specified'}",
        f"Company Size: {record.get('company_size') or 'Not specified'}",
        "",
        "Module Scores:",
    ]
    for module in Module:
        score = scores.get(module.value)
        lines.append(f"- {module_display_name(module)}: {_fmt(score)}/100 ({_level_label(score)})")

    levers = record.get("growth_levers") or []
    if levers:
        lines.append("")
        lines.append("Top Growth Levers:")
        for i, lever in enumerate(levers, 1):
            lines.append(f"{i}. {lever.get('name')} - {lever.get('expected_impact')}")

    risks = record.get("risk_flags") or []
    if risks:
        lines.append("")
        lines.append("Risk Flags:")
        lines.extend(f"- {risk}" for risk in risks)

    return "\n".join(lines)
