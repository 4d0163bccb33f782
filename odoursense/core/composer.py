"""
Report Composer

Turns the ranked differential diagnosis into the narrative parts of the
report: risk level, one-line summary, explanation and recommendations.

Text conventions consumed by the presentation layer:
    explanation     : lines joined by "\\n", emphasis as **bold** markers
    recommendation  : items joined by "||"
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .base import (
    CHANNELS_BY_NAME,
    RECOMMENDATION_DELIMITER,
    BiomarkerInsight,
    BiomarkerStatus,
    DiseaseLikelihood,
    RiskLevel,
    SymptomState,
)
from .rules import CONDITION_CATALOGUE, SENTINEL_NAME, ConditionRule, rule_for_condition

URGENT_CARE_LINE = "URGENT: Proceed to emergency care immediately."
FALLBACK_RECOMMENDATION = "Maintain current healthy lifestyle protocols."
REASSURANCE_LINE = (
    "All measured biomarkers are within their configured limits and no symptoms "
    "were reported."
)


@dataclass(frozen=True)
class ComposedReport:
    risk_level: RiskLevel
    summary: str
    explanation: str
    recommendation: str


def derive_risk(diseases: Sequence[DiseaseLikelihood]) -> Tuple[RiskLevel, str]:
    """
    Risk level and summary from the top-ranked non-sentinel condition.

    The healthy sentinel carries no risk whatever its probability.
    """
    ranked = [d for d in diseases if d.name != SENTINEL_NAME]
    if not ranked:
        return RiskLevel.LOW, "Normal Health Profile"

    top = ranked[0]
    level = RiskLevel.from_probability(top.probability)
    if level is RiskLevel.CRITICAL:
        return level, f"Critical Warning: {top.name}"
    if level is RiskLevel.HIGH:
        return level, f"High Likelihood of {top.name}"
    if level is RiskLevel.MODERATE:
        return level, "Metabolic Irregularities Detected"
    return level, "Normal Health Profile"


def build_explanation(
    diseases: Sequence[DiseaseLikelihood],
    insights: Sequence[BiomarkerInsight],
    symptoms: SymptomState,
) -> str:
    top = diseases[0]
    lines: List[str] = [
        "**Diagnosis based on current inputs and patient history:**",
        f"Highest probability condition: **{top.name} ({top.probability}%)**.",
    ]

    abnormal = [i for i in insights if i.status is not BiomarkerStatus.NORMAL]
    if abnormal:
        lines.append("\n**Biomarker Drivers:**")
        for insight in abnormal:
            lines.append(
                f"- **{insight.name}** is {insight.status.value} "
                f"({insight.value:.1f} {insight.unit}). {insight.interpretation}"
            )

    active = [SymptomState.label(s) for s in symptoms.active()]
    if active:
        lines.append(
            f"\n**Clinical Correlation:** Symptoms ({', '.join(active)}) "
            f"align with the biomarker profile."
        )

    if not abnormal and not active:
        lines.append(REASSURANCE_LINE)

    return "\n".join(lines)


def build_recommendations(
    diseases: Sequence[DiseaseLikelihood],
    insights: Sequence[BiomarkerInsight],
    risk_level: RiskLevel,
    catalogue: Sequence[ConditionRule] = CONDITION_CATALOGUE,
) -> List[str]:
    """
    Ordered action items.

    Urgent care first when the risk is Critical, then the top condition's
    rule recommendations, then advisories of abnormal channels that declare
    one.  Falls back to a single maintenance line.
    """
    recommendations: List[str] = []
    if risk_level is RiskLevel.CRITICAL:
        recommendations.append(URGENT_CARE_LINE)

    rule = rule_for_condition(diseases[0].name, catalogue)
    if rule is not None:
        recommendations.extend(rule.recommendations)

    for insight in insights:
        if insight.status is BiomarkerStatus.NORMAL:
            continue
        channel = CHANNELS_BY_NAME.get(insight.name)
        if channel and channel.advisory and channel.advisory not in recommendations:
            recommendations.append(channel.advisory)

    if not recommendations:
        recommendations.append(FALLBACK_RECOMMENDATION)
    return recommendations


def compose_report(
    diseases: Sequence[DiseaseLikelihood],
    insights: Sequence[BiomarkerInsight],
    symptoms: SymptomState,
    catalogue: Sequence[ConditionRule] = CONDITION_CATALOGUE,
) -> ComposedReport:
    risk_level, summary = derive_risk(diseases)
    return ComposedReport(
        risk_level=risk_level,
        summary=summary,
        explanation=build_explanation(diseases, insights, symptoms),
        recommendation=RECOMMENDATION_DELIMITER.join(
            build_recommendations(diseases, insights, risk_level, catalogue)
        ),
    )
