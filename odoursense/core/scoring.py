"""
Disease Scorer

Runs the rule catalogue over the evaluated biomarkers and the reported
symptoms and returns the ranked differential diagnosis.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from odoursense.utils import get_logger
from .base import (
    CHANNELS_BY_NAME,
    BiomarkerInsight,
    BiomarkerStatus,
    DiseaseLikelihood,
    SymptomState,
    normalize_key,
)
from .rules import (
    CONDITION_CATALOGUE,
    SENTINEL_NAME,
    SENTINEL_PROBABILITY,
    ConditionRule,
)

logger = get_logger(__name__)


def channel_statuses(insights: Iterable[BiomarkerInsight]) -> Dict[str, BiomarkerStatus]:
    """Map channel key to status for the given insights."""
    statuses = {}
    for insight in insights:
        channel = CHANNELS_BY_NAME.get(insight.name)
        key = channel.key if channel else normalize_key(insight.name.replace(" ", ""))
        statuses[key] = insight.status
    return statuses


def score_rule(
    rule: ConditionRule,
    statuses: Dict[str, BiomarkerStatus],
    symptoms: SymptomState,
) -> int:
    score = sum(term.points(statuses) for term in rule.terms)
    score += sum(points for symptom, points in rule.symptom_weights if symptoms.is_set(symptom))
    return min(rule.ceiling, score)


def score_diseases(
    insights: Sequence[BiomarkerInsight],
    symptoms: SymptomState,
    catalogue: Sequence[ConditionRule] = CONDITION_CATALOGUE,
) -> List[DiseaseLikelihood]:
    """
    Score every rule independently and rank the candidates.

    Returns:
        Candidates sorted by probability, highest first; ties keep catalogue
        order.  Never empty: the healthy sentinel is returned alone when no
        rule clears its floor.
    """
    statuses = channel_statuses(insights)
    diseases: List[DiseaseLikelihood] = []

    for rule in catalogue:
        score = score_rule(rule, statuses, symptoms)
        if score > rule.floor:
            diseases.append(DiseaseLikelihood(rule.label(score, statuses), score))
        else:
            logger.debug(f"Rule [{rule.rule_id}]: score {score} <= floor {rule.floor}")

    if not diseases:
        return [DiseaseLikelihood(SENTINEL_NAME, SENTINEL_PROBABILITY)]

    diseases.sort(key=lambda d: d.probability, reverse=True)
    return diseases
