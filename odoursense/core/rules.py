"""
Differential-Diagnosis Rule Catalogue

Every condition family is one declarative ConditionRule record.  The scorer
evaluates all of them with the same loop, so adding a condition means adding
a record here and nothing else.

Scoring recipe per rule:
    1. Each BiomarkerTerm adds its ``critical`` points when any of its
       channels is Critical, otherwise its ``elevated`` points when any is
       Elevated.
    2. Each set symptom in ``symptom_weights`` adds its points.
    3. The total is clamped to ``ceiling`` (always below 100).
    4. The condition is reported only when the total exceeds ``floor``.

Catalogue (declaration order is the tie-break order in the ranked list):
    glycemic       : acetone
    renal_hepatic  : ammonia
    gut_overgrowth : hydrogen / methane
    airway         : nitric oxide
    cardiovascular : isoprene
    toxicity       : ether / carbon monoxide
    infection      : sulfur
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple

from .base import BiomarkerStatus

# Emitted alone when no rule clears its floor
SENTINEL_NAME = "Metabolically Healthy"
SENTINEL_PROBABILITY = 98


@dataclass(frozen=True)
class BiomarkerTerm:
    """Points contributed by a group of channels (any-of)."""
    channels: Tuple[str, ...]
    critical: int
    elevated: int = 0

    def points(self, statuses: Mapping[str, BiomarkerStatus]) -> int:
        found = [statuses.get(ch, BiomarkerStatus.NORMAL) for ch in self.channels]
        if BiomarkerStatus.CRITICAL in found:
            return self.critical
        if BiomarkerStatus.ELEVATED in found:
            return self.elevated
        return 0


@dataclass(frozen=True)
class ConditionRule:
    """One condition family of the differential diagnosis."""
    rule_id: str
    name: str
    terms: Tuple[BiomarkerTerm, ...]
    symptom_weights: Tuple[Tuple[str, int], ...] = ()
    floor: int = 25
    ceiling: int = 99

    # Severe variant label, chosen by score or by a Critical channel
    severe_name: Optional[str] = None
    severe_above: Optional[int] = None
    severe_when_critical: Tuple[str, ...] = ()

    recommendations: Tuple[str, ...] = ()

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.name, self.severe_name) if self.severe_name else (self.name,)

    @property
    def channels(self) -> Tuple[str, ...]:
        return tuple(ch for term in self.terms for ch in term.channels)

    def label(self, score: int, statuses: Mapping[str, BiomarkerStatus]) -> str:
        if self.severe_name is None:
            return self.name
        if self.severe_above is not None and score > self.severe_above:
            return self.severe_name
        if any(statuses.get(ch) is BiomarkerStatus.CRITICAL for ch in self.severe_when_critical):
            return self.severe_name
        return self.name


CONDITION_CATALOGUE: Tuple[ConditionRule, ...] = (
    ConditionRule(
        rule_id="glycemic",
        name="Hyperglycemia / Pre-Diabetes",
        severe_name="Diabetic Ketoacidosis (DKA)",
        severe_above=75,
        terms=(BiomarkerTerm(("acetone",), critical=80, elevated=40),),
        symptom_weights=(
            ("thirst", 15),
            ("frequent_urination", 15),
            ("confusion", 10),
            ("unexplained_weight_loss", 20),
        ),
        ceiling=99,
        recommendations=(
            "Endocrinology: Immediate blood glucose check required.",
            "Hydration: Increase water intake to flush ketones.",
        ),
    ),
    ConditionRule(
        rule_id="renal_hepatic",
        name="Hepatic or Renal Insufficiency",
        terms=(BiomarkerTerm(("ammonia",), critical=85, elevated=50),),
        symptom_weights=(("confusion", 20), ("nausea", 15), ("fatigue", 10)),
        ceiling=99,
        recommendations=("Lab: Liver Function Panel (ALT/AST).",),
    ),
    ConditionRule(
        rule_id="gut_overgrowth",
        name="Small Intestinal Bacterial Overgrowth (SIBO)",
        severe_name="Intestinal Methanogen Overgrowth (IMO)",
        severe_when_critical=("methane",),
        terms=(BiomarkerTerm(("hydrogen", "methane"), critical=80, elevated=40),),
        symptom_weights=(("abdominal_pain", 20), ("nausea", 10)),
        ceiling=95,
        recommendations=(
            "Gastroenterology: Schedule a Hydrogen/Methane Breath Test (HMBT).",
            "Diet: Consider Low-FODMAP diet intervention.",
        ),
    ),
    ConditionRule(
        rule_id="airway",
        name="Eosinophilic Airway Inflammation / Asthma",
        terms=(BiomarkerTerm(("nitric_oxide",), critical=85, elevated=50),),
        symptom_weights=(("shortness_of_breath", 20), ("dry_cough", 20), ("chest_pain", 10)),
        ceiling=98,
        recommendations=(
            "Pulmonology: FeNO test recommended.",
            "Monitor: Track peak flow variability.",
        ),
    ),
    ConditionRule(
        rule_id="cardiovascular",
        name="Metabolic Stress / Cardiovascular Risk",
        terms=(BiomarkerTerm(("isoprene",), critical=60, elevated=30),),
        symptom_weights=(("chest_pain", 30), ("shortness_of_breath", 10), ("night_sweats", 20)),
        floor=35,
        ceiling=85,
        recommendations=(
            "Cardiology: Schedule a lipid profile and stress test.",
            "Lifestyle: Review sleep apnea potential.",
        ),
    ),
    ConditionRule(
        rule_id="toxicity",
        name="Environmental Toxicity / CO Exposure",
        terms=(
            BiomarkerTerm(("ether", "carbon_monoxide"), critical=60, elevated=60),
            BiomarkerTerm(("carbon_monoxide",), critical=30),
        ),
        symptom_weights=(("dizziness", 20), ("confusion", 20)),
        floor=30,
        ceiling=99,
        recommendations=(
            "Safety: Evacuate current environment immediately.",
            "Emergency: Check for gas leaks or combustion sources.",
        ),
    ),
    ConditionRule(
        rule_id="infection",
        name="H. Pylori / Gastric Infection",
        terms=(BiomarkerTerm(("sulfur",), critical=80, elevated=45),),
        symptom_weights=(("night_sweats", 20),),
        ceiling=95,
        recommendations=(
            "Gastroenterology: Urea breath or stool antigen test for H. pylori.",
            "Dental: Rule out periodontal disease as a sulfur source.",
        ),
    ),
)


def rule_for_condition(
    name: str,
    catalogue: Iterable[ConditionRule] = CONDITION_CATALOGUE,
) -> Optional[ConditionRule]:
    """Rule that can emit the condition label ``name``, if any."""
    for rule in catalogue:
        if name in rule.labels:
            return rule
    return None
