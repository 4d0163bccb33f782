"""
Breath Analysis - Base Types

Defines the data contracts shared by the evaluator, scorer, composer and
the storage layer: the monitored channel catalogue, sensor snapshots,
symptom flags, threshold pairs and the finished analysis report.

All records are frozen.  Dictionaries produced by ``to_dict`` use the
camelCase field names of the report exchange format so that stored history
and API payloads stay interchangeable.
"""
from __future__ import annotations

import re
import time
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from odoursense.utils.exceptions import (
    ConfigurationError,
    InvalidReadingError,
    InvalidSymptomError,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
# Lax boolean parsing: true/false, 1/0, "yes"/"no", "on"/"off"
_SYMPTOM_FLAG = TypeAdapter(bool)


def normalize_key(key: str) -> str:
    """Map ``carbonMonoxide`` or ``carbon_monoxide`` to ``carbon_monoxide``."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def now_ms() -> int:
    return int(time.time() * 1000)


class BiomarkerStatus(str, Enum):
    """Categorical status of one channel against its threshold pair."""
    NORMAL   = "Normal"
    ELEVATED = "Elevated"
    CRITICAL = "Critical"


class RiskLevel(str, Enum):
    """
    Overall urgency of a report.

    Derived from the highest-ranked condition probability:
    >= 80 Critical, >= 50 High, >= 25 Moderate, otherwise Low.
    """
    LOW      = "Low"
    MODERATE = "Moderate"
    HIGH     = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_probability(cls, probability: int) -> "RiskLevel":
        if probability >= 80:
            return cls.CRITICAL
        elif probability >= 50:
            return cls.HIGH
        elif probability >= 25:
            return cls.MODERATE
        return cls.LOW


# ── Channel catalogue ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Channel:
    """One monitored gas with its unit and per-status interpretation text."""
    key: str                 # reading / threshold key, e.g. "carbon_monoxide"
    name: str                # display name, also the history baseline key
    unit: str
    normal: str
    elevated: str
    critical: str
    advisory: Optional[str] = None   # recommendation when the channel is abnormal

    def template(self, status: BiomarkerStatus) -> str:
        if status is BiomarkerStatus.CRITICAL:
            return self.critical
        if status is BiomarkerStatus.ELEVATED:
            return self.elevated
        return self.normal


CHANNELS: Tuple[Channel, ...] = (
    Channel(
        "acetone", "Acetone", "ppm",
        normal="Healthy lipid metabolism.",
        elevated="Lipolysis detected. Potential fasting or pre-diabetes.",
        critical="High volatility. Risk of Ketoacidosis (DKA).",
    ),
    Channel(
        "ammonia", "Ammonia", "ppm",
        normal="Normal urea cycle.",
        elevated="Protein metabolism imbalance / early hepatic stress.",
        critical="Toxic levels. Severe liver/kidney dysfunction risk.",
    ),
    Channel(
        "sulfur", "Sulfur", "ppm",
        normal="No bacterial overgrowth.",
        elevated="VSCs present. Suggests oral/throat infection.",
        critical="High VSCs. Indicator of H. pylori or periodontal disease.",
    ),
    Channel(
        "ethanol", "Ethanol", "ppm",
        normal="No alcohol metabolites.",
        elevated="Trace metabolites (Fermentation/Ingestion).",
        critical="High toxicity. Intoxication or Auto-Brewery Syndrome.",
        advisory="Toxicology: Confirm blood alcohol level and rule out auto-brewery syndrome.",
    ),
    Channel(
        "ether", "Ether", "ppm",
        normal="No chemical traces detected.",
        elevated="Trace exposure. Check environment for solvents.",
        critical="Dangerous exposure levels. Respiratory risk.",
    ),
    Channel(
        "hydrogen", "Hydrogen", "ppm",
        normal="Normal gut fermentation.",
        elevated="Rapid carbohydrate fermentation in small intestine.",
        critical="Strong indicator of SIBO (Hydrogen-dominant).",
    ),
    Channel(
        "methane", "Methane", "ppm",
        normal="Normal archaea activity.",
        elevated="Slowed transit time indicated.",
        critical="Strong indicator of SIBO (Methane-dominant) / IMO.",
    ),
    Channel(
        "isoprene", "Isoprene", "ppb",
        normal="Normal cholesterol synthesis.",
        elevated="Elevated metabolic stress or cholesterol synthesis.",
        critical="High oxidative stress. Potential severe sleep apnea indicator.",
    ),
    Channel(
        "carbon_monoxide", "Carbon Monoxide", "ppm",
        normal="Normal environmental levels.",
        elevated="Exposure detected (Passive smoke / City pollution).",
        critical="Toxic exposure. Potential localized combustion leak.",
    ),
    Channel(
        "nitric_oxide", "Nitric Oxide", "ppb",
        normal="Healthy airway inflammation levels.",
        elevated="Mild airway inflammation detected.",
        critical="Severe airway inflammation. Strong asthma/allergy indicator.",
    ),
)

CHANNELS_BY_KEY: Mapping[str, Channel] = MappingProxyType({c.key: c for c in CHANNELS})
CHANNELS_BY_NAME: Mapping[str, Channel] = MappingProxyType({c.name: c for c in CHANNELS})


# ── Inputs ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SensorReadings:
    """
    Immutable snapshot of the gas sensor array.

    Gas channels are in the unit declared by the channel catalogue
    (ppm, or ppb for isoprene and nitric oxide).  ``temperature`` is in
    degrees Celsius, ``humidity`` in percent, ``timestamp`` in epoch ms.
    """
    acetone: float
    ammonia: float
    sulfur: float
    ethanol: float
    ether: float
    hydrogen: float
    methane: float
    isoprene: float
    carbon_monoxide: float
    nitric_oxide: float
    temperature: float = 36.5
    humidity: float = 45.0
    timestamp: int = field(default_factory=now_ms)

    def value(self, channel_key: str) -> Optional[float]:
        return getattr(self, channel_key, None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SensorReadings":
        """
        Build a snapshot from a mapping with snake_case or camelCase keys.

        Raises:
            InvalidReadingError: a gas channel is absent or not numeric.
        """
        normalized = {normalize_key(k): v for k, v in data.items()}
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in normalized or normalized[f.name] is None:
                if f.name in CHANNELS_BY_KEY:
                    raise InvalidReadingError(
                        f"Missing value for channel '{f.name}'", channel=f.name
                    )
                continue
            raw = normalized[f.name]
            try:
                kwargs[f.name] = int(raw) if f.name == "timestamp" else float(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidReadingError(
                    f"Non-numeric value {raw!r} for '{f.name}'", channel=f.name
                ) from exc
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {to_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SymptomState:
    """Patient-reported symptom flags over a closed vocabulary."""
    thirst: bool = False
    fatigue: bool = False
    frequent_urination: bool = False
    nausea: bool = False
    dizziness: bool = False
    confusion: bool = False
    abdominal_pain: bool = False
    shortness_of_breath: bool = False
    chest_pain: bool = False
    night_sweats: bool = False
    unexplained_weight_loss: bool = False
    dry_cough: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "SymptomState":
        """
        Build the flags from a mapping with snake_case or camelCase keys.

        Unknown symptom keys are ignored and ``None`` counts as not reported.

        Raises:
            InvalidSymptomError: a known symptom has a value that is not a boolean.
        """
        known = {f.name for f in fields(cls)}
        flags = {}
        for key, value in (data or {}).items():
            name = normalize_key(key)
            if name not in known or value is None:
                continue
            try:
                flags[name] = _SYMPTOM_FLAG.validate_python(value)
            except ValidationError as exc:
                raise InvalidSymptomError(
                    f"Symptom '{name}' expects a boolean, got {value!r}", symptom=name
                ) from exc
        return cls(**flags)

    def is_set(self, symptom: str) -> bool:
        return bool(getattr(self, symptom, False))

    def active(self) -> List[str]:
        """Keys of the set flags, in vocabulary order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    @staticmethod
    def label(symptom: str) -> str:
        return symptom.replace("_", " ")

    def to_dict(self) -> Dict[str, bool]:
        return {to_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ThresholdConfig:
    """Warning / critical limits for one channel (0 <= warning <= critical)."""
    warning: float
    critical: float

    def __post_init__(self):
        if not (0 <= self.warning <= self.critical):
            raise ConfigurationError(
                f"Invalid threshold pair warning={self.warning} critical={self.critical}; "
                f"expected 0 <= warning <= critical"
            )

    def to_dict(self) -> Dict[str, float]:
        return {"warning": self.warning, "critical": self.critical}


AppThresholds = Dict[str, ThresholdConfig]

DEFAULT_THRESHOLDS: Mapping[str, ThresholdConfig] = MappingProxyType({
    "acetone":         ThresholdConfig(1.8, 5.0),     # diabetes
    "ammonia":         ThresholdConfig(0.8, 2.0),     # kidney / liver
    "sulfur":          ThresholdConfig(0.5, 1.0),     # infection
    "ethanol":         ThresholdConfig(50, 200),      # intoxication
    "ether":           ThresholdConfig(10, 50),       # chemical exposure
    "hydrogen":        ThresholdConfig(20, 50),       # SIBO
    "methane":         ThresholdConfig(10, 30),       # SIBO (constipation)
    "isoprene":        ThresholdConfig(200, 500),     # stress / cholesterol, ppb
    "carbon_monoxide": ThresholdConfig(5, 9),         # smoker / pollution
    "nitric_oxide":    ThresholdConfig(25, 50),       # asthma / inflammation, ppb
})


def default_thresholds() -> AppThresholds:
    return dict(DEFAULT_THRESHOLDS)


def parse_thresholds(data: Mapping[str, Any]) -> AppThresholds:
    """
    Coerce a mapping of ``channel -> {warning, critical}`` into AppThresholds.

    Accepts ThresholdConfig values or plain dicts, and camelCase channel keys.

    Raises:
        ConfigurationError: an entry is malformed or violates 0 <= warning <= critical.
    """
    thresholds: AppThresholds = {}
    for raw_key, entry in data.items():
        key = normalize_key(raw_key)
        if isinstance(entry, ThresholdConfig):
            thresholds[key] = entry
            continue
        try:
            warning = float(entry["warning"])
            critical = float(entry["critical"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Malformed threshold entry for '{key}': {entry!r}", channel=key
            ) from exc
        try:
            thresholds[key] = ThresholdConfig(warning, critical)
        except ConfigurationError as exc:
            raise ConfigurationError(exc.message, channel=key) from exc
    return thresholds


def require_channels(thresholds: Mapping[str, ThresholdConfig]) -> None:
    """Raise ConfigurationError naming the first catalogue channel with no threshold."""
    for channel in CHANNELS:
        if channel.key not in thresholds:
            raise ConfigurationError(
                f"No threshold configured for channel '{channel.key}'", channel=channel.key
            )


def thresholds_to_dict(thresholds: Mapping[str, ThresholdConfig]) -> Dict[str, Dict[str, float]]:
    """Wire form keyed by camelCase channel name (``carbonMonoxide``)."""
    return {to_camel(key): cfg.to_dict() for key, cfg in thresholds.items()}


# ── Outputs ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BiomarkerInsight:
    """Evaluated status of one channel."""
    name: str
    value: float
    unit: str
    status: BiomarkerStatus
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "unit": self.unit,
            "status": self.status.value,
            "interpretation": self.interpretation,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BiomarkerInsight":
        return cls(
            name=data["name"],
            value=float(data["value"]),
            unit=data["unit"],
            status=BiomarkerStatus(data["status"]),
            interpretation=data["interpretation"],
        )


@dataclass(frozen=True)
class DiseaseLikelihood:
    """One differential-diagnosis candidate, probability in 0..100."""
    name: str
    probability: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "probability": self.probability}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DiseaseLikelihood":
        return cls(name=data["name"], probability=int(data["probability"]))


RECOMMENDATION_DELIMITER = "||"


@dataclass(frozen=True)
class AnalysisReport:
    """
    Terminal artifact of one analysis and the unit stored in history.

    ``explanation`` is newline-separated and carries ``**bold**`` markers;
    ``recommendation`` joins discrete items with ``||``.
    """
    id: str
    timestamp: int
    risk_level: RiskLevel
    summary: str
    diseases: Tuple[DiseaseLikelihood, ...]
    explanation: str
    recommendation: str
    biomarker_insights: Tuple[BiomarkerInsight, ...]

    @property
    def recommendations(self) -> List[str]:
        return self.recommendation.split(RECOMMENDATION_DELIMITER)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "riskLevel": self.risk_level.value,
            "summary": self.summary,
            "diseases": [d.to_dict() for d in self.diseases],
            "explanation": self.explanation,
            "recommendation": self.recommendation,
            "biomarkerInsights": [i.to_dict() for i in self.biomarker_insights],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisReport":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            risk_level=RiskLevel(data["riskLevel"]),
            summary=data["summary"],
            diseases=tuple(DiseaseLikelihood.from_dict(d) for d in data["diseases"]),
            explanation=data["explanation"],
            recommendation=data["recommendation"],
            biomarker_insights=tuple(
                BiomarkerInsight.from_dict(i) for i in data["biomarkerInsights"]
            ),
        )
