"""
Breath Analysis API Models

Wire names are camelCase (``carbonMonoxide``, ``riskLevel``); snake_case is
accepted on input as well.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SensorReadingsInput(CamelModel):
    """Gas channel values (ppm, isoprene / nitric oxide in ppb)."""
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
    timestamp: Optional[int] = None


class ThresholdInput(CamelModel):
    warning: float
    critical: float


class AnalysisRequest(CamelModel):
    """Request for one breath analysis."""
    readings: SensorReadingsInput
    symptoms: Dict[str, bool] = Field(default_factory=dict, description="Symptom flags; unknown keys are ignored")
    thresholds: Optional[Dict[str, ThresholdInput]] = Field(
        default=None, description="Overrides the stored thresholds for this request only"
    )


class BiomarkerInsightResponse(CamelModel):
    name: str
    value: float
    unit: str
    status: str
    interpretation: str


class DiseaseLikelihoodResponse(CamelModel):
    name: str
    probability: int


class AnalysisReportResponse(CamelModel):
    """Finished analysis report."""
    id: str
    timestamp: int
    risk_level: str
    summary: str
    diseases: List[DiseaseLikelihoodResponse]
    explanation: str
    recommendation: str
    biomarker_insights: List[BiomarkerInsightResponse]


class ChannelResponse(CamelModel):
    key: str
    name: str
    unit: str


class HealthResponse(CamelModel):
    """Health status response."""
    status: str
    version: str
    uptime_seconds: float
    reports_stored: int
    timestamp: str
