from .analysis import (
    SensorReadingsInput,
    ThresholdInput,
    AnalysisRequest,
    BiomarkerInsightResponse,
    DiseaseLikelihoodResponse,
    AnalysisReportResponse,
    ChannelResponse,
    HealthResponse,
)

__all__ = [
    "SensorReadingsInput",
    "ThresholdInput",
    "AnalysisRequest",
    "BiomarkerInsightResponse",
    "DiseaseLikelihoodResponse",
    "AnalysisReportResponse",
    "ChannelResponse",
    "HealthResponse",
]
