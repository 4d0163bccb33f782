"""
OdourSense Breath Analysis - FastAPI Application

Main application entry point with API endpoints for:
- Breath analysis (differential-diagnosis report)
- Report history
- Channel threshold configuration
- Simulated sensor readings
"""
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from typing import Dict, List
from datetime import datetime
import asyncio

from odoursense.config import settings
from odoursense.core.base import (
    CHANNELS,
    AnalysisReport,
    SensorReadings,
    SymptomState,
    thresholds_to_dict,
)
from odoursense.services import AnalysisService
from odoursense.utils import get_logger, setup_logging
from odoursense.utils.exceptions import (
    ConfigurationError,
    InvalidReadingError,
    InvalidSymptomError,
    OdourSenseError,
    UpstreamUnavailableError,
)
from odoursense.models import (
    AnalysisRequest,
    AnalysisReportResponse,
    ChannelResponse,
    HealthResponse,
    SensorReadingsInput,
    ThresholdInput,
)

setup_logging(settings.log_level, settings.log_file)
logger = get_logger(__name__)


# ---- FastAPI Application ----

app = FastAPI(
    title=settings.app_name,
    description="Breath biomarker evaluation and differential-diagnosis scoring",
    version=settings.app_version,
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

START_TIME = datetime.now()

# ---- Service Singleton ----
_analysis_service = AnalysisService.from_settings(settings)


def get_service() -> AnalysisService:
    return _analysis_service


# ---- Error Mapping ----

_STATUS_BY_ERROR = {
    InvalidReadingError: 422,
    InvalidSymptomError: 422,
    ConfigurationError: 422,
    UpstreamUnavailableError: 503,
}


@app.exception_handler(OdourSenseError)
async def odoursense_error_handler(request: Request, exc: OdourSenseError):
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    logger.warning(f"{request.method} {request.url.path} failed [{exc.code}]: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def _report_response(report: AnalysisReport) -> AnalysisReportResponse:
    return AnalysisReportResponse.model_validate(report.to_dict())


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(service: AnalysisService = Depends(get_service)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        reports_stored=await run_in_threadpool(service.report_count),
        timestamp=datetime.now().isoformat(),
    )


@app.get(f"{settings.api_prefix}/channels", response_model=List[ChannelResponse], tags=["Reference"])
async def list_channels():
    """Monitored gas channels and their units."""
    return [ChannelResponse(key=c.key, name=c.name, unit=c.unit) for c in CHANNELS]


@app.get(f"{settings.api_prefix}/thresholds", response_model=Dict[str, ThresholdInput], tags=["Thresholds"])
async def get_thresholds(service: AnalysisService = Depends(get_service)):
    """Current warning / critical limits per channel."""
    return thresholds_to_dict(await run_in_threadpool(service.current_thresholds))


@app.put(f"{settings.api_prefix}/thresholds", response_model=Dict[str, ThresholdInput], tags=["Thresholds"])
async def put_thresholds(
    thresholds: Dict[str, ThresholdInput],
    service: AnalysisService = Depends(get_service),
):
    """Replace the full threshold set."""
    saved = await run_in_threadpool(
        service.update_thresholds, {k: v.model_dump() for k, v in thresholds.items()}
    )
    return thresholds_to_dict(saved)


@app.post(f"{settings.api_prefix}/thresholds/reset", response_model=Dict[str, ThresholdInput], tags=["Thresholds"])
async def reset_thresholds(service: AnalysisService = Depends(get_service)):
    """Restore the default thresholds."""
    return thresholds_to_dict(await run_in_threadpool(service.reset_thresholds))


@app.post(f"{settings.api_prefix}/analyze", response_model=AnalysisReportResponse, tags=["Analysis"])
async def analyze(request: AnalysisRequest, service: AnalysisService = Depends(get_service)):
    """
    Run breath analysis on one sensor snapshot and store the report.
    """
    if settings.analysis_latency_seconds > 0:
        await asyncio.sleep(settings.analysis_latency_seconds)

    readings = SensorReadings.from_dict(request.readings.model_dump(exclude_none=True))
    symptoms = SymptomState.from_mapping(request.symptoms)
    thresholds = (
        {k: v.model_dump() for k, v in request.thresholds.items()}
        if request.thresholds is not None else None
    )
    # Store I/O may hit disk; keep it off the event loop
    report = await run_in_threadpool(service.run_analysis, readings, symptoms, thresholds)
    return _report_response(report)


@app.get(f"{settings.api_prefix}/history", response_model=List[AnalysisReportResponse], tags=["Analysis"])
async def get_history(service: AnalysisService = Depends(get_service)):
    """All stored reports, oldest first."""
    reports = await run_in_threadpool(service.history)
    return [_report_response(r) for r in reports]


@app.get(f"{settings.api_prefix}/sensors/simulate", response_model=SensorReadingsInput, tags=["Sensors"])
async def simulate_reading(service: AnalysisService = Depends(get_service)):
    """Next snapshot from the synthetic drift sensor."""
    return SensorReadingsInput.model_validate(service.simulate_reading().to_dict())


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
