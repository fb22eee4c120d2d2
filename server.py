"""
growthcalc Web Server

FastAPI-based HTTP API for BMI evaluation and growth trends. Requests are
assumed to come from an application layer that has already authenticated
the caller; every numeric value is still re-validated by the engine.
"""

import sys
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Setup paths
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from growthcalc.config import GrowthConfig
from growthcalc.engines import GrowthEngine, build_trend, get_default_engine
from growthcalc.errors import GrowthError, InvalidMeasurement, ReferenceDataCorrupt, UnorderedSeries
from growthcalc.log import get_logger, setup_logging
from growthcalc.models import BMIResult, DatedMeasurement, GrowthTrend, Sex

setup_logging(GrowthConfig().log_level)
logger = get_logger("growthcalc.server")


# Create FastAPI app
app = FastAPI(
    title="growthcalc",
    description="growthcalc - Growth-standard BMI and percentile API",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine() -> GrowthEngine:
    """Engine dependency, overridable in tests."""
    return get_default_engine()


def _raise_http(error: GrowthError) -> None:
    if isinstance(error, ReferenceDataCorrupt):
        raise HTTPException(status_code=503, detail=str(error))
    if isinstance(error, (InvalidMeasurement, UnorderedSeries)):
        raise HTTPException(status_code=422, detail=str(error))
    raise HTTPException(status_code=400, detail=str(error))


# Request/Response models
class BMIRequest(BaseModel):
    """Request model for a single BMI evaluation."""
    height_cm: float = Field(..., description="Height in centimeters")
    weight_kg: float = Field(..., description="Weight in kilograms")
    age_years: float = Field(..., description="Age in years, may be fractional")
    sex: str = Field(..., description="Sex (male/female/other)")


class TrendRequest(BaseModel):
    """Request model for a growth trend."""
    measurements: list[DatedMeasurement] = Field(default_factory=list,
                                                 description="Measurements, oldest first")
    start_date: Optional[date] = Field(None, description="First date to include")
    end_date: Optional[date] = Field(None, description="Last date to include")


@app.get("/api/health")
async def health_check(engine: GrowthEngine = Depends(get_engine)):
    """Health check endpoint."""
    reference = engine.reference
    return {
        "status": "healthy" if reference is not None else "degraded",
        "pediatric_reference": reference is not None,
        "measures": [m.value for m in reference.measures] if reference is not None else [],
    }


@app.post("/api/bmi", response_model=BMIResult)
def evaluate_bmi(request: BMIRequest, engine: GrowthEngine = Depends(get_engine)):
    """Calculate BMI and its category; children also get a percentile and z-score."""
    try:
        return engine.evaluate(request.height_cm, request.weight_kg, request.age_years, request.sex)
    except GrowthError as e:
        _raise_http(e)


@app.post("/api/trends/growth", response_model=GrowthTrend)
def growth_trend(request: TrendRequest, engine: GrowthEngine = Depends(get_engine)):
    """Growth trend (height, weight, BMI) for one subject's measurements."""
    try:
        return build_trend(
            engine,
            request.measurements,
            start=request.start_date,
            end=request.end_date,
        )
    except GrowthError as e:
        logger.info("Rejected trend request: %s", e)
        _raise_http(e)


@app.get("/api/reference/{sex}")
def reference_curve(
    sex: Sex,
    measure: str = Query("bmi", pattern="^(bmi|weight|height)$"),
    percentiles: str = Query("5,50,85,95", description="Comma-separated percentiles"),
    engine: GrowthEngine = Depends(get_engine),
):
    """Reference values at the given percentiles for each tabulated age."""
    try:
        levels = [float(p) for p in percentiles.split(",") if p.strip()]
        curve = engine.reference_curve(sex, levels, measure)
    except GrowthError as e:
        _raise_http(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"sex": sex.value, "measure": measure, "percentiles": levels, "curve": curve}


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the server."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
