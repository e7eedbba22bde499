"""Risk intelligence API endpoints.

Thin routes over RiskIntelligenceEngine:
- POST /risk/score - Score an asset, vendor, relationship or combination
- POST /vendors/{vendor_id}/prediction - Heuristic risk prediction
- POST /vendors/{vendor_id}/anomalies - Behavioral anomaly detection
- POST /vendors/{vendor_id}/rating - Compute and store a vendor rating
- GET /vendors/{vendor_id}/rating - Stored or freshly computed rating
- GET /organizations/{organization_id}/trends - Daily trend and forecast
- GET /industries/{industry}/benchmark - Industry rating distribution
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Body, Depends, Query

from vendoriq.api.dependencies import get_risk_engine
from vendoriq.api.schemas.risk import (
    AnomalyListResponse,
    AnomalyResponse,
    IndustryBenchmarkResponse,
    PredictionRequest,
    RiskAssessmentResponse,
    RiskPredictionResponse,
    RiskScoreRequest,
    RiskTrendsResponse,
    VendorRatingResponse,
)
from vendoriq.risk.engine import RiskIntelligenceEngine, RiskSubject

logger = structlog.get_logger()

router = APIRouter(tags=["risk"])

EngineDep = Annotated[RiskIntelligenceEngine, Depends(get_risk_engine)]


# =============================================================================
# Risk Scores and Predictions
# =============================================================================


@router.post(
    "/risk/score",
    response_model=RiskAssessmentResponse,
    summary="Compute a risk score",
    description="""
    Score an asset, a vendor, an asset-vendor relationship, or any
    combination of them. The resulting assessment is stored as a draft.
    """,
    responses={
        404: {"description": "A named subject does not exist"},
        422: {"description": "No subject given"},
        503: {"description": "History repository unavailable"},
    },
)
async def compute_risk_score(
    request: RiskScoreRequest,
    engine: EngineDep,
) -> RiskAssessmentResponse:
    """Compute and store a risk assessment."""
    subject = RiskSubject(
        asset_id=request.asset_id,
        vendor_id=request.vendor_id,
        relationship_id=request.relationship_id,
    )
    assessment = await engine.compute_risk_score(subject, assessed_by=request.assessed_by)
    return RiskAssessmentResponse.model_validate(assessment.to_dict())


@router.post(
    "/vendors/{vendor_id}/prediction",
    response_model=RiskPredictionResponse,
    summary="Predict vendor risk",
    responses={
        404: {"description": "Vendor not found"},
        503: {"description": "History repository unavailable"},
    },
)
async def predict_risk(
    vendor_id: str,
    engine: EngineDep,
    request: Annotated[PredictionRequest | None, Body()] = None,
) -> RiskPredictionResponse:
    """Predict a vendor's risk from its stored score and recent history."""
    context = request or PredictionRequest()
    prediction = await engine.predict_risk(
        vendor_id,
        asset_id=context.asset_id,
        relationship_id=context.relationship_id,
    )
    return RiskPredictionResponse.model_validate(prediction.to_dict())


@router.post(
    "/vendors/{vendor_id}/anomalies",
    response_model=AnomalyListResponse,
    summary="Detect vendor anomalies",
    responses={
        404: {"description": "Vendor not found"},
        503: {"description": "History repository unavailable"},
    },
)
async def detect_anomalies(
    vendor_id: str,
    engine: EngineDep,
) -> AnomalyListResponse:
    """Run the behavioral anomaly checks for a vendor."""
    anomalies = await engine.detect_anomalies(vendor_id)
    logger.debug("Anomaly endpoint served", vendor_id=vendor_id, total=len(anomalies))
    return AnomalyListResponse(
        vendor_id=vendor_id,
        anomalies=[AnomalyResponse.model_validate(a.to_dict()) for a in anomalies],
        total=len(anomalies),
    )


# =============================================================================
# Ratings and Benchmarks
# =============================================================================


@router.post(
    "/vendors/{vendor_id}/rating",
    response_model=VendorRatingResponse,
    summary="Compute a vendor rating",
    responses={
        404: {"description": "Vendor not found"},
        503: {"description": "History repository unavailable"},
    },
)
async def compute_rating(
    vendor_id: str,
    engine: EngineDep,
) -> VendorRatingResponse:
    """Compute and store a vendor's overall rating."""
    rating = await engine.compute_rating(vendor_id)
    return VendorRatingResponse.model_validate(rating.to_dict())


@router.get(
    "/vendors/{vendor_id}/rating",
    response_model=VendorRatingResponse,
    summary="Get a vendor rating breakdown",
    description="Returns the stored rating, or computes one without storing it.",
    responses={
        404: {"description": "Vendor not found"},
    },
)
async def get_rating_breakdown(
    vendor_id: str,
    engine: EngineDep,
) -> VendorRatingResponse:
    """Get a vendor's rating breakdown."""
    rating = await engine.get_rating_breakdown(vendor_id)
    return VendorRatingResponse.model_validate(rating.to_dict())


@router.get(
    "/industries/{industry}/benchmark",
    response_model=IndustryBenchmarkResponse,
    summary="Get an industry benchmark",
)
async def get_industry_benchmark(
    industry: str,
    engine: EngineDep,
) -> IndustryBenchmarkResponse:
    """Rating distribution of approved vendors in an industry."""
    benchmark = await engine.get_industry_benchmark(industry)
    return IndustryBenchmarkResponse.model_validate(benchmark.to_dict())


# =============================================================================
# Trends
# =============================================================================


@router.get(
    "/organizations/{organization_id}/trends",
    response_model=RiskTrendsResponse,
    summary="Get organization risk trends",
    description="Daily portfolio risk over the window and a 30-day forecast.",
    responses={
        422: {"description": "Unknown window"},
    },
)
async def get_trends(
    organization_id: str,
    engine: EngineDep,
    window: Annotated[str, Query(description="Trend window: 30d, 90d or 1y")] = "90d",
) -> RiskTrendsResponse:
    """Get an organization's risk trends."""
    trends = await engine.get_trends(organization_id, window)
    return RiskTrendsResponse.model_validate(trends.to_dict())
