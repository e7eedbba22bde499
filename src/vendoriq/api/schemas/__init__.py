"""API schemas for request/response validation."""

from .errors import APIError, ErrorCode
from .health import HealthResponse, HealthStatus
from .risk import (
    AnomalyListResponse,
    AnomalyResponse,
    ForecastPointResponse,
    IndustryBenchmarkResponse,
    ModelInfoResponse,
    ModelListResponse,
    ModelPerformanceResponse,
    PredictionFactorResponse,
    PredictionRequest,
    RatingWeightsResponse,
    RiskAssessmentResponse,
    RiskFactorResponse,
    RiskPredictionResponse,
    RiskScoreRequest,
    RiskTrendsResponse,
    TrendPointResponse,
    VendorRatingResponse,
)

__all__ = [
    # Error schemas
    "APIError",
    "ErrorCode",
    # Health schemas
    "HealthStatus",
    "HealthResponse",
    # Risk schemas
    "RiskScoreRequest",
    "PredictionRequest",
    "RiskFactorResponse",
    "RiskAssessmentResponse",
    "PredictionFactorResponse",
    "RiskPredictionResponse",
    "AnomalyResponse",
    "AnomalyListResponse",
    "RatingWeightsResponse",
    "VendorRatingResponse",
    "IndustryBenchmarkResponse",
    "TrendPointResponse",
    "ForecastPointResponse",
    "RiskTrendsResponse",
    "ModelInfoResponse",
    "ModelListResponse",
    "ModelPerformanceResponse",
]
