"""API schemas for risk intelligence endpoints.

Response models mirror the ``to_dict()`` output of the engine's result
types, so routes validate those dictionaries directly.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from vendoriq.risk.types import (
    AnomalyType,
    AssessmentStatus,
    AssessmentType,
    FactorTrend,
    OverallTrend,
    RiskCategory,
    RiskLevel,
    Severity,
    TrendWindow,
)

# =============================================================================
# Request Schemas
# =============================================================================


class RiskScoreRequest(BaseModel):
    """Subject of a risk score computation. At least one id is required."""

    asset_id: str | None = Field(default=None, description="Asset to score")
    vendor_id: str | None = Field(default=None, description="Vendor to score")
    relationship_id: str | None = Field(
        default=None, description="Asset-vendor relationship to score"
    )
    assessed_by: str = Field(default="system", min_length=1, description="Recorded assessor")


class PredictionRequest(BaseModel):
    """Optional context for a vendor risk prediction."""

    asset_id: str | None = Field(default=None, description="Asset the vendor serves")
    relationship_id: str | None = Field(default=None, description="Relationship in scope")


# =============================================================================
# Assessment Schemas
# =============================================================================


class RiskFactorResponse(BaseModel):
    """One weighted factor of a risk assessment."""

    id: str
    name: str
    category: RiskCategory
    weight: float = Field(..., ge=0, le=1)
    score: float = Field(..., ge=0, le=100)
    description: str = ""
    evidence: list[str] = Field(default_factory=list)
    mitigation_controls: list[str] = Field(default_factory=list)


class RiskAssessmentResponse(BaseModel):
    """Computed risk assessment."""

    assessment_id: str = Field(..., description="Assessment identifier")
    asset_id: str | None = None
    vendor_id: str | None = None
    relationship_id: str | None = None
    assessment_type: AssessmentType
    factors: list[RiskFactorResponse] = Field(default_factory=list)
    calculated_score: int = Field(..., ge=0, le=100, description="Aggregated risk score")
    risk_level: RiskLevel
    recommendations: list[str] = Field(default_factory=list)
    next_due: datetime = Field(..., description="When the subject should be reassessed")
    assessed_by: str
    assessed_at: datetime
    status: AssessmentStatus


# =============================================================================
# Prediction Schemas
# =============================================================================


class PredictionFactorResponse(BaseModel):
    """Explanatory factor of a prediction."""

    name: str
    impact: float
    trend: FactorTrend
    description: str = ""


class RiskPredictionResponse(BaseModel):
    """Heuristic risk prediction for a vendor."""

    prediction_id: str
    risk_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    confidence: float = Field(..., ge=0, le=1)
    factors: list[PredictionFactorResponse] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    next_assessment_due: datetime
    model_id: str
    predicted_at: datetime

    model_config = {"protected_namespaces": ()}


# =============================================================================
# Anomaly Schemas
# =============================================================================


class AnomalyResponse(BaseModel):
    """A detected behavioral anomaly."""

    anomaly_id: str
    anomaly_type: AnomalyType
    severity: Severity
    description: str
    confidence: float = Field(..., ge=0, le=1)
    affected_entities: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    detected_at: datetime
    model_id: str

    model_config = {"protected_namespaces": ()}


class AnomalyListResponse(BaseModel):
    """Anomalies detected for a vendor in one pass."""

    vendor_id: str
    anomalies: list[AnomalyResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Number of anomalies detected")


# =============================================================================
# Rating Schemas
# =============================================================================


class RatingWeightsResponse(BaseModel):
    """Weights of the rating sub-scores."""

    assessment: float
    compliance: float
    response_time: float
    completion_rate: float
    security_posture: float


class VendorRatingResponse(BaseModel):
    """Vendor rating with its breakdown."""

    vendor_id: str
    overall_rating: float = Field(..., ge=0, le=100)
    assessment_score: float
    compliance_score: float
    response_time_score: float
    completion_rate: float
    security_posture_score: float
    weights: RatingWeightsResponse
    calculated_at: datetime


class IndustryBenchmarkResponse(BaseModel):
    """Rating distribution of approved vendors in an industry."""

    industry: str
    average_rating: float
    median_rating: float
    percentile_25: float
    percentile_75: float
    vendor_count: int = Field(..., ge=0)


# =============================================================================
# Trend Schemas
# =============================================================================


class TrendPointResponse(BaseModel):
    """Portfolio risk at the end of one day."""

    date: date
    avg_score: float
    high_count: int = Field(..., ge=0)
    critical_count: int = Field(..., ge=0)


class ForecastPointResponse(BaseModel):
    """Projected portfolio risk for one future day."""

    date: date
    predicted_score: int = Field(..., ge=0, le=100)
    confidence_interval: tuple[int, int]


class RiskTrendsResponse(BaseModel):
    """Daily trend series and forecast for an organization."""

    organization_id: str
    window: TrendWindow
    overall_trend: OverallTrend
    trend_data: list[TrendPointResponse] = Field(default_factory=list)
    forecast: list[ForecastPointResponse] = Field(default_factory=list)
    generated_at: datetime


# =============================================================================
# Model Registry Schemas
# =============================================================================


class ModelInfoResponse(BaseModel):
    """Metadata of a heuristic model."""

    model_id: str
    model_name: str
    version: str
    accuracy: float
    features: list[str] = Field(default_factory=list)
    last_trained: datetime
    is_active: bool

    model_config = {"protected_namespaces": ()}


class ModelListResponse(BaseModel):
    """Active heuristic models."""

    models: list[ModelInfoResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class ModelPerformanceResponse(BaseModel):
    """Reported quality figures of a model."""

    model_id: str
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    last_evaluated: datetime

    model_config = {"protected_namespaces": ()}
