"""Domain types for the risk intelligence engine.

Enums and result dataclasses shared by the factor aggregator, trend
analyzer, anomaly detector, forecast engine and rating aggregator.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from uuid_utils import uuid7

from vendoriq.core.exceptions import InputValidationError


def _new_id() -> str:
    return str(uuid7())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Enums
# =============================================================================


class RiskLevel(str, Enum):
    """Risk level classification."""

    LOW = "low"  # 0-39
    MEDIUM = "medium"  # 40-59
    HIGH = "high"  # 60-79
    CRITICAL = "critical"  # 80-100


class RiskCategory(str, Enum):
    """Category a risk factor belongs to."""

    SECURITY = "security"
    COMPLIANCE = "compliance"
    OPERATIONAL = "operational"
    FINANCIAL = "financial"
    REPUTATIONAL = "reputational"


class AssessmentType(str, Enum):
    """Subject scope of a risk assessment."""

    ASSET_RISK = "asset_risk"
    VENDOR_RISK = "vendor_risk"
    RELATIONSHIP_RISK = "relationship_risk"
    COMBINED_RISK = "combined_risk"


class AssessmentStatus(str, Enum):
    """Review status of a risk assessment."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# Allowed review transitions; approved and rejected are terminal
ASSESSMENT_TRANSITIONS: dict[AssessmentStatus, frozenset[AssessmentStatus]] = {
    AssessmentStatus.DRAFT: frozenset({AssessmentStatus.PENDING_REVIEW, AssessmentStatus.REJECTED}),
    AssessmentStatus.PENDING_REVIEW: frozenset(
        {AssessmentStatus.APPROVED, AssessmentStatus.REJECTED}
    ),
    AssessmentStatus.APPROVED: frozenset(),
    AssessmentStatus.REJECTED: frozenset(),
}


class FactorTrend(str, Enum):
    """Direction a prediction factor is moving in."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class AnomalyType(str, Enum):
    """Types of behavioral anomalies detected for a vendor."""

    UNUSUAL_RESPONSE = "unusual_response"
    PATTERN_DEVIATION = "pattern_deviation"
    RISK_SPIKE = "risk_spike"
    COMPLIANCE_GAP = "compliance_gap"


class Severity(str, Enum):
    """Severity of a detected anomaly."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OverallTrend(str, Enum):
    """Direction of an organization's risk over a trend window."""

    IMPROVING = "improving"
    STABLE = "stable"
    DETERIORATING = "deteriorating"


class TrendWindow(str, Enum):
    """Lookback window for organization risk trends."""

    DAYS_30 = "30d"
    DAYS_90 = "90d"
    YEAR_1 = "1y"

    @property
    def days(self) -> int:
        """Length of the window in days."""
        return {"30d": 30, "90d": 90, "1y": 365}[self.value]

    @classmethod
    def parse(cls, value: "str | TrendWindow") -> "TrendWindow":
        """Parse a window string, rejecting anything but 30d, 90d and 1y."""
        try:
            return cls(value)
        except ValueError:
            raise InputValidationError(
                f"Unsupported trend window {value!r}; expected one of 30d, 90d, 1y",
                field="window",
            ) from None


# =============================================================================
# Factor Aggregation Models
# =============================================================================


@dataclass(frozen=True)
class RiskFactor:
    """A named, weighted, scored contributor to a risk score.

    Weights are applied as direct multipliers and need not sum to 1
    across an aggregation.
    """

    id: str
    name: str
    category: RiskCategory
    weight: float
    score: float
    description: str = ""
    evidence: tuple[str, ...] = ()
    mitigation_controls: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.weight <= 1.0:
            raise InputValidationError(
                f"Factor {self.id!r} weight must be within [0, 1], got {self.weight}",
                field="weight",
            )
        if not 0.0 <= self.score <= 100.0:
            raise InputValidationError(
                f"Factor {self.id!r} score must be within [0, 100], got {self.score}",
                field="score",
            )
        object.__setattr__(self, "category", RiskCategory(self.category))
        object.__setattr__(self, "evidence", tuple(self.evidence))
        object.__setattr__(self, "mitigation_controls", tuple(self.mitigation_controls))

    @property
    def contribution(self) -> float:
        """Weighted contribution of this factor to the raw sum."""
        return self.score * self.weight

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "weight": self.weight,
            "score": self.score,
            "description": self.description,
            "evidence": list(self.evidence),
            "mitigation_controls": list(self.mitigation_controls),
        }


@dataclass
class FactorAggregation:
    """Result of aggregating a set of risk factors."""

    score: int = 0
    level: RiskLevel = RiskLevel.LOW
    raw_score: float = 0.0
    recommendations: list[str] = field(default_factory=list)


@dataclass
class RiskAssessment:
    """A scored risk assessment of an asset, vendor, or relationship."""

    assessment_id: str = field(default_factory=_new_id)
    asset_id: str | None = None
    vendor_id: str | None = None
    relationship_id: str | None = None
    assessment_type: AssessmentType = AssessmentType.VENDOR_RISK
    factors: list[RiskFactor] = field(default_factory=list)
    calculated_score: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: list[str] = field(default_factory=list)
    next_due: datetime = field(default_factory=_utcnow)
    assessed_by: str = "system"
    assessed_at: datetime = field(default_factory=_utcnow)
    status: AssessmentStatus = AssessmentStatus.DRAFT

    @property
    def subject_id(self) -> str | None:
        """Most specific subject identifier of this assessment."""
        return self.relationship_id or self.vendor_id or self.asset_id

    @property
    def is_final(self) -> bool:
        """Whether the assessment has reached a terminal review status."""
        return self.status in (AssessmentStatus.APPROVED, AssessmentStatus.REJECTED)

    def transition_to(self, status: AssessmentStatus) -> None:
        """Move the assessment through its review lifecycle.

        Raises:
            InputValidationError: If the transition is not allowed.
        """
        status = AssessmentStatus(status)
        if status not in ASSESSMENT_TRANSITIONS[self.status]:
            raise InputValidationError(
                f"Cannot move assessment from {self.status.value} to {status.value}",
                field="status",
            )
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "assessment_id": self.assessment_id,
            "asset_id": self.asset_id,
            "vendor_id": self.vendor_id,
            "relationship_id": self.relationship_id,
            "assessment_type": self.assessment_type.value,
            "factors": [f.to_dict() for f in self.factors],
            "calculated_score": self.calculated_score,
            "risk_level": self.risk_level.value,
            "recommendations": self.recommendations,
            "next_due": self.next_due.isoformat(),
            "assessed_by": self.assessed_by,
            "assessed_at": self.assessed_at.isoformat(),
            "status": self.status.value,
        }


# =============================================================================
# Prediction Models
# =============================================================================


@dataclass
class PredictionFactor:
    """An explanatory factor attached to a heuristic risk prediction."""

    name: str
    impact: float
    trend: FactorTrend = FactorTrend.STABLE
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "impact": self.impact,
            "trend": self.trend.value,
            "description": self.description,
        }


@dataclass
class RiskPrediction:
    """Heuristic risk prediction for a vendor.

    Regenerated on demand from history; never treated as ground truth.
    """

    prediction_id: str = field(default_factory=_new_id)
    risk_score: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    confidence: float = 0.5
    factors: list[PredictionFactor] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    next_assessment_due: datetime = field(default_factory=_utcnow)
    model_id: str = "risk_prediction_v1"
    predicted_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "prediction_id": self.prediction_id,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "confidence": self.confidence,
            "factors": [f.to_dict() for f in self.factors],
            "recommendations": self.recommendations,
            "next_assessment_due": self.next_assessment_due.isoformat(),
            "model_id": self.model_id,
            "predicted_at": self.predicted_at.isoformat(),
        }


# =============================================================================
# Anomaly Models
# =============================================================================


@dataclass(frozen=True)
class AnomalyDetection:
    """A detected behavioral anomaly. Write-once."""

    anomaly_type: AnomalyType
    severity: Severity
    description: str
    confidence: float
    affected_entities: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    detected_at: datetime = field(default_factory=_utcnow)
    anomaly_id: str = field(default_factory=_new_id)
    model_id: str = "anomaly_detection_v1"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "anomaly_id": self.anomaly_id,
            "anomaly_type": self.anomaly_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "confidence": self.confidence,
            "affected_entities": list(self.affected_entities),
            "recommendations": list(self.recommendations),
            "detected_at": self.detected_at.isoformat(),
            "model_id": self.model_id,
        }


# =============================================================================
# Rating Models
# =============================================================================


@dataclass(frozen=True)
class RatingWeights:
    """Weights applied to the five vendor rating sub-scores."""

    assessment: float = 0.4
    compliance: float = 0.25
    response_time: float = 0.15
    completion_rate: float = 0.1
    security_posture: float = 0.1

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "assessment": self.assessment,
            "compliance": self.compliance,
            "response_time": self.response_time,
            "completion_rate": self.completion_rate,
            "security_posture": self.security_posture,
        }


@dataclass
class VendorRating:
    """Overall vendor rating with its sub-score breakdown."""

    vendor_id: str
    overall_rating: float = 0.0
    assessment_score: float = 0.0
    compliance_score: float = 0.0
    response_time_score: float = 50.0
    completion_rate: float = 0.0
    security_posture_score: float = 0.0
    weights: RatingWeights = field(default_factory=RatingWeights)
    calculated_at: datetime = field(default_factory=_utcnow)

    def breakdown(self) -> dict[str, Any]:
        """Sub-scores and weights, as persisted alongside the rating."""
        return {
            "assessment_score": self.assessment_score,
            "compliance_score": self.compliance_score,
            "response_time_score": self.response_time_score,
            "completion_rate": self.completion_rate,
            "security_posture_score": self.security_posture_score,
            "weights": self.weights.to_dict(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "vendor_id": self.vendor_id,
            "overall_rating": self.overall_rating,
            **self.breakdown(),
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass
class IndustryBenchmark:
    """Rating distribution of approved vendors in one industry."""

    industry: str
    average_rating: float = 0.0
    median_rating: float = 0.0
    percentile_25: float = 0.0
    percentile_75: float = 0.0
    vendor_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "industry": self.industry,
            "average_rating": self.average_rating,
            "median_rating": self.median_rating,
            "percentile_25": self.percentile_25,
            "percentile_75": self.percentile_75,
            "vendor_count": self.vendor_count,
        }


# =============================================================================
# Trend Models
# =============================================================================


@dataclass
class TrendPoint:
    """Portfolio risk state at the end of one day."""

    date: date
    avg_score: float = 0.0
    high_count: int = 0
    critical_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "avg_score": self.avg_score,
            "high_count": self.high_count,
            "critical_count": self.critical_count,
        }


@dataclass
class ForecastPoint:
    """Projected portfolio risk for one future day."""

    date: date
    predicted_score: int
    confidence_interval: tuple[int, int]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "predicted_score": self.predicted_score,
            "confidence_interval": list(self.confidence_interval),
        }


@dataclass
class RiskTrends:
    """Daily risk trend and forecast for an organization."""

    organization_id: str
    window: TrendWindow = TrendWindow.DAYS_90
    overall_trend: OverallTrend = OverallTrend.STABLE
    trend_data: list[TrendPoint] = field(default_factory=list)
    forecast: list[ForecastPoint] = field(default_factory=list)
    generated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "organization_id": self.organization_id,
            "window": self.window.value,
            "overall_trend": self.overall_trend.value,
            "trend_data": [p.to_dict() for p in self.trend_data],
            "forecast": [p.to_dict() for p in self.forecast],
            "generated_at": self.generated_at.isoformat(),
        }
