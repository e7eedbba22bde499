"""Trend Analyzer for vendor risk history and heuristic prediction.

This module provides the TrendAnalyzer that:
1. Computes assessment and risk score trend deltas from recent history
2. Measures response consistency across assessment scores
3. Applies industry benchmark and time-decay adjustments
4. Produces a heuristic forward risk prediction with confidence
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field

from vendoriq.core.logging import get_logger
from vendoriq.repository.records import AssessmentRecord, RiskAssessmentRecord, VendorProfile
from vendoriq.risk.scoring import (
    band_guidance,
    clamp,
    mean,
    next_review_date,
    population_variance,
    round_half_up,
    score_to_risk_level,
)
from vendoriq.risk.types import FactorTrend, PredictionFactor, RiskPrediction

logger = get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================


# Additive risk adjustment by vendor industry
INDUSTRY_BENCHMARKS: dict[str, float] = {
    "Financial": 5,
    "Healthcare": 4,
    "Government": 6,
    "Defense": 7,
    "Technology": 2,
    "Energy": 3,
    "Manufacturing": 1,
}

# (days since newest assessment, penalty), checked in order
TIME_DECAY_STEPS: tuple[tuple[int, float], ...] = (
    (365, 5.0),
    (180, 3.0),
    (90, 1.0),
)
NO_HISTORY_DECAY = 5.0

LOW_RISK_GUIDANCE = ["Maintain current security posture", "Annual review"]


# =============================================================================
# Models
# =============================================================================


@dataclass
class PredictionHistory:
    """History gathered for one heuristic prediction.

    Both lists are newest first.
    """

    vendor: VendorProfile | None = None
    assessments: list[AssessmentRecord] = field(default_factory=list)
    risk_assessments: list[RiskAssessmentRecord] = field(default_factory=list)

    @property
    def assessment_scores(self) -> list[float]:
        """Scores of scored assessments, newest first."""
        return [a.score for a in self.assessments if a.score is not None]

    @property
    def risk_scores(self) -> list[float]:
        return [r.score for r in self.risk_assessments]

    @property
    def completion_rate(self) -> float:
        """Percentage of fetched assessments that are completed."""
        if not self.assessments:
            return 0.0
        completed = sum(1 for a in self.assessments if a.is_completed)
        return completed / len(self.assessments) * 100


class TrendConfig(BaseModel):
    """Configuration for the trend analyzer."""

    # Trend deltas
    trend_window: int = Field(default=3, ge=1, le=20, description="Records per trend slice")
    assessment_trend_weight: float = Field(
        default=0.10, ge=0.0, le=1.0, description="Weight of assessment score delta"
    )
    risk_trend_weight: float = Field(
        default=0.15, ge=0.0, le=1.0, description="Weight of risk score delta"
    )

    # Adjustment weights
    consistency_weight: float = Field(
        default=1.0, ge=0.0, le=10.0, description="Multiplier on the consistency term"
    )
    benchmark_weight: float = Field(
        default=1.0, ge=0.0, le=10.0, description="Multiplier on the industry benchmark"
    )
    decay_weight: float = Field(
        default=1.0, ge=0.0, le=10.0, description="Multiplier on the time-decay penalty"
    )

    # Prediction
    base_score: float = Field(
        default=50.0, ge=0.0, le=100.0, description="Base score when vendor has none stored"
    )
    min_consistency_samples: int = Field(
        default=3, ge=2, description="Scores needed to measure consistency"
    )
    recent_days: int = Field(default=90, ge=1, description="Age of data counted as recent")
    completion_target: float = Field(
        default=70.0, ge=0.0, le=100.0, description="Completion rate below which to recommend"
    )


# =============================================================================
# Trend Analyzer
# =============================================================================


class TrendAnalyzer:
    """Analyzes vendor history to derive trends and a heuristic prediction.

    All history sequences are ordered newest first.

    Example:
        ```python
        analyzer = TrendAnalyzer()
        prediction = analyzer.heuristic_prediction(history)
        print(prediction.risk_score, prediction.confidence)
        ```
    """

    def __init__(self, config: TrendConfig | None = None):
        """Initialize the trend analyzer.

        Args:
            config: Analyzer configuration.
        """
        self.config = config or TrendConfig()

    # -------------------------------------------------------------------------
    # Trend deltas
    # -------------------------------------------------------------------------

    def assessment_trend(self, scores: Sequence[float]) -> float:
        """Weighted change between recent and older assessment scores."""
        return self._trend_delta(scores, self.config.assessment_trend_weight)

    def risk_trend(self, scores: Sequence[float]) -> float:
        """Weighted change between recent and older risk scores."""
        return self._trend_delta(scores, self.config.risk_trend_weight)

    def _trend_delta(self, scores: Sequence[float], weight: float) -> float:
        if len(scores) < 2:
            return 0.0
        window = self.config.trend_window
        recent = scores[:window]
        older = scores[window : window * 2]
        # Fewer than window+1 records leaves nothing to compare against
        if not older:
            return 0.0
        return (mean(recent) - mean(older)) * weight

    # -------------------------------------------------------------------------
    # Adjustments
    # -------------------------------------------------------------------------

    def response_consistency(self, scores: Sequence[float]) -> float | None:
        """Consistency of assessment scores in [0, 1], None with too few scores."""
        if len(scores) < self.config.min_consistency_samples:
            return None
        return max(0.0, 1 - population_variance(list(scores)) / 100)

    def consistency_term(self, scores: Sequence[float]) -> float:
        """Consistency rescaled to [-5, 5]; 0 when it cannot be measured."""
        consistency = self.response_consistency(scores)
        if consistency is None:
            return 0.0
        return (consistency - 0.5) * 10

    def industry_benchmark(self, industry: str | None) -> float:
        return INDUSTRY_BENCHMARKS.get(industry or "", 0.0)

    def time_decay(self, assessments: Sequence[AssessmentRecord], now: datetime) -> float:
        """Penalty for stale assessment history."""
        if not assessments:
            return NO_HISTORY_DECAY
        days_since = (now - assessments[0].created_at).total_seconds() / 86400
        for threshold, penalty in TIME_DECAY_STEPS:
            if days_since > threshold:
                return penalty
        return 0.0

    def ml_adjustment(self, history: PredictionHistory, now: datetime) -> float:
        """Combined consistency, industry and staleness adjustment."""
        industry = history.vendor.industry if history.vendor else None
        return (
            self.consistency_term(history.assessment_scores) * self.config.consistency_weight
            + self.industry_benchmark(industry) * self.config.benchmark_weight
            + self.time_decay(history.assessments, now) * self.config.decay_weight
        )

    # -------------------------------------------------------------------------
    # Prediction
    # -------------------------------------------------------------------------

    def confidence(self, history: PredictionHistory, now: datetime) -> float:
        """Confidence in a prediction based on how much recent data backs it."""
        confidence = 0.5
        if len(history.assessments) >= 5:
            confidence += 0.2
        if len(history.risk_assessments) >= 3:
            confidence += 0.2

        cutoff = now - timedelta(days=self.config.recent_days)
        has_recent = any(a.created_at >= cutoff for a in history.assessments) or any(
            r.created_at >= cutoff for r in history.risk_assessments
        )
        if has_recent:
            confidence += 0.1

        return round(min(confidence, 1.0), 2)

    def next_assessment_due(self, score: float, now: datetime) -> datetime:
        return next_review_date(score, now)

    def prediction_factors(self, history: PredictionHistory) -> list[PredictionFactor]:
        """Explanatory factors attached to a prediction."""
        compliance_status = history.vendor.compliance_status if history.vendor else None
        completion_rate = history.completion_rate
        term = self.consistency_term(history.assessment_scores)

        return [
            PredictionFactor(
                name="Compliance Status",
                impact=20.0 if compliance_status == "compliant" else 80.0,
                trend=FactorTrend.STABLE,
                description=f"Current compliance status: {compliance_status}",
            ),
            PredictionFactor(
                name="Assessment Completion",
                impact=round_half_up(100 - completion_rate, 2),
                trend=FactorTrend.DECREASING if completion_rate > 80 else FactorTrend.INCREASING,
                description=f"Assessment completion rate: {completion_rate:.1f}%",
            ),
            PredictionFactor(
                name="Response Consistency",
                impact=round_half_up(max(0.0, 50 - term * 10), 2),
                trend=FactorTrend.DECREASING if term > 0 else FactorTrend.INCREASING,
                description=f"Response consistency score: {term:.1f}",
            ),
        ]

    def prediction_recommendations(self, score: float, history: PredictionHistory) -> list[str]:
        recommendations = band_guidance(score) or list(LOW_RISK_GUIDANCE)
        if history.completion_rate < self.config.completion_target:
            recommendations.append("Improve assessment completion rates")
        return recommendations

    def heuristic_prediction(
        self,
        history: PredictionHistory,
        now: datetime | None = None,
    ) -> RiskPrediction:
        """Predict a vendor's risk from its stored score and history trends.

        Args:
            history: Vendor profile and newest-first histories.
            now: Reference time (default: current UTC time).

        Returns:
            RiskPrediction with a clamped integer score.
        """
        now = now or datetime.now(UTC)

        stored = history.vendor.risk_score if history.vendor else None
        base = self.config.base_score if stored is None else stored
        assessment_delta = self.assessment_trend(history.assessment_scores)
        risk_delta = self.risk_trend(history.risk_scores)
        adjustment = self.ml_adjustment(history, now)

        score = clamp(base + assessment_delta + risk_delta + adjustment)
        risk_score = int(round_half_up(score))

        prediction = RiskPrediction(
            risk_score=risk_score,
            risk_level=score_to_risk_level(risk_score),
            confidence=self.confidence(history, now),
            factors=self.prediction_factors(history),
            recommendations=self.prediction_recommendations(risk_score, history),
            next_assessment_due=self.next_assessment_due(risk_score, now),
            predicted_at=now,
        )

        logger.info(
            "Risk prediction generated",
            base_score=base,
            assessment_trend=round(assessment_delta, 2),
            risk_trend=round(risk_delta, 2),
            adjustment=round(adjustment, 2),
            risk_score=risk_score,
            confidence=prediction.confidence,
        )

        return prediction


def create_trend_analyzer(config: TrendConfig | None = None) -> TrendAnalyzer:
    """Create a trend analyzer.

    Args:
        config: Optional analyzer configuration.

    Returns:
        Configured TrendAnalyzer.
    """
    return TrendAnalyzer(config=config)
