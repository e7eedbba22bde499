"""Rating Aggregator for vendor ratings and industry benchmarks.

This module provides the RatingAggregator that:
1. Scores assessments, compliance, response time, completion and posture
2. Combines the five sub-scores into a weighted overall rating
3. Benchmarks a rating population for an industry
"""

import math
from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from vendoriq.core.logging import get_logger
from vendoriq.repository.records import AssessmentRecord, AssessmentSource, VendorProfile
from vendoriq.risk.scoring import clamp, mean, round_half_up
from vendoriq.risk.types import IndustryBenchmark, RatingWeights, VendorRating

logger = get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================


COMPLIANCE_STATUS_SCORES: dict[str, float] = {
    "compliant": 100.0,
    "partial": 60.0,
}
DEFAULT_COMPLIANCE_SCORE = 20.0

# (max average response days, score), checked in order
RESPONSE_TIME_BANDS: tuple[tuple[float, float], ...] = (
    (3, 100.0),
    (7, 80.0),
    (14, 60.0),
    (30, 40.0),
)
SLOW_RESPONSE_SCORE = 20.0
NO_RESPONSE_DATA_SCORE = 50.0


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile of an ascending sequence, 0 when empty."""
    if not sorted_values:
        return 0.0
    index = math.ceil(p / 100 * len(sorted_values)) - 1
    index = max(0, min(index, len(sorted_values) - 1))
    return sorted_values[index]


def median(sorted_values: Sequence[float]) -> float:
    """Median of an ascending sequence, averaging the middle pair for even sizes."""
    n = len(sorted_values)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 0:
        return (sorted_values[mid - 1] + sorted_values[mid]) / 2
    return sorted_values[mid]


class RatingConfig(BaseModel):
    """Configuration for the rating aggregator."""

    assessment_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    compliance_weight: float = Field(default=0.25, ge=0.0, le=1.0)
    response_time_weight: float = Field(default=0.15, ge=0.0, le=1.0)
    completion_rate_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    security_posture_weight: float = Field(default=0.1, ge=0.0, le=1.0)

    @property
    def weights(self) -> RatingWeights:
        return RatingWeights(
            assessment=self.assessment_weight,
            compliance=self.compliance_weight,
            response_time=self.response_time_weight,
            completion_rate=self.completion_rate_weight,
            security_posture=self.security_posture_weight,
        )


# =============================================================================
# Rating Aggregator
# =============================================================================


class RatingAggregator:
    """Computes a vendor's overall rating from five weighted sub-scores.

    Recomputing with unchanged inputs yields the same rating to 2 decimals.

    Example:
        ```python
        aggregator = RatingAggregator()
        rating = aggregator.rate(vendor_profile, assessments)
        print(rating.overall_rating)
        ```
    """

    def __init__(self, config: RatingConfig | None = None):
        """Initialize the rating aggregator.

        Args:
            config: Rating configuration.
        """
        self.config = config or RatingConfig()

    def assessment_score(self, assessments: Sequence[AssessmentRecord]) -> float:
        """Mean score of completed assessments from any source."""
        scores = [a.score for a in assessments if a.is_completed and a.score is not None]
        if not scores:
            return 0.0
        return round_half_up(mean(scores), 2)

    def compliance_score(self, compliance_status: str | None) -> float:
        return COMPLIANCE_STATUS_SCORES.get(compliance_status or "", DEFAULT_COMPLIANCE_SCORE)

    def response_time_score(self, assessments: Sequence[AssessmentRecord]) -> float:
        """Score average turnaround of completed vendor questionnaires."""
        response_days = [
            days
            for a in assessments
            if a.source == AssessmentSource.VENDOR
            and a.is_completed
            and (days := a.response_days) is not None
        ]
        if not response_days:
            return NO_RESPONSE_DATA_SCORE

        average = mean(response_days)
        for max_days, score in RESPONSE_TIME_BANDS:
            if average <= max_days:
                return score
        return SLOW_RESPONSE_SCORE

    def completion_rate(self, assessments: Sequence[AssessmentRecord]) -> float:
        """Percentage of vendor questionnaires that were completed."""
        vendor_assessments = [a for a in assessments if a.source == AssessmentSource.VENDOR]
        if not vendor_assessments:
            return 0.0
        completed = sum(1 for a in vendor_assessments if a.is_completed)
        return round_half_up(completed / len(vendor_assessments) * 100, 2)

    def rate(
        self,
        profile: VendorProfile,
        assessments: Sequence[AssessmentRecord],
        now: datetime | None = None,
    ) -> VendorRating:
        """Compute a vendor rating.

        Args:
            profile: Vendor profile.
            assessments: Vendor and proactive assessments of the vendor.
            now: Calculation time (default: current UTC time).

        Returns:
            VendorRating with overall rating in [0, 100].
        """
        assessment = self.assessment_score(assessments)
        compliance = self.compliance_score(profile.compliance_status)

        if profile.security_posture_score is not None:
            posture = profile.security_posture_score
        else:
            posture = round_half_up((assessment + compliance) / 2, 2)

        weights = self.config.weights
        rating = VendorRating(
            vendor_id=profile.vendor_id,
            assessment_score=assessment,
            compliance_score=compliance,
            response_time_score=self.response_time_score(assessments),
            completion_rate=self.completion_rate(assessments),
            security_posture_score=posture,
            weights=weights,
            calculated_at=now or datetime.now(UTC),
        )
        weighted = (
            rating.assessment_score * weights.assessment
            + rating.compliance_score * weights.compliance
            + rating.response_time_score * weights.response_time
            + rating.completion_rate * weights.completion_rate
            + rating.security_posture_score * weights.security_posture
        )
        rating.overall_rating = clamp(round_half_up(weighted, 2))

        logger.info(
            "Vendor rating calculated",
            vendor_id=profile.vendor_id,
            overall_rating=rating.overall_rating,
            assessments=len(assessments),
        )

        return rating

    def benchmark(self, industry: str, ratings: Sequence[float]) -> IndustryBenchmark:
        """Summarize the rating distribution of an industry.

        Args:
            industry: Industry name.
            ratings: Overall ratings of approved vendors in the industry.

        Returns:
            IndustryBenchmark; all zeros for an empty population.
        """
        values = sorted(ratings)
        if not values:
            return IndustryBenchmark(industry=industry)

        return IndustryBenchmark(
            industry=industry,
            average_rating=round_half_up(mean(values), 2),
            median_rating=round_half_up(median(values), 2),
            percentile_25=round_half_up(percentile(values, 25), 2),
            percentile_75=round_half_up(percentile(values, 75), 2),
            vendor_count=len(values),
        )


def create_rating_aggregator(config: RatingConfig | None = None) -> RatingAggregator:
    """Create a rating aggregator.

    Args:
        config: Optional rating configuration.

    Returns:
        Configured RatingAggregator.
    """
    return RatingAggregator(config=config)
