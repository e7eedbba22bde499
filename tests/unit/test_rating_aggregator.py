"""Unit tests for the RatingAggregator."""

import pytest

from factories import FIXED_NOW, make_assessment
from vendoriq.repository.records import AssessmentSource, VendorProfile
from vendoriq.risk.rating_aggregator import (
    RatingAggregator,
    RatingConfig,
    create_rating_aggregator,
    median,
    percentile,
)
from vendoriq.risk.types import RatingWeights


@pytest.fixture
def aggregator() -> RatingAggregator:
    """Create a default rating aggregator."""
    return RatingAggregator()


@pytest.fixture
def rated_history():
    """Four completed questionnaires, one outstanding, one proactive review."""
    return [
        make_assessment(10, score=80),
        make_assessment(40, score=80),
        make_assessment(70, score=80),
        make_assessment(100, score=80),
        make_assessment(5, score=None, status="sent"),
        make_assessment(20, score=90, source=AssessmentSource.PROACTIVE, response_days=60),
    ]


# =============================================================================
# Sub-score Tests
# =============================================================================


class TestSubScores:
    """Tests for the individual rating sub-scores."""

    @pytest.mark.parametrize(
        "status,expected",
        [("compliant", 100.0), ("partial", 60.0), ("non_compliant", 20.0), (None, 20.0)],
    )
    def test_compliance_score(
        self, aggregator: RatingAggregator, status: str | None, expected: float
    ) -> None:
        assert aggregator.compliance_score(status) == expected

    def test_assessment_score_uses_all_sources(
        self, aggregator: RatingAggregator, rated_history
    ) -> None:
        assert aggregator.assessment_score(rated_history) == 82.0

    def test_assessment_score_without_history(self, aggregator: RatingAggregator) -> None:
        assert aggregator.assessment_score([]) == 0.0

    def test_completion_rate(self, aggregator: RatingAggregator) -> None:
        """Test 8 of 10 questionnaires completed gives 80%."""
        assessments = [make_assessment(i) for i in range(8)] + [
            make_assessment(i, score=None, status="sent") for i in range(8, 10)
        ]
        assessments.append(make_assessment(3, source=AssessmentSource.PROACTIVE, status="sent"))

        assert aggregator.completion_rate(assessments) == 80.0

    def test_completion_rate_without_questionnaires(self, aggregator: RatingAggregator) -> None:
        assessments = [make_assessment(3, source=AssessmentSource.PROACTIVE)]
        assert aggregator.completion_rate(assessments) == 0.0

    @pytest.mark.parametrize(
        "response_days,expected",
        [(2, 100.0), (3, 100.0), (5, 80.0), (10, 60.0), (20, 40.0), (40, 20.0)],
    )
    def test_response_time_bands(
        self, aggregator: RatingAggregator, response_days: float, expected: float
    ) -> None:
        assessments = [make_assessment(50, response_days=response_days)]
        assert aggregator.response_time_score(assessments) == expected

    def test_response_time_without_data(self, aggregator: RatingAggregator) -> None:
        assessments = [make_assessment(5, score=None, status="sent")]
        assert aggregator.response_time_score(assessments) == 50.0

    def test_response_time_ignores_proactive(self, aggregator: RatingAggregator) -> None:
        assessments = [make_assessment(80, source=AssessmentSource.PROACTIVE, response_days=60)]
        assert aggregator.response_time_score(assessments) == 50.0


# =============================================================================
# Rating Tests
# =============================================================================


class TestRate:
    """Tests for RatingAggregator.rate."""

    def test_full_rating(self, aggregator: RatingAggregator, rated_history) -> None:
        """Test 82*0.4 + 100*0.25 + 80*0.15 + 80*0.1 + 91*0.1 = 86.9."""
        vendor = VendorProfile(vendor_id="vendor-1", compliance_status="compliant")
        rating = aggregator.rate(vendor, rated_history, now=FIXED_NOW)

        assert rating.assessment_score == 82.0
        assert rating.compliance_score == 100.0
        assert rating.response_time_score == 80.0
        assert rating.completion_rate == 80.0
        assert rating.security_posture_score == 91.0
        assert rating.overall_rating == pytest.approx(86.9)
        assert rating.calculated_at == FIXED_NOW
        assert rating.weights == RatingWeights()

    def test_stored_posture_preferred(self, aggregator: RatingAggregator) -> None:
        vendor = VendorProfile(vendor_id="v", compliance_status="partial", security_posture_score=10.0)
        rating = aggregator.rate(vendor, [], now=FIXED_NOW)

        assert rating.security_posture_score == 10.0

    def test_rating_without_history(self, aggregator: RatingAggregator) -> None:
        """Test 0*0.4 + 60*0.25 + 50*0.15 + 0*0.1 + 30*0.1 = 25.5."""
        vendor = VendorProfile(vendor_id="v", compliance_status="partial")
        rating = aggregator.rate(vendor, [], now=FIXED_NOW)

        assert rating.overall_rating == pytest.approx(25.5)

    def test_rating_is_idempotent(self, aggregator: RatingAggregator, rated_history) -> None:
        vendor = VendorProfile(vendor_id="vendor-1", compliance_status="compliant")
        first = aggregator.rate(vendor, rated_history, now=FIXED_NOW)
        second = aggregator.rate(vendor, rated_history, now=FIXED_NOW)

        assert first.to_dict() == second.to_dict()

    def test_custom_weights(self) -> None:
        aggregator = create_rating_aggregator(
            RatingConfig(
                assessment_weight=0.0,
                compliance_weight=1.0,
                response_time_weight=0.0,
                completion_rate_weight=0.0,
                security_posture_weight=0.0,
            )
        )
        vendor = VendorProfile(vendor_id="v", compliance_status="compliant")
        rating = aggregator.rate(vendor, [], now=FIXED_NOW)

        assert rating.overall_rating == 100.0
        assert rating.weights.compliance == 1.0


# =============================================================================
# Benchmark Tests
# =============================================================================


class TestBenchmark:
    """Tests for industry benchmarks."""

    def test_benchmark_statistics(self, aggregator: RatingAggregator) -> None:
        benchmark = aggregator.benchmark("Financial", [90, 60, 80, 70])

        assert benchmark.industry == "Financial"
        assert benchmark.average_rating == 75.0
        assert benchmark.median_rating == 75.0
        assert benchmark.percentile_25 == 60.0
        assert benchmark.percentile_75 == 80.0
        assert benchmark.vendor_count == 4

    def test_empty_population(self, aggregator: RatingAggregator) -> None:
        benchmark = aggregator.benchmark("Retail", [])

        assert benchmark.to_dict() == {
            "industry": "Retail",
            "average_rating": 0.0,
            "median_rating": 0.0,
            "percentile_25": 0.0,
            "percentile_75": 0.0,
            "vendor_count": 0,
        }

    def test_odd_median(self) -> None:
        assert median([10, 20, 90]) == 20

    def test_percentile_single_value(self) -> None:
        assert percentile([42.0], 25) == 42.0
        assert percentile([42.0], 75) == 42.0
